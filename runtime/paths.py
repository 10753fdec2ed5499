"""Locations of the PlantBuddy config file, dashboard assets and log directory."""

import os

CONFIG_FILENAME = "config.yaml"

# Files that mark a directory as the project root.
PROJECT_MARKERS = ("plantbuddy.py", CONFIG_FILENAME)


def _start_dir(anchor_path):
    if anchor_path is None:
        return os.path.dirname(os.path.abspath(__file__))
    path = os.path.abspath(str(anchor_path))
    return os.path.dirname(path) if os.path.isfile(path) else path


def _is_project_root(path):
    return any(os.path.isfile(os.path.join(path, marker)) for marker in PROJECT_MARKERS)


def get_project_root(anchor_path=None):
    """
    Return the nearest directory at or above `anchor_path` holding a project marker.

    `anchor_path` may be a file or a directory. Without a match the parent of
    this `runtime/` package is used.
    """
    current = _start_dir(anchor_path)
    while not _is_project_root(current):
        parent = os.path.dirname(current)
        if parent == current:
            return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        current = parent
    return current


def get_config_path(anchor_path=None):
    return os.path.join(get_project_root(anchor_path), CONFIG_FILENAME)


def get_assets_dir(anchor_path=None):
    return os.path.join(get_project_root(anchor_path), "assets")


def get_logs_dir(anchor_path=None):
    return os.path.join(get_project_root(anchor_path), "logs")
