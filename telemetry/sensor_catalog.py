"""Supported sensor kinds, their canonical names, and display colors."""

from enum import Enum

import numpy as np

# Upper bound (inclusive) of the per-series color offset.
COLOR_OFFSET_MAX = 100

THRESHOLD_COLOR = "#000000"


class SensorKind(Enum):
    """Enumeration of telemetry categories reported by the collaborator."""
    SOIL_MOISTURE = "soil-moisture"
    HUMIDITY = "humidity"
    TEMPERATURE = "temperature"
    LIGHT = "light"

    @property
    def canonical_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def base_color(self) -> tuple:
        return _BASE_COLORS[self]

    @classmethod
    def from_name(cls, name):
        """Resolve a canonical name (or an existing SensorKind) to a SensorKind."""
        if isinstance(name, cls):
            return name
        text = str(name or "").strip().lower()
        for kind in cls:
            if kind.value == text:
                return kind
        raise ValueError(f"Unknown sensor kind '{name}'. Allowed values: {', '.join(SENSOR_KIND_NAMES)}.")


_DISPLAY_NAMES = {
    SensorKind.SOIL_MOISTURE: "Soil moisture",
    SensorKind.HUMIDITY: "Humidity",
    SensorKind.TEMPERATURE: "Temperature",
    SensorKind.LIGHT: "Light",
}

_BASE_COLORS = {
    SensorKind.SOIL_MOISTURE: (0, 0, 255),
    SensorKind.HUMIDITY: (0, 255, 0),
    SensorKind.TEMPERATURE: (255, 0, 0),
    SensorKind.LIGHT: (255, 200, 0),
}

# Canonical order used for bound editing and default range filling.
SENSOR_KINDS = (
    SensorKind.SOIL_MOISTURE,
    SensorKind.HUMIDITY,
    SensorKind.TEMPERATURE,
    SensorKind.LIGHT,
)
SENSOR_KIND_NAMES = tuple(kind.value for kind in SENSOR_KINDS)


def rgb_to_hex(rgb):
    red, green, blue = (max(0, min(255, int(channel))) for channel in rgb)
    return f"#{red:02x}{green:02x}{blue:02x}"


def shift_color(rgb, offset):
    """Move every channel `offset` steps toward the middle of the 0-255 range."""
    offset = max(0, int(offset))
    return tuple(
        channel + offset if channel < 128 else channel - offset
        for channel in rgb
    )


def offset_color(kind, rng=None) -> str:
    """
    Return a hex color for `kind` with a random offset from its base color.

    Repeated calls give visually distinguishable variants of the same hue.
    Pass a seeded `numpy.random.Generator` (or any object with an
    ``integers(low, high)`` method) to make the result reproducible.
    """
    kind = SensorKind.from_name(kind)
    rng = rng if rng is not None else np.random.default_rng()
    offset = int(rng.integers(0, COLOR_OFFSET_MAX + 1))
    return rgb_to_hex(shift_color(kind.base_color, offset))
