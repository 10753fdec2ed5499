import logging
import threading
import time

from config_loader import load_config
from dashboard.agent import dashboard_agent
from logger_config import setup_logging
from plantbuddy_api import PlantBuddyAPI
from runtime.paths import get_config_path
from telemetry.fetcher import TelemetryFetcher
from telemetry.overview_controller import OverviewController
from telemetry.page_controller import EntityPageController


def build_initial_shared_data(config):
    return {
        "log_lock": threading.Lock(),
        "session_logs": [],
        "log_file_path": None,
        "shutdown_event": threading.Event(),
    }


def build_runtime(config, api=None):
    """Wire the collaborator client, the shared fetcher and both page controllers."""
    api = api or PlantBuddyAPI.from_config(config)
    fetcher = TelemetryFetcher(api, max_workers=config["FETCH_MAX_WORKERS"])
    page = EntityPageController(
        api,
        fetcher,
        default_kind=config["PAGE_DEFAULT_SENSOR_KIND"],
        window_start=config["DEFAULT_WINDOW_START"],
    )
    overview = OverviewController(
        api,
        fetcher,
        default_kind=config["OVERVIEW_SENSOR_KIND"],
        window_start=config["DEFAULT_WINDOW_START"],
    )
    return {"api": api, "fetcher": fetcher, "page": page, "overview": overview}


def shutdown_runtime(runtime):
    runtime["page"].shutdown()
    runtime["overview"].shutdown()
    runtime["fetcher"].shutdown()
    runtime["api"].close()


def main():
    config = load_config(get_config_path(__file__))
    shared_data = build_initial_shared_data(config)

    setup_logging(config, shared_data)
    logging.info("Director: starting the application.")

    runtime = build_runtime(config)
    threads = []
    try:
        runtime["overview"].refresh()
        threads = [
            threading.Thread(
                target=dashboard_agent,
                args=(config, shared_data, runtime["page"], runtime["overview"]),
                daemon=True,
            ),
        ]
        for thread in threads:
            thread.start()

        logging.info("Director: all agents started.")

        while not shared_data["shutdown_event"].is_set():
            time.sleep(1)

    except KeyboardInterrupt:
        logging.info("Director: keyboard interrupt received, shutting down...")
    except Exception as exc:
        logging.error("Director: unexpected error: %s", exc)
    finally:
        logging.info("Director: initiating shutdown...")
        shared_data["shutdown_event"].set()

        for thread in threads:
            thread.join(timeout=10)
        shutdown_runtime(runtime)

        logging.info("Director: shutdown complete.")


if __name__ == "__main__":
    main()
