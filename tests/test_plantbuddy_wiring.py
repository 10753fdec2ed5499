import os
import unittest
from unittest.mock import patch

from config_loader import API_PASSWORD_ENV_VAR, API_USER_ENV_VAR, load_config
from runtime.paths import get_config_path

try:
    from dash import Dash

    import plantbuddy
    from dashboard.agent import build_dashboard_app
    from telemetry.models import PageState
    from telemetry.sensor_catalog import SensorKind
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    plantbuddy = None
    _IMPORT_ERROR = exc

CONFIG_PATH = get_config_path(__file__)


class _FakePlantBuddyAPI:
    def __init__(self):
        self.closed = False

    def get_plant_ids_names(self):
        return [("p1", "Fern")]

    def get_group_ids_names(self):
        return [("g1", "Herbs")]

    def get_sensor_data(self, entity_id, kind, window, is_group=False):
        return None

    def close(self):
        self.closed = True


@unittest.skipIf(_IMPORT_ERROR is not None, f"runtime dependencies unavailable: {_IMPORT_ERROR}")
class PlantBuddyWiringTests(unittest.TestCase):
    def setUp(self):
        with patch.dict(os.environ, {API_USER_ENV_VAR: "", API_PASSWORD_ENV_VAR: ""}):
            self.config = load_config(CONFIG_PATH)
        self.api = _FakePlantBuddyAPI()
        self.runtime = plantbuddy.build_runtime(self.config, api=self.api)

    def tearDown(self):
        plantbuddy.shutdown_runtime(self.runtime)

    def test_runtime_shares_one_fetcher_between_controllers(self):
        page = self.runtime["page"]
        overview = self.runtime["overview"]

        self.assertIs(page.fetcher, self.runtime["fetcher"])
        self.assertIs(overview.fetcher, self.runtime["fetcher"])
        self.assertEqual(page.default_kind, SensorKind.SOIL_MOISTURE)
        self.assertEqual(overview.default_kind, SensorKind.HUMIDITY)
        self.assertEqual(page.snapshot().state, PageState.AWAITING_SELECTION)
        self.assertEqual(page.list_entities(), [("p1", "Fern")])

    def test_shutdown_closes_api_client(self):
        plantbuddy.shutdown_runtime(self.runtime)
        self.assertTrue(self.api.closed)

    def test_dashboard_app_registers_callbacks(self):
        shared_data = plantbuddy.build_initial_shared_data(self.config)
        app = build_dashboard_app(self.config, shared_data, self.runtime["page"], self.runtime["overview"])

        self.assertIsInstance(app, Dash)
        self.assertIsNotNone(app.layout)
        self.assertGreaterEqual(len(app.callback_map), 10)


if __name__ == "__main__":
    unittest.main()
