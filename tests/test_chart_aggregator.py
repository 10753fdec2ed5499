import unittest

try:
    import pandas as pd

    from telemetry.chart_aggregator import (
        SERIES_ROLE_THRESHOLD,
        ChartModel,
        append_threshold_overlays,
        create_charts,
        update_charts,
    )
    from telemetry.models import FetchRequest, FetchResult, SensorRange, TimeSeries
    from telemetry.sensor_catalog import THRESHOLD_COLOR, SensorKind
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    pd = None
    _IMPORT_ERROR = exc


class _FixedOffset:
    def __init__(self, *offsets):
        self.offsets = list(offsets)

    def integers(self, low, high):
        return self.offsets.pop(0)


def _series(entity_id, kind, *values):
    points = [
        {"value": value, "timestamp": f"2023-01-0{index + 1}T00:00:00Z"}
        for index, value in enumerate(values)
    ]
    return TimeSeries.from_points(entity_id, kind, points)


@unittest.skipIf(_IMPORT_ERROR is not None, f"aggregator dependencies unavailable: {_IMPORT_ERROR}")
class ChartAggregatorTests(unittest.TestCase):
    def test_scenario_one_point_gives_one_series(self):
        series = _series("p1", "soil-moisture", 42)
        model = create_charts("detail", [series], SensorKind.SOIL_MOISTURE, {"p1": "Fern"})

        self.assertEqual(len(model.series), 1)
        only = model.series[0]
        self.assertEqual(list(zip(only.x, only.y)), [(pd.Timestamp("2023-01-01T00:00:00Z"), 42.0)])
        self.assertEqual(only.label, "Fern")
        self.assertEqual(model.name, "detail")

    def test_one_primary_series_per_input_with_key_labels(self):
        results = [
            FetchResult(FetchRequest("b", SensorKind.HUMIDITY, True), _series("b", "humidity", 1)),
            FetchResult(FetchRequest("a", SensorKind.HUMIDITY, True), _series("a", "humidity", 2)),
        ]
        model = create_charts("overview", results, "humidity", {"a": "Group A", "b": "Group B"}, rng=_FixedOffset(0, 10))

        self.assertEqual([(item.entity_id, item.label) for item in model.series], [("b", "Group B"), ("a", "Group A")])
        self.assertEqual([item.color for item in model.series], ["#00ff00", "#0af50a"])

    def test_label_falls_back_to_entity_id(self):
        model = create_charts("detail", [_series("p9", "light", 1)], "light", {})
        self.assertEqual(model.series[0].label, "p9")

    def test_update_charts_replaces_series(self):
        existing = create_charts("detail", [_series("p1", "humidity", 1, 2)], "humidity")
        updated = update_charts(existing, "detail", [_series("p1", "temperature", 20)], "temperature")
        self.assertEqual(updated.kind, SensorKind.TEMPERATURE)
        self.assertEqual(len(updated.series), 1)
        self.assertEqual(updated.series[0].y, (20.0,))

    def test_overlays_follow_first_series_domain(self):
        model = create_charts("detail", [_series("p1", "humidity", 1, 2, 3)], "humidity")
        ranges = [
            SensorRange(SensorKind.HUMIDITY, min=40, max=80),
            SensorRange(SensorKind.LIGHT, min=1, max=2),
            SensorRange(SensorKind.HUMIDITY, min=40, max=80),
        ]
        with_overlays = append_threshold_overlays(model, ranges, "humidity", "Fern")

        overlays = with_overlays.threshold_series
        self.assertEqual(len(with_overlays.telemetry_series), 1)
        self.assertEqual([item.label for item in overlays], ["Fern max", "Fern min", "Fern max", "Fern min"])
        self.assertEqual(overlays[0].y, (80, 80, 80))
        self.assertEqual(overlays[1].y, (40, 40, 40))
        self.assertEqual(overlays[0].x, model.series[0].x)
        self.assertTrue(all(item.color == THRESHOLD_COLOR and item.role == SERIES_ROLE_THRESHOLD for item in overlays))

    def test_overlays_on_empty_model_have_zero_length(self):
        empty = create_charts("detail", [], "humidity")
        model = append_threshold_overlays(empty, [SensorRange(SensorKind.HUMIDITY, 1, 5)], "humidity", "Fern")
        self.assertEqual(len(model.series), 2)
        self.assertTrue(all(len(item.x) == 0 and len(item.y) == 0 for item in model.series))
        self.assertEqual(empty.x_domain_length, 0)

    def test_non_matching_ranges_leave_model_unchanged(self):
        model = ChartModel("detail", SensorKind.LIGHT)
        self.assertIs(append_threshold_overlays(model, [SensorRange(SensorKind.HUMIDITY)], "light", "x"), model)


if __name__ == "__main__":
    unittest.main()
