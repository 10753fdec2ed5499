import unittest
from datetime import datetime, timezone

try:
    import pandas as pd

    from telemetry.models import GroupRecord, PlantRecord, SensorRange, TimeSeries, TimeWindow, canonical_ranges
    from telemetry.sensor_catalog import SensorKind
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    pd = None
    _IMPORT_ERROR = exc


@unittest.skipIf(_IMPORT_ERROR is not None, f"model dependencies unavailable: {_IMPORT_ERROR}")
class TimeWindowTests(unittest.TestCase):
    def test_from_bounds_parses_iso_strings(self):
        window = TimeWindow.from_bounds("2019-01-01T00:00:00.000Z", "2023-05-29T23:00:00.000Z")
        self.assertEqual(window.start, datetime(2019, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(window.start_iso, "2019-01-01T00:00:00.000Z")
        self.assertEqual(window.end_iso, "2023-05-29T23:00:00.000Z")

    def test_from_bounds_rejects_inverted_window(self):
        with self.assertRaises(ValueError):
            TimeWindow.from_bounds("2023-01-02T00:00:00Z", "2023-01-01T00:00:00Z")


@unittest.skipIf(_IMPORT_ERROR is not None, f"model dependencies unavailable: {_IMPORT_ERROR}")
class TimeSeriesTests(unittest.TestCase):
    def test_from_points_orders_by_timestamp(self):
        series = TimeSeries.from_points(
            "p1",
            "humidity",
            [
                {"value": 2, "timestamp": "2023-01-02T00:00:00Z"},
                {"value": 1.5, "timestamp": "2023-01-01T00:00:00Z"},
            ],
        )
        self.assertEqual(series.values, (1.5, 2.0))
        self.assertEqual(series.timestamps[0], pd.Timestamp("2023-01-01T00:00:00Z"))
        self.assertEqual(series.kind, SensorKind.HUMIDITY)
        self.assertEqual(len(series), 2)

    def test_empty_series_is_valid(self):
        series = TimeSeries.from_points("p1", "light", [])
        self.assertTrue(series.is_empty)
        self.assertEqual(series.points(), [])

    def test_from_points_rejects_malformed_points(self):
        for bad in ([{"value": "x", "timestamp": "2023-01-01T00:00:00Z"}], [{"value": True, "timestamp": "2023-01-01"}], [{"value": 1}], ["nope"]):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    TimeSeries.from_points("p1", "light", bad)


@unittest.skipIf(_IMPORT_ERROR is not None, f"model dependencies unavailable: {_IMPORT_ERROR}")
class RecordPayloadTests(unittest.TestCase):
    def test_plant_from_json_with_nested_group(self):
        plant = PlantRecord.from_json(
            {
                "id": 7,
                "name": "Fern",
                "additionalCareTips": ["mist"],
                "plantGroup": {
                    "id": 3,
                    "name": "Shade",
                    "careTips": ["no sun"],
                    "sensorRanges": [
                        {"sensorType": {"name": "humidity"}, "min": 40, "max": 80},
                        {"sensorType": {"name": "pressure"}, "min": 1, "max": 2},
                    ],
                },
            }
        )
        self.assertEqual(plant.id, "7")
        self.assertEqual(plant.group_id, "3")
        self.assertEqual(plant.group.name, "Shade")
        self.assertEqual(plant.group.sensor_ranges, [SensorRange(SensorKind.HUMIDITY, 40, 80)])

    def test_plant_payload_is_camel_case(self):
        plant = PlantRecord(name="Fern", additional_care_tips=["mist"], group_id="3")
        self.assertEqual(
            plant.to_payload(),
            {
                "name": "Fern",
                "description": "",
                "location": "",
                "species": "",
                "additionalCareTips": ["mist"],
                "plantGroupId": "3",
            },
        )

    def test_group_payload_encodes_sensor_ranges(self):
        group = GroupRecord(name="Shade", sensor_ranges=[SensorRange(SensorKind.LIGHT, 1, 9)])
        payload = group.to_payload()
        self.assertEqual(payload["sensorRanges"], [{"sensorType": {"name": "light"}, "min": 1, "max": 9}])
        self.assertEqual(payload["careTips"], [])

    def test_with_group_sets_group_id(self):
        plant = PlantRecord(id="p1").with_group(GroupRecord(id="g1"))
        self.assertEqual(plant.group_id, "g1")
        self.assertEqual(plant.group.id, "g1")

    def test_canonical_ranges_order(self):
        ranges = [SensorRange(SensorKind.LIGHT), SensorRange(SensorKind.SOIL_MOISTURE)]
        self.assertEqual([r.kind for r in canonical_ranges(ranges)], [SensorKind.SOIL_MOISTURE, SensorKind.LIGHT])

    def test_group_from_json_requires_mapping(self):
        with self.assertRaises(ValueError):
            GroupRecord.from_json(None)


if __name__ == "__main__":
    unittest.main()
