import unittest

try:
    from telemetry.edit_actions import EditBuffers
    from telemetry.models import GroupRecord, PlantRecord, SensorRange
    from telemetry.reconcile import (
        buffers_from_records,
        decode_bound,
        encode_bound,
        fill_default_ranges,
        group_from_buffers,
        join_care_tips,
        plant_from_buffers,
        split_care_tips,
    )
    from telemetry.sensor_catalog import SENSOR_KINDS, SensorKind
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    _IMPORT_ERROR = exc


@unittest.skipIf(_IMPORT_ERROR is not None, f"reconcile dependencies unavailable: {_IMPORT_ERROR}")
class BoundCodecTests(unittest.TestCase):
    def test_encode_bound(self):
        self.assertEqual(encode_bound(10, 2), "10;2")

    def test_decode_bound(self):
        self.assertEqual(decode_bound("10;2"), (10, 2))
        self.assertEqual(decode_bound(" 10 ; 2 "), (10, 2))

    def test_decode_malformed_sides_default_to_zero(self):
        self.assertEqual(decode_bound("abc"), (0, 0))
        self.assertEqual(decode_bound("abc;5"), (0, 5))
        self.assertEqual(decode_bound("7;x"), (7, 0))
        self.assertEqual(decode_bound(""), (0, 0))
        self.assertEqual(decode_bound(None), (0, 0))

    def test_decode_without_delimiter_has_no_min(self):
        self.assertEqual(decode_bound("10"), (10, 0))

    def test_decode_uses_first_and_last_parts(self):
        self.assertEqual(decode_bound("9;1;3"), (9, 3))


@unittest.skipIf(_IMPORT_ERROR is not None, f"reconcile dependencies unavailable: {_IMPORT_ERROR}")
class CareTipTests(unittest.TestCase):
    def test_join_and_split(self):
        self.assertEqual(join_care_tips(["water", "shade"]), "water;shade")
        self.assertEqual(split_care_tips("water; shade ;;"), ["water", "shade"])
        self.assertEqual(split_care_tips(""), [])


@unittest.skipIf(_IMPORT_ERROR is not None, f"reconcile dependencies unavailable: {_IMPORT_ERROR}")
class DefaultRangeTests(unittest.TestCase):
    def test_only_humidity_set_fills_other_kinds_with_zero(self):
        filled = fill_default_ranges([SensorRange(SensorKind.HUMIDITY, min=40, max=80)])
        self.assertEqual([item.kind for item in filled], list(SENSOR_KINDS))
        by_kind = {item.kind: item for item in filled}
        self.assertEqual(by_kind[SensorKind.HUMIDITY], SensorRange(SensorKind.HUMIDITY, 40, 80))
        for kind in (SensorKind.SOIL_MOISTURE, SensorKind.TEMPERATURE, SensorKind.LIGHT):
            self.assertEqual((by_kind[kind].min, by_kind[kind].max), (0, 0))

    def test_empty_ranges(self):
        self.assertEqual(len(fill_default_ranges(None)), 4)


@unittest.skipIf(_IMPORT_ERROR is not None, f"reconcile dependencies unavailable: {_IMPORT_ERROR}")
class BufferConversionTests(unittest.TestCase):
    def setUp(self):
        self.group = GroupRecord(
            id="g1",
            name="Shade",
            description="Low light",
            care_tips=["no sun", "mist"],
            sensor_ranges=[SensorRange(SensorKind.HUMIDITY, min=40, max=80)],
        )
        self.plant = PlantRecord(
            id="p1",
            name="Fern",
            location="Hall",
            additional_care_tips=["turn weekly"],
            group_id="g1",
            group=self.group,
        )

    def test_buffers_from_records_flatten_lists(self):
        buffers = buffers_from_records(self.plant)
        self.assertEqual(buffers.name, "Fern")
        self.assertEqual(buffers.group_id, "g1")
        self.assertEqual(buffers.care_tips, "turn weekly")
        self.assertEqual(buffers.group_care_tips, "no sun;mist")
        self.assertEqual(buffers.sensor_bounds[SensorKind.HUMIDITY], "80;40")
        self.assertEqual(buffers.sensor_bounds[SensorKind.LIGHT], "0;0")

    def test_plant_from_buffers_keeps_id_and_splits_tips(self):
        buffers = EditBuffers(name="Fern 2", care_tips="a; b", group_id=" g1 ")
        plant = plant_from_buffers(self.plant, buffers)
        self.assertEqual(plant.id, "p1")
        self.assertEqual(plant.name, "Fern 2")
        self.assertEqual(plant.additional_care_tips, ["a", "b"])
        self.assertEqual(plant.group_id, "g1")
        self.assertIs(plant.group, self.group)

    def test_plant_from_buffers_drops_stale_group_on_reassignment(self):
        plant = plant_from_buffers(self.plant, EditBuffers(name="Fern", group_id="g2"))
        self.assertEqual(plant.group_id, "g2")
        self.assertIsNone(plant.group)
        unassigned = plant_from_buffers(self.plant, EditBuffers(name="Fern", group_id=""))
        self.assertIsNone(unassigned.group_id)

    def test_new_plant_from_buffers(self):
        plant = plant_from_buffers(None, EditBuffers(name="New"))
        self.assertIsNone(plant.id)
        self.assertEqual(plant.name, "New")

    def test_group_from_buffers_decodes_every_kind(self):
        buffers = buffers_from_records(self.plant)
        bounds = dict(buffers.sensor_bounds)
        bounds[SensorKind.TEMPERATURE] = "30;oops"
        buffers = EditBuffers(group_name="Shade 2", group_care_tips="x;y", sensor_bounds=bounds)

        group = group_from_buffers(self.group, buffers)
        self.assertEqual(group.id, "g1")
        self.assertEqual(group.name, "Shade 2")
        self.assertEqual(group.care_tips, ["x", "y"])
        self.assertEqual(
            group.sensor_ranges,
            [
                SensorRange(SensorKind.SOIL_MOISTURE, 0, 0),
                SensorRange(SensorKind.HUMIDITY, 40, 80),
                SensorRange(SensorKind.TEMPERATURE, 0, 30),
                SensorRange(SensorKind.LIGHT, 0, 0),
            ],
        )


if __name__ == "__main__":
    unittest.main()
