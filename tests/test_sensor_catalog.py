import unittest

try:
    import numpy as np

    from telemetry.sensor_catalog import (
        COLOR_OFFSET_MAX,
        SENSOR_KIND_NAMES,
        SENSOR_KINDS,
        SensorKind,
        offset_color,
        rgb_to_hex,
        shift_color,
    )
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    np = None
    _IMPORT_ERROR = exc


class _FixedOffset:
    def __init__(self, offset):
        self.offset = offset
        self.calls = []

    def integers(self, low, high):
        self.calls.append((low, high))
        return self.offset


@unittest.skipIf(_IMPORT_ERROR is not None, f"sensor catalog dependencies unavailable: {_IMPORT_ERROR}")
class SensorCatalogTests(unittest.TestCase):
    def test_canonical_names_are_unique_and_ordered(self):
        self.assertEqual(SENSOR_KIND_NAMES, ("soil-moisture", "humidity", "temperature", "light"))
        self.assertEqual(len(set(kind.canonical_name for kind in SensorKind)), len(SensorKind))
        self.assertEqual(tuple(SENSOR_KINDS), tuple(SensorKind))

    def test_name_mapping_is_stable(self):
        for kind in SENSOR_KINDS:
            self.assertIs(SensorKind.from_name(kind.canonical_name), kind)
            self.assertIs(SensorKind.from_name(kind), kind)
        self.assertIs(SensorKind.from_name(" Humidity "), SensorKind.HUMIDITY)

    def test_unknown_name_raises(self):
        with self.assertRaises(ValueError):
            SensorKind.from_name("pressure")
        with self.assertRaises(ValueError):
            SensorKind.from_name(None)

    def test_shift_color_moves_channels_toward_middle(self):
        self.assertEqual(shift_color((0, 0, 255), 10), (10, 10, 245))
        self.assertEqual(shift_color((255, 200, 0), 5), (250, 195, 5))
        self.assertEqual(shift_color((127, 128, 0), 1), (128, 127, 1))

    def test_rgb_to_hex_clamps(self):
        self.assertEqual(rgb_to_hex((0, 128, 255)), "#0080ff")
        self.assertEqual(rgb_to_hex((-5, 300, 16)), "#00ff10")

    def test_offset_color_uses_injected_rng(self):
        rng = _FixedOffset(20)
        self.assertEqual(offset_color(SensorKind.SOIL_MOISTURE, rng), "#1414eb")
        self.assertEqual(rng.calls, [(0, COLOR_OFFSET_MAX + 1)])

    def test_offset_color_reproducible_with_seeded_generator(self):
        first = [offset_color("temperature", np.random.default_rng(7)) for _ in range(2)]
        self.assertEqual(first[0], first[1])

    def test_display_names(self):
        self.assertEqual(SensorKind.SOIL_MOISTURE.display_name, "Soil moisture")
        self.assertEqual(SensorKind.LIGHT.base_color, (255, 200, 0))


if __name__ == "__main__":
    unittest.main()
