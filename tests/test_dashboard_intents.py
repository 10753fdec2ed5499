import unittest

from dashboard.intents import (
    OVERVIEW_FORM_PREFIX,
    PAGE_FORM_PREFIX,
    bound_input_id,
    dispatch_intent,
    edit_action_from_input,
    form_input_id,
    form_input_ids,
    overview_intent_from_trigger,
    page_intent_from_trigger,
)
from telemetry.edit_actions import FIELD_INDEX_COUNT, SetGroupId, SetName, SetSensorBound
from telemetry.sensor_catalog import SensorKind


class _RecordingController:
    def __init__(self):
        self.calls = []

    def open_edit(self, is_group_edit=False):
        self.calls.append(("open_edit", is_group_edit))
        return "snapshot"

    def delete_group(self, group_id):
        self.calls.append(("delete_group", group_id))


class DashboardIntentsTests(unittest.TestCase):
    def test_page_button_mappings(self):
        self.assertEqual(
            page_intent_from_trigger("page-edit-group-btn"),
            {"kind": "page.open_edit", "payload": {"is_group_edit": True}},
        )
        self.assertEqual(page_intent_from_trigger("page-edit-save-btn"), {"kind": "page.commit", "payload": {}})
        self.assertEqual(page_intent_from_trigger("page-delete-confirm"), {"kind": "page.delete", "payload": {}})

    def test_page_value_mappings(self):
        self.assertEqual(
            page_intent_from_trigger("page-entity-select", value=7),
            {"kind": "page.select_entity", "payload": {"entity_id": "7"}},
        )
        self.assertEqual(
            page_intent_from_trigger("page-sensor-kind", value="light"),
            {"kind": "page.switch_sensor_kind", "payload": {"kind": "light"}},
        )
        self.assertEqual(
            page_intent_from_trigger("page-window-select", value="7D"),
            {"kind": "page.switch_time_window", "payload": {"duration": "7D"}},
        )
        self.assertIsNone(page_intent_from_trigger("page-entity-select", value=None))

    def test_overview_mappings(self):
        self.assertEqual(overview_intent_from_trigger("overview-refresh-btn"), {"kind": "overview.refresh", "payload": {}})
        self.assertEqual(
            overview_intent_from_trigger("overview-delete-group-btn", value=" g1 "),
            {"kind": "overview.delete_group", "payload": {"group_id": "g1"}},
        )
        self.assertIsNone(overview_intent_from_trigger("overview-delete-group-btn", value=""))

    def test_invalid_trigger_returns_none(self):
        self.assertIsNone(page_intent_from_trigger("unknown-btn"))
        self.assertIsNone(overview_intent_from_trigger(None))

    def test_form_inputs_cover_every_editable_field(self):
        ids = form_input_ids(PAGE_FORM_PREFIX)
        self.assertEqual(len(ids), FIELD_INDEX_COUNT)
        self.assertEqual(len(set(ids)), len(ids))
        self.assertEqual(ids[0], "page-field-name")
        self.assertEqual(ids[-1], "page-bound-light")

    def test_edit_action_from_input(self):
        self.assertEqual(edit_action_from_input(PAGE_FORM_PREFIX, form_input_id(PAGE_FORM_PREFIX, "name"), "Fern"), SetName("Fern"))
        self.assertEqual(
            edit_action_from_input(OVERVIEW_FORM_PREFIX, form_input_id(OVERVIEW_FORM_PREFIX, "group_id"), None),
            SetGroupId(""),
        )
        self.assertEqual(
            edit_action_from_input(PAGE_FORM_PREFIX, bound_input_id(PAGE_FORM_PREFIX, SensorKind.HUMIDITY), "80;40"),
            SetSensorBound(SensorKind.HUMIDITY, "80;40"),
        )
        self.assertIsNone(edit_action_from_input(PAGE_FORM_PREFIX, "overview-field-name", "x"))

    def test_dispatch_intent_calls_named_method(self):
        controller = _RecordingController()
        result = dispatch_intent(controller, page_intent_from_trigger("page-edit-plant-btn"))
        dispatch_intent(controller, {"kind": "overview.delete_group", "payload": {"group_id": "g1"}})
        self.assertEqual(result, "snapshot")
        self.assertEqual(controller.calls, [("open_edit", False), ("delete_group", "g1")])


if __name__ == "__main__":
    unittest.main()
