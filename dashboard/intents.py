"""Pure helpers that map dashboard triggers to page/overview controller intents."""

from telemetry.edit_actions import (
    SetCareTips,
    SetDescription,
    SetGroupCareTips,
    SetGroupDescription,
    SetGroupId,
    SetGroupName,
    SetLocation,
    SetName,
    SetSensorBound,
    SetSpecies,
)
from telemetry.sensor_catalog import SENSOR_KINDS

PAGE_FORM_PREFIX = "page"
OVERVIEW_FORM_PREFIX = "overview"

PLANT_FORM_FIELDS = (
    ("name", "Name", SetName),
    ("description", "Description", SetDescription),
    ("location", "Location", SetLocation),
    ("species", "Species", SetSpecies),
    ("group_id", "Group id", SetGroupId),
    ("care_tips", "Care tips (separated by ;)", SetCareTips),
)

GROUP_FORM_FIELDS = (
    ("group_name", "Group name", SetGroupName),
    ("group_description", "Group description", SetGroupDescription),
    ("group_care_tips", "Group care tips (separated by ;)", SetGroupCareTips),
)


def form_input_id(prefix, field_name):
    return f"{prefix}-field-{field_name.replace('_', '-')}"


def bound_input_id(prefix, kind):
    return f"{prefix}-bound-{kind.canonical_name}"


def form_input_ids(prefix):
    """All edit inputs of a form in a fixed order: plant fields, group fields, sensor bounds."""
    ids = [form_input_id(prefix, name) for name, _label, _action in PLANT_FORM_FIELDS + GROUP_FORM_FIELDS]
    ids.extend(bound_input_id(prefix, kind) for kind in SENSOR_KINDS)
    return ids


def edit_action_from_input(prefix, input_id, value):
    """Return the named edit action for a form input change, or None for unknown inputs."""
    for field_name, _label, action_cls in PLANT_FORM_FIELDS + GROUP_FORM_FIELDS:
        if input_id == form_input_id(prefix, field_name):
            return action_cls("" if value is None else str(value))
    for kind in SENSOR_KINDS:
        if input_id == bound_input_id(prefix, kind):
            return SetSensorBound(kind, "" if value is None else str(value))
    return None


def page_intent_from_trigger(trigger_id, *, value=None):
    """Return normalized detail-page intent dict for a dashboard trigger."""
    action_map = {
        "page-switch-entity-btn": ("page.switch_entity", {}),
        "page-edit-plant-btn": ("page.open_edit", {"is_group_edit": False}),
        "page-edit-group-btn": ("page.open_edit", {"is_group_edit": True}),
        "page-edit-cancel-btn": ("page.cancel_edit", {}),
        "page-edit-save-btn": ("page.commit", {}),
        "page-delete-confirm": ("page.delete", {}),
    }

    if trigger_id == "page-entity-select":
        if not value:
            return None
        return {"kind": "page.select_entity", "payload": {"entity_id": str(value)}}
    if trigger_id == "page-sensor-kind":
        if not value:
            return None
        return {"kind": "page.switch_sensor_kind", "payload": {"kind": str(value)}}
    if trigger_id == "page-window-select":
        if not value:
            return None
        return {"kind": "page.switch_time_window", "payload": {"duration": str(value)}}

    mapped = action_map.get(trigger_id)
    if not mapped:
        return None
    kind, payload = mapped
    return {"kind": kind, "payload": dict(payload)}


def overview_intent_from_trigger(trigger_id, *, value=None):
    """Return normalized overview intent dict for a dashboard trigger."""
    action_map = {
        "overview-refresh-btn": ("overview.refresh", {}),
        "overview-create-plant-btn": ("overview.open_create_plant", {}),
        "overview-create-group-btn": ("overview.open_create_group", {}),
        "overview-create-cancel-btn": ("overview.close_modal", {}),
        "overview-create-save-btn": ("overview.commit", {}),
    }

    if trigger_id == "overview-sensor-kind":
        if not value:
            return None
        return {"kind": "overview.switch_sensor_kind", "payload": {"kind": str(value)}}
    if trigger_id == "overview-window-select":
        if not value:
            return None
        return {"kind": "overview.switch_time_window", "payload": {"duration": str(value)}}
    if trigger_id == "overview-delete-group-btn":
        group_id = str(value or "").strip()
        if not group_id:
            return None
        return {"kind": "overview.delete_group", "payload": {"group_id": group_id}}

    mapped = action_map.get(trigger_id)
    if not mapped:
        return None
    kind, payload = mapped
    return {"kind": kind, "payload": dict(payload)}


def dispatch_intent(controller, intent):
    """Invoke the controller method named by `intent["kind"]` with its payload."""
    _scope, method_name = str(intent["kind"]).split(".", 1)
    method = getattr(controller, method_name)
    return method(**dict(intent.get("payload") or {}))
