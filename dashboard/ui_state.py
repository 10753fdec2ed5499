"""Pure UI state helpers for dashboard controls."""

from dashboard.intents import PAGE_FORM_PREFIX, form_input_ids
from telemetry.models import PageState
from telemetry.overview_controller import MODAL_CREATE_GROUP, MODAL_CREATE_PLANT
from telemetry.sensor_catalog import SENSOR_KINDS

WINDOW_PRESETS = (
    ("Last day", "1D"),
    ("Last week", "7D"),
    ("Last month", "30D"),
    ("Last year", "365D"),
)

HIDDEN_CLASS = "hidden"


def sensor_kind_options():
    return [{"label": kind.display_name, "value": kind.canonical_name} for kind in SENSOR_KINDS]


def window_preset_options():
    return [{"label": label, "value": value} for label, value in WINDOW_PRESETS]


def entity_options(id_name_pairs):
    """Dropdown options for (id, name) pairs; a blank name falls back to the id."""
    return [{"label": str(name or entity_id), "value": str(entity_id)} for entity_id, name in id_name_pairs or []]


def with_hidden(class_name, hidden):
    return f"{class_name} {HIDDEN_CLASS}" if hidden else class_name


def page_status_text(snapshot):
    state = snapshot.state
    if state == PageState.AWAITING_SELECTION:
        text = "Select a plant to view its telemetry."
    elif state == PageState.LOADING:
        text = f"Loading plant {snapshot.entity_id}..."
    elif state == PageState.ERROR:
        text = f"Could not load plant {snapshot.entity_id}."
    elif state == PageState.EDITING_ENTITY:
        text = "Editing plant."
    elif state == PageState.EDITING_GROUP:
        text = "Editing plant group."
    else:
        name = snapshot.record.name if snapshot.record is not None else snapshot.entity_id
        text = f"{name}: {snapshot.active_kind.display_name}"
        if snapshot.refreshing:
            text += " (refreshing...)"
    if snapshot.last_error:
        text += f" Error: {snapshot.last_error}"
    return text


def page_panel_state(snapshot):
    """Visibility/enablement of the detail-page panels for a page snapshot."""
    state = snapshot.state
    editing = state in {PageState.EDITING_ENTITY, PageState.EDITING_GROUP}
    has_record = state == PageState.LOADED or editing
    return {
        "selection_hidden": state not in {PageState.AWAITING_SELECTION, PageState.ERROR},
        "detail_hidden": not has_record and state != PageState.LOADING,
        "edit_hidden": not editing,
        "plant_form_hidden": state != PageState.EDITING_ENTITY,
        "group_form_hidden": state != PageState.EDITING_GROUP,
        "actions_disabled": state != PageState.LOADED,
    }


def overview_modal_state(snapshot):
    modal = snapshot.modal
    return {
        "modal_hidden": modal is None,
        "plant_form_hidden": modal != MODAL_CREATE_PLANT,
        "group_form_hidden": modal != MODAL_CREATE_GROUP,
        "title": "Create plant group" if modal == MODAL_CREATE_GROUP else "Create plant",
    }


def form_values_from_buffers(buffers):
    """Values for all form inputs, in the order of `intents.form_input_ids`."""
    if buffers is None:
        return [""] * len(form_input_ids(PAGE_FORM_PREFIX))
    values = [
        buffers.name,
        buffers.description,
        buffers.location,
        buffers.species,
        buffers.group_id,
        buffers.care_tips,
        buffers.group_name,
        buffers.group_description,
        buffers.group_care_tips,
    ]
    values.extend(buffers.sensor_bounds.get(kind, "") for kind in SENSOR_KINDS)
    return values
