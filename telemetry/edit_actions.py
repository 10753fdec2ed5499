"""Named edit actions for entity/group forms and the pure buffer reducer they drive."""

from dataclasses import dataclass, field, replace

from telemetry.sensor_catalog import SENSOR_KINDS, SensorKind


@dataclass(frozen=True)
class EditBuffers:
    """Free-form text state of an open edit form."""
    name: str = ""
    description: str = ""
    location: str = ""
    species: str = ""
    group_id: str = ""
    care_tips: str = ""
    group_name: str = ""
    group_description: str = ""
    group_care_tips: str = ""
    sensor_bounds: dict = field(default_factory=lambda: {kind: "" for kind in SENSOR_KINDS})


@dataclass(frozen=True)
class SetName:
    value: str
    field_name = "name"


@dataclass(frozen=True)
class SetDescription:
    value: str
    field_name = "description"


@dataclass(frozen=True)
class SetLocation:
    value: str
    field_name = "location"


@dataclass(frozen=True)
class SetSpecies:
    value: str
    field_name = "species"


@dataclass(frozen=True)
class SetGroupId:
    value: str
    field_name = "group_id"


@dataclass(frozen=True)
class SetCareTips:
    value: str
    field_name = "care_tips"


@dataclass(frozen=True)
class SetGroupName:
    value: str
    field_name = "group_name"


@dataclass(frozen=True)
class SetGroupDescription:
    value: str
    field_name = "group_description"


@dataclass(frozen=True)
class SetGroupCareTips:
    value: str
    field_name = "group_care_tips"


@dataclass(frozen=True)
class SetSensorBound:
    kind: SensorKind
    value: str


def apply_edit_action(buffers, action):
    """Return a copy of `buffers` with `action` applied."""
    if isinstance(action, SetSensorBound):
        bounds = dict(buffers.sensor_bounds)
        bounds[SensorKind.from_name(action.kind)] = str(action.value)
        return replace(buffers, sensor_bounds=bounds)
    field_name = getattr(action, "field_name", None)
    if field_name is None:
        raise TypeError(f"Unsupported edit action: {action!r}")
    return replace(buffers, **{field_name: str(action.value)})


# Positional field table of the legacy form wiring, kept for callers that still
# address inputs by index.
_FIELD_INDEX_TABLE = (
    SetName,
    SetDescription,
    SetLocation,
    SetSpecies,
    SetGroupId,
    SetCareTips,
    SetGroupName,
    SetGroupDescription,
    SetGroupCareTips,
)
FIELD_INDEX_COUNT = len(_FIELD_INDEX_TABLE) + len(SENSOR_KINDS)


def action_from_field_index(index, value):
    """Map a positional field index to a named edit action; None when out of range."""
    try:
        index = int(index)
    except (TypeError, ValueError):
        return None
    if index < 0 or index >= FIELD_INDEX_COUNT:
        return None
    if index < len(_FIELD_INDEX_TABLE):
        return _FIELD_INDEX_TABLE[index](str(value))
    return SetSensorBound(SENSOR_KINDS[index - len(_FIELD_INDEX_TABLE)], str(value))
