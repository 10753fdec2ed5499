"""Conversion between domain records and the free-form text of edit forms."""

from dataclasses import replace

from runtime.parsing import parse_int_or_zero
from telemetry.edit_actions import EditBuffers
from telemetry.models import GroupRecord, PlantRecord, SensorRange, canonical_ranges
from telemetry.sensor_catalog import SENSOR_KINDS

BOUND_DELIMITER = ";"
CARE_TIP_DELIMITER = ";"


def encode_bound(max_value, min_value) -> str:
    """Encode a (max, min) pair as the "{max};{min}" text shown in bound inputs."""
    return f"{int(max_value)}{BOUND_DELIMITER}{int(min_value)}"


def decode_bound(text):
    """
    Decode "{max};{min}" into (max, min).

    An unparsable side decodes to 0; text without a delimiter has no min side.
    With more than two parts the first is the max, the last is the min and
    anything in between is ignored ("10;2;5" decodes to (10, 5)).
    """
    parts = str(text or "").split(BOUND_DELIMITER)
    max_value = parse_int_or_zero(parts[0])
    min_value = parse_int_or_zero(parts[-1]) if len(parts) > 1 else 0
    return max_value, min_value


def join_care_tips(tips) -> str:
    return CARE_TIP_DELIMITER.join(str(tip) for tip in tips or [])


def split_care_tips(text):
    return [tip.strip() for tip in str(text or "").split(CARE_TIP_DELIMITER) if tip.strip()]


def fill_default_ranges(ranges):
    """Return `ranges` plus a (0, 0) range for every sensor kind without one, in canonical order."""
    present = {sensor_range.kind for sensor_range in ranges or []}
    filled = list(ranges or [])
    for kind in SENSOR_KINDS:
        if kind not in present:
            filled.append(SensorRange(kind, 0, 0))
    return canonical_ranges(filled)


def _first_range_by_kind(ranges):
    by_kind = {}
    for sensor_range in ranges or []:
        by_kind.setdefault(sensor_range.kind, sensor_range)
    return by_kind


def buffers_from_records(plant=None, group=None) -> EditBuffers:
    """Snapshot plant and group fields into edit buffers."""
    plant = plant or PlantRecord()
    group = group or plant.group or GroupRecord()
    by_kind = _first_range_by_kind(fill_default_ranges(group.sensor_ranges))
    return EditBuffers(
        name=plant.name,
        description=plant.description,
        location=plant.location,
        species=plant.species,
        group_id=plant.group_id or "",
        care_tips=join_care_tips(plant.additional_care_tips),
        group_name=group.name,
        group_description=group.description,
        group_care_tips=join_care_tips(group.care_tips),
        sensor_bounds={
            kind: encode_bound(by_kind[kind].max, by_kind[kind].min)
            for kind in SENSOR_KINDS
        },
    )


def plant_from_buffers(plant, buffers) -> PlantRecord:
    """Return the plant record the buffers describe; the id is kept from `plant`."""
    plant = plant or PlantRecord()
    group_id = buffers.group_id.strip() or None
    return replace(
        plant,
        name=buffers.name,
        description=buffers.description,
        location=buffers.location,
        species=buffers.species,
        additional_care_tips=split_care_tips(buffers.care_tips),
        group_id=group_id,
        group=plant.group if plant.group is not None and plant.group.id == group_id else None,
    )


def group_from_buffers(group, buffers) -> GroupRecord:
    """Return the group record the buffers describe, one range per sensor kind."""
    group = group or GroupRecord()
    ranges = []
    for kind in SENSOR_KINDS:
        max_value, min_value = decode_bound(buffers.sensor_bounds.get(kind, ""))
        ranges.append(SensorRange(kind, min=min_value, max=max_value))
    return replace(
        group,
        name=buffers.group_name,
        description=buffers.group_description,
        care_tips=split_care_tips(buffers.group_care_tips),
        sensor_ranges=ranges,
    )
