"""Domain records exchanged between the collaborator client, fetcher and pages."""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

import pandas as pd

from telemetry.sensor_catalog import SENSOR_KINDS, SensorKind
from time_utils import format_window_ts, normalize_timestamp_value, parse_window_ts


class PageState(Enum):
    """Lifecycle states of an entity page."""
    AWAITING_SELECTION = "awaiting_selection"
    LOADING = "loading"
    LOADED = "loaded"
    EDITING_ENTITY = "editing_entity"
    EDITING_GROUP = "editing_group"
    ERROR = "error"


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    @classmethod
    def from_bounds(cls, start, end):
        """Build a window from datetimes or ISO 8601 strings."""
        start_dt = parse_window_ts(start)
        end_dt = parse_window_ts(end)
        if end_dt < start_dt:
            raise ValueError(f"Window end {end!r} is before start {start!r}.")
        return cls(start_dt, end_dt)

    @property
    def start_iso(self) -> str:
        return format_window_ts(self.start)

    @property
    def end_iso(self) -> str:
        return format_window_ts(self.end)


@dataclass(frozen=True)
class TimeSeries:
    """Ordered (timestamp, value) pairs for one entity, sensor kind and window."""
    entity_id: str
    kind: SensorKind
    timestamps: Tuple[pd.Timestamp, ...] = ()
    values: Tuple[float, ...] = ()
    window: Optional[TimeWindow] = None

    def __post_init__(self):
        if len(self.timestamps) != len(self.values):
            raise ValueError("TimeSeries timestamps and values must have the same length.")

    def __len__(self):
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    def points(self):
        return list(zip(self.timestamps, self.values))

    @classmethod
    def from_points(cls, entity_id, kind, points, window=None):
        """
        Build a series from collaborator data points.

        Each point must be a mapping with a numeric ``value`` and a parseable
        ``timestamp``; anything else raises ValueError. Points are ordered by
        timestamp.
        """
        rows = []
        for point in points or []:
            if not isinstance(point, dict):
                raise ValueError(f"Invalid data point {point!r}: expected mapping.")
            raw_value = point.get("value")
            if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
                raise ValueError(f"Invalid data point value {raw_value!r}.")
            ts = normalize_timestamp_value(point.get("timestamp"))
            if pd.isna(ts):
                raise ValueError(f"Invalid data point timestamp {point.get('timestamp')!r}.")
            rows.append((ts, float(raw_value)))

        rows.sort(key=lambda row: row[0])
        return cls(
            entity_id=str(entity_id),
            kind=SensorKind.from_name(kind),
            timestamps=tuple(row[0] for row in rows),
            values=tuple(row[1] for row in rows),
            window=window,
        )


@dataclass(frozen=True)
class SensorRange:
    kind: SensorKind
    min: int = 0
    max: int = 0

    def to_payload(self) -> dict:
        return {"sensorType": {"name": self.kind.canonical_name}, "min": int(self.min), "max": int(self.max)}

    @classmethod
    def from_json(cls, raw):
        sensor_type = raw.get("sensorType")
        name = sensor_type.get("name") if isinstance(sensor_type, dict) else sensor_type
        return cls(
            kind=SensorKind.from_name(name),
            min=int(raw.get("min") or 0),
            max=int(raw.get("max") or 0),
        )


def _parse_ranges(raw_ranges):
    ranges = []
    for raw in raw_ranges or []:
        try:
            ranges.append(SensorRange.from_json(raw))
        except (AttributeError, TypeError, ValueError) as exc:
            logging.warning("Models: skipping unsupported sensor range %r (%s)", raw, exc)
    return ranges


def _optional_id(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class GroupRecord:
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    care_tips: list = field(default_factory=list)
    sensor_ranges: list = field(default_factory=list)

    def ranges_for(self, kind):
        kind = SensorKind.from_name(kind)
        return [sensor_range for sensor_range in self.sensor_ranges if sensor_range.kind == kind]

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "careTips": list(self.care_tips),
            "sensorRanges": [sensor_range.to_payload() for sensor_range in self.sensor_ranges],
        }

    @classmethod
    def from_json(cls, raw):
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid plant group payload {raw!r}: expected mapping.")
        return cls(
            id=_optional_id(raw.get("id")),
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
            care_tips=[str(tip) for tip in raw.get("careTips") or []],
            sensor_ranges=_parse_ranges(raw.get("sensorRanges")),
        )


@dataclass
class PlantRecord:
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    location: str = ""
    species: str = ""
    additional_care_tips: list = field(default_factory=list)
    group_id: Optional[str] = None
    group: Optional[GroupRecord] = None

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "species": self.species,
            "additionalCareTips": list(self.additional_care_tips),
            "plantGroupId": self.group_id,
        }

    @classmethod
    def from_json(cls, raw):
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid plant payload {raw!r}: expected mapping.")
        group_raw = raw.get("plantGroup")
        group = GroupRecord.from_json(group_raw) if group_raw is not None else None
        group_id = _optional_id(raw.get("plantGroupId"))
        if group_id is None and group is not None:
            group_id = group.id
        return cls(
            id=_optional_id(raw.get("id")),
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
            location=str(raw.get("location") or ""),
            species=str(raw.get("species") or ""),
            additional_care_tips=[str(tip) for tip in raw.get("additionalCareTips") or []],
            group_id=group_id,
            group=group,
        )

    def with_group(self, group):
        return replace(self, group=group, group_id=group.id if group is not None else self.group_id)


@dataclass(frozen=True)
class FetchRequest:
    """Key identifying one outbound series request."""
    entity_id: str
    kind: SensorKind
    is_group: bool = False


@dataclass(frozen=True)
class FetchResult:
    request: FetchRequest
    series: TimeSeries

    @property
    def key(self) -> str:
        return self.request.entity_id


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a create/update/delete call; callers must inspect `ok`."""
    action: str
    ok: bool
    entity_id: Optional[str] = None
    error: Optional[str] = None


def canonical_ranges(ranges):
    """Return ranges ordered by the canonical sensor kind order (unknown order preserved after)."""
    order = {kind: index for index, kind in enumerate(SENSOR_KINDS)}
    return sorted(ranges, key=lambda sensor_range: order.get(sensor_range.kind, len(order)))
