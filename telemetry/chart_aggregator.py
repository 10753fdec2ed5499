"""Merge fetched series and threshold overlays into a drawable chart model."""

from dataclasses import dataclass, field, replace

import numpy as np

from telemetry.sensor_catalog import THRESHOLD_COLOR, SensorKind, offset_color

SERIES_ROLE_TELEMETRY = "telemetry"
SERIES_ROLE_THRESHOLD = "threshold"


@dataclass(frozen=True)
class ChartSeries:
    label: str
    x: tuple
    y: tuple
    color: str
    role: str = SERIES_ROLE_TELEMETRY
    entity_id: str = None


@dataclass(frozen=True)
class ChartModel:
    """Named collection of drawable series for one sensor kind."""
    name: str
    kind: SensorKind = None
    series: tuple = field(default_factory=tuple)

    @property
    def telemetry_series(self):
        return [item for item in self.series if item.role == SERIES_ROLE_TELEMETRY]

    @property
    def threshold_series(self):
        return [item for item in self.series if item.role == SERIES_ROLE_THRESHOLD]

    @property
    def x_domain_length(self) -> int:
        return len(self.series[0].x) if self.series else 0


def _label_for(labels, entity_id):
    if labels is None:
        return entity_id
    return str(labels.get(entity_id, entity_id))


def create_charts(producer, series, kind, labels=None, rng=None) -> ChartModel:
    """
    Build a fresh ChartModel with one drawable series per TimeSeries.

    Args:
        producer: Name of the page/model that owns the chart
        series: Iterable of TimeSeries (or FetchResult) in any order
        kind: Sensor kind the series belong to
        labels: Mapping entity_id -> legend label (falls back to the entity id)
        rng: Optional numpy Generator for reproducible color offsets
    """
    kind = SensorKind.from_name(kind)
    rng = rng if rng is not None else np.random.default_rng()
    drawable = []
    for item in series or []:
        time_series = getattr(item, "series", item)
        drawable.append(
            ChartSeries(
                label=_label_for(labels, time_series.entity_id),
                x=tuple(time_series.timestamps),
                y=tuple(time_series.values),
                color=offset_color(kind, rng),
                entity_id=time_series.entity_id,
            )
        )
    return ChartModel(name=str(producer), kind=kind, series=tuple(drawable))


def update_charts(existing, producer, series, kind, labels=None, rng=None) -> ChartModel:
    """
    Replace `existing` wholesale with a model built from `series`.

    Nothing from the previous model survives, overlays included.
    """
    return create_charts(producer, series, kind, labels=labels, rng=rng)


def append_threshold_overlays(model, ranges, kind, label) -> ChartModel:
    """
    Return `model` with a (max, min) constant series pair appended per matching range.

    Overlays reuse the x-domain of the model's first series and repeat the
    bound for that length; a model without series gets zero-length overlays.
    Ranges are not deduplicated.
    """
    kind = SensorKind.from_name(kind)
    x_domain = model.series[0].x if model.series else ()
    length = len(x_domain)
    overlays = []
    for sensor_range in ranges or []:
        if sensor_range.kind != kind:
            continue
        for bound_name, bound in (("max", sensor_range.max), ("min", sensor_range.min)):
            overlays.append(
                ChartSeries(
                    label=f"{label} {bound_name}",
                    x=tuple(x_domain),
                    y=tuple(np.full(length, bound).tolist()),
                    color=THRESHOLD_COLOR,
                    role=SERIES_ROLE_THRESHOLD,
                )
            )
    if not overlays:
        return model
    return replace(model, series=tuple(model.series) + tuple(overlays))
