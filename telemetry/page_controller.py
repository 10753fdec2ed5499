"""
Detail-page lifecycle: entity selection, telemetry (re)fetch, editing and commit.

The controller is driven from a single foreground thread (the dashboard
callback) and hands network work to a small executor. Every action that
fetches telemetry stamps its batch with a sequence number; when a batch
completes, its results are applied only if no newer batch has been issued
since, so a slow response for an abandoned sensor kind or window can never
overwrite the chart of a newer request.
"""

import copy
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import datetime

import pandas as pd

from plantbuddy_api import PlantBuddyAPIError
from runtime.defaults import DEFAULT_WINDOW_START
from telemetry.chart_aggregator import ChartModel, append_threshold_overlays, create_charts, update_charts
from telemetry.edit_actions import EditBuffers, action_from_field_index, apply_edit_action
from telemetry.models import CommitResult, PageState, PlantRecord, TimeWindow
from telemetry.reconcile import buffers_from_records, fill_default_ranges, group_from_buffers, plant_from_buffers
from telemetry.sensor_catalog import SensorKind
from time_utils import now_utc, window_ending_now

EDITING_STATES = {PageState.EDITING_ENTITY, PageState.EDITING_GROUP}


@dataclass(frozen=True)
class PageSnapshot:
    state: PageState
    entity_id: str = None
    record: PlantRecord = None
    chart: ChartModel = None
    active_kind: SensorKind = None
    window: TimeWindow = None
    buffers: EditBuffers = None
    refreshing: bool = False
    last_error: str = None
    last_updated: datetime = None
    fetch_seq: int = 0


def completed_future(value):
    future = Future()
    future.set_result(value)
    return future


def _with_default_ranges(record):
    if record is None or record.group is None:
        return record
    group = replace(record.group, sensor_ranges=fill_default_ranges(record.group.sensor_ranges))
    return replace(record, group=group)


def _overlay_chart(chart, record, kind):
    """Return `chart` with its threshold overlays rebuilt from `record`'s group ranges."""
    if chart is None:
        return None
    base = replace(chart, series=tuple(chart.telemetry_series))
    ranges = record.group.sensor_ranges if record is not None and record.group is not None else []
    label = record.name if record is not None and record.name else str(chart.name)
    return append_threshold_overlays(base, ranges, kind, label)


class EntityPageController:
    """State machine behind the plant detail page."""

    def __init__(
        self,
        api,
        fetcher,
        *,
        name="detail",
        default_kind=SensorKind.SOIL_MOISTURE,
        window_start=DEFAULT_WINDOW_START,
        now_fn=now_utc,
        rng=None,
        executor=None,
    ):
        self.api = api
        self.fetcher = fetcher
        self.name = str(name)
        self.default_kind = SensorKind.from_name(default_kind)
        self.now_fn = now_fn
        self.rng = rng
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix=f"{self.name}-page")
        self._lock = threading.Lock()

        self._state = PageState.AWAITING_SELECTION
        self._entity_id = None
        self._record = None
        self._chart = None
        self._active_kind = self.default_kind
        self._window = TimeWindow.from_bounds(window_start, now_fn())
        self._buffers = None
        self._refreshing = False
        self._last_error = None
        self._last_updated = None
        self._fetch_seq = 0
        self._edit_session = 0

    def shutdown(self):
        self._executor.shutdown(wait=False)

    # --- Snapshots ---

    def _snapshot_locked(self):
        return PageSnapshot(
            state=self._state,
            entity_id=self._entity_id,
            record=copy.deepcopy(self._record),
            chart=self._chart,
            active_kind=self._active_kind,
            window=self._window,
            buffers=self._buffers,
            refreshing=self._refreshing,
            last_error=self._last_error,
            last_updated=self._last_updated,
            fetch_seq=self._fetch_seq,
        )

    def snapshot(self) -> PageSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _next_stamp_locked(self):
        self._fetch_seq += 1
        self._refreshing = True
        return self._fetch_seq

    def _is_current_locked(self, stamp):
        if stamp != self._fetch_seq:
            logging.debug(
                "Page %s: discarding stale fetch batch %s (latest=%s)",
                self.name,
                stamp,
                self._fetch_seq,
            )
            return False
        return True

    def _is_open_edit_locked(self, session, entity_id):
        """True while the edit session `session` on `entity_id` is still the one shown."""
        return (
            self._state in EDITING_STATES
            and self._edit_session == session
            and self._entity_id == entity_id
        )

    # --- Selection ---

    def list_entities(self):
        """Return [(id, name), ...] of selectable plants."""
        return self.fetcher.fetch_ids_and_names(is_group=False)

    def select_entity(self, entity_id) -> Future:
        """Load a plant and its default-kind telemetry; the future yields the resulting snapshot."""
        entity_id = str(entity_id).strip()
        with self._lock:
            if self._state in EDITING_STATES:
                logging.warning("Page %s: ignoring selection of %s while editing", self.name, entity_id)
                return completed_future(self._snapshot_locked())
            stamp = self._next_stamp_locked()
            self._state = PageState.LOADING
            self._entity_id = entity_id
            self._record = None
            self._chart = None
            self._buffers = None
            self._last_error = None
            self._active_kind = self.default_kind
            kind = self._active_kind
            window = self._window
        logging.info("Page %s: selecting entity %s", self.name, entity_id)
        return self._executor.submit(self._load_entity, stamp, entity_id, kind, window)

    def _load_entity(self, stamp, entity_id, kind, window):
        try:
            record = self.api.get_plant(entity_id)
        except PlantBuddyAPIError as exc:
            logging.error("Page %s: failed to load entity %s: %s", self.name, entity_id, exc)
            with self._lock:
                if self._is_current_locked(stamp):
                    self._state = PageState.ERROR
                    self._last_error = str(exc)
                    self._refreshing = False
                return self._snapshot_locked()

        record = _with_default_ranges(record)
        results = self.fetcher.fetch_series([entity_id], kind, window)
        chart = create_charts(self.name, results, kind, {entity_id: record.name or entity_id}, rng=self.rng)

        with self._lock:
            if self._is_current_locked(stamp):
                self._record = record
                self._chart = _overlay_chart(chart, record, kind)
                self._state = PageState.LOADED
                self._refreshing = False
                self._last_updated = self.now_fn()
                logging.info(
                    "Page %s: entity %s loaded with %d series",
                    self.name,
                    entity_id,
                    len(chart.series),
                )
            return self._snapshot_locked()

    def switch_entity(self):
        """Drop the current entity and return to the selection screen."""
        with self._lock:
            if self._state in EDITING_STATES:
                logging.info("Page %s: discarding open edit on entity switch", self.name)
            self._fetch_seq += 1
            self._state = PageState.AWAITING_SELECTION
            self._entity_id = None
            self._record = None
            self._chart = None
            self._buffers = None
            self._refreshing = False
            self._last_error = None
            return self._snapshot_locked()

    # --- Telemetry ---

    def switch_sensor_kind(self, kind) -> Future:
        """Re-fetch the current entity's telemetry for `kind` over the current window."""
        kind = SensorKind.from_name(kind)
        with self._lock:
            if self._state != PageState.LOADED or self._record is None:
                logging.warning(
                    "Page %s: cannot switch sensor kind to %s in state %s",
                    self.name,
                    kind.canonical_name,
                    self._state.value,
                )
                return completed_future(self._snapshot_locked())
            stamp = self._next_stamp_locked()
            self._active_kind = kind
            entity_id = self._entity_id
            label = self._record.name or entity_id
            window = self._window
        return self._executor.submit(self._reload_chart, stamp, entity_id, label, kind, window)

    def _reload_chart(self, stamp, entity_id, label, kind, window):
        results = self.fetcher.fetch_series([entity_id], kind, window)
        with self._lock:
            previous = self._chart
        chart = update_charts(previous, self.name, results, kind, {entity_id: label}, rng=self.rng)
        with self._lock:
            if self._is_current_locked(stamp):
                self._chart = _overlay_chart(chart, self._record, kind)
                self._refreshing = False
                self._last_updated = self.now_fn()
            return self._snapshot_locked()

    def switch_time_window(self, duration) -> Future:
        """Set the window to [now - duration, now] and re-fetch the active kind."""
        duration = pd.Timedelta(duration).to_pytimedelta()
        window = TimeWindow(*window_ending_now(duration, self.now_fn()))
        with self._lock:
            self._window = window
            kind = self._active_kind
        logging.info("Page %s: window set to [%s -> %s]", self.name, window.start_iso, window.end_iso)
        return self.switch_sensor_kind(kind)

    # --- Editing ---

    def open_edit(self, is_group_edit=False) -> PageSnapshot:
        with self._lock:
            if self._state != PageState.LOADED or self._record is None:
                logging.warning("Page %s: cannot open edit in state %s", self.name, self._state.value)
                return self._snapshot_locked()
            self._buffers = buffers_from_records(self._record)
            self._edit_session += 1
            self._state = PageState.EDITING_GROUP if is_group_edit else PageState.EDITING_ENTITY
            self._last_error = None
            return self._snapshot_locked()

    def apply_edit(self, action) -> PageSnapshot:
        with self._lock:
            if self._state not in EDITING_STATES:
                logging.debug("Page %s: edit %r ignored outside an edit session", self.name, action)
                return self._snapshot_locked()
            self._buffers = apply_edit_action(self._buffers, action)
            return self._snapshot_locked()

    def field_updated(self, index, value) -> PageSnapshot:
        """Apply an edit addressed by its legacy positional index; unknown indices are ignored."""
        action = action_from_field_index(index, value)
        if action is None:
            return self.snapshot()
        return self.apply_edit(action)

    def cancel_edit(self) -> PageSnapshot:
        with self._lock:
            if self._state in EDITING_STATES:
                self._state = PageState.LOADED
                self._buffers = None
                self._last_error = None
            return self._snapshot_locked()

    def commit(self) -> Future:
        """
        Submit the open edit; the future yields a CommitResult.

        The edit session closes only when the collaborator accepted the
        change. On failure the buffers stay open and `last_error` is set.
        A commit that completes after its edit session was left (cancel,
        entity switch, a newer session) reports its result without
        touching the page.
        """
        with self._lock:
            if self._state not in EDITING_STATES:
                return completed_future(CommitResult("commit", ok=False, error="no edit session open"))
            is_group_edit = self._state == PageState.EDITING_GROUP
            session = self._edit_session
            entity_id = self._entity_id
            record = copy.deepcopy(self._record)
            buffers = self._buffers
        if is_group_edit:
            return self._executor.submit(self._commit_group, session, entity_id, record, buffers)
        return self._executor.submit(self._commit_entity, session, entity_id, record, buffers)

    def _commit_failed(self, action, target_id, exc, is_current):
        logging.error("Page %s: %s failed for %s: %s", self.name, action, target_id, exc)
        with self._lock:
            if is_current():
                self._last_error = str(exc)
        return CommitResult(action, ok=False, entity_id=target_id, error=str(exc))

    def _log_detached(self, action, target_id):
        logging.info(
            "Page %s: %s for %s completed after its edit session closed; page left as is",
            self.name,
            action,
            target_id,
        )

    def _commit_entity(self, session, entity_id, record, buffers):
        plant = plant_from_buffers(record, buffers)
        action = "update_plant" if plant.id else "create_plant"
        try:
            plant_id = self.api.save_plant(plant)
        except PlantBuddyAPIError as exc:
            return self._commit_failed(action, plant.id, exc, lambda: self._is_open_edit_locked(session, entity_id))

        plant = replace(plant, id=plant_id or plant.id)
        if plant.group_id and plant.group is None:
            try:
                plant = plant.with_group(self.api.get_group(plant.group_id))
            except PlantBuddyAPIError as exc:
                logging.warning("Page %s: could not load group %s: %s", self.name, plant.group_id, exc)
        plant = _with_default_ranges(plant)

        with self._lock:
            if not self._is_open_edit_locked(session, entity_id):
                self._log_detached(action, plant.id)
                return CommitResult(action, ok=True, entity_id=plant.id)
            self._record = plant
            self._chart = _overlay_chart(self._chart, plant, self._active_kind)
            self._state = PageState.LOADED
            self._buffers = None
            self._last_error = None
        return CommitResult(action, ok=True, entity_id=plant.id)

    def _link_plant_to_group(self, record, group_id):
        """Assign an ungrouped plant to `group_id` on the collaborator; returns the error, if any."""
        try:
            self.api.save_plant(replace(record, group_id=group_id, group=None))
        except PlantBuddyAPIError as exc:
            logging.error(
                "Page %s: group %s saved but assigning plant %s to it failed: %s",
                self.name,
                group_id,
                record.id,
                exc,
            )
            return exc
        logging.info("Page %s: plant %s assigned to group %s", self.name, record.id, group_id)
        return None

    def _commit_group(self, session, entity_id, record, buffers):
        group = group_from_buffers(record.group if record is not None else None, buffers)
        action = "update_group" if group.id else "create_group"
        try:
            group_id = self.api.save_group(group)
        except PlantBuddyAPIError as exc:
            return self._commit_failed(action, group.id, exc, lambda: self._is_open_edit_locked(session, entity_id))

        group = replace(group, id=group_id or group.id)
        link_error = None
        if record is not None and record.id and record.group_id is None and group.id:
            link_error = self._link_plant_to_group(record, group.id)

        if link_error is not None:
            result = CommitResult("assign_group", ok=False, entity_id=record.id, error=str(link_error))
        else:
            result = CommitResult(action, ok=True, entity_id=group.id)

        with self._lock:
            if not self._is_open_edit_locked(session, entity_id):
                self._log_detached(action, group.id)
                return result
            if link_error is None and self._record is not None and self._record.group_id in (None, group.id):
                self._record = _with_default_ranges(self._record.with_group(group))
                self._chart = _overlay_chart(self._chart, self._record, self._active_kind)
            else:
                logging.info("Page %s: group %s saved without plant assignment", self.name, group.id)
            self._state = PageState.LOADED
            self._buffers = None
            self._last_error = None if link_error is None else str(link_error)
        return result

    def delete(self) -> Future:
        """Delete the current plant; on success the page returns to selection."""
        with self._lock:
            entity_id = self._entity_id
            if entity_id is None or self._state not in {PageState.LOADED} | EDITING_STATES:
                return completed_future(CommitResult("delete_plant", ok=False, error="no entity loaded"))
        return self._executor.submit(self._delete_entity, entity_id)

    def _delete_entity(self, entity_id):
        try:
            self.api.delete_plant(entity_id)
        except PlantBuddyAPIError as exc:
            return self._commit_failed("delete_plant", entity_id, exc, lambda: self._entity_id == entity_id)
        with self._lock:
            if self._entity_id == entity_id:
                self._fetch_seq += 1
                self._state = PageState.AWAITING_SELECTION
                self._entity_id = None
                self._record = None
                self._chart = None
                self._buffers = None
                self._refreshing = False
                self._last_error = None
        return CommitResult("delete_plant", ok=True, entity_id=entity_id)
