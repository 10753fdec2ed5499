"""Home page: plant/group listings, the multi-group chart and the create/delete modals."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from plantbuddy_api import PlantBuddyAPIError
from runtime.defaults import DEFAULT_WINDOW_START
from telemetry.chart_aggregator import ChartModel, update_charts
from telemetry.edit_actions import EditBuffers, action_from_field_index, apply_edit_action
from telemetry.models import CommitResult, TimeWindow
from telemetry.page_controller import completed_future
from telemetry.reconcile import buffers_from_records, group_from_buffers, plant_from_buffers
from telemetry.sensor_catalog import SensorKind
from time_utils import now_utc, window_ending_now

MODAL_CREATE_PLANT = "create_plant"
MODAL_CREATE_GROUP = "create_group"


@dataclass(frozen=True)
class OverviewSnapshot:
    groups: tuple = ()
    plants: tuple = ()
    chart: ChartModel = None
    active_kind: SensorKind = None
    window: TimeWindow = None
    modal: str = None
    buffers: EditBuffers = None
    refreshing: bool = False
    last_error: str = None
    last_updated: datetime = None
    fetch_seq: int = 0


class OverviewController:
    """
    Drives the overview page.

    Group series are cached per sensor kind so flipping between kinds does
    not hit the collaborator again. The cache is dropped whenever the group
    listing is refreshed or the window changes; a generation counter keeps a
    fetch that started before the drop from repopulating it.
    """

    def __init__(
        self,
        api,
        fetcher,
        *,
        name="overview",
        default_kind=SensorKind.HUMIDITY,
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
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"{self.name}-page")
        self._lock = threading.Lock()

        self._groups = ()
        self._plants = ()
        self._chart = None
        self._active_kind = self.default_kind
        self._window = TimeWindow.from_bounds(window_start, now_fn())
        self._modal = None
        self._buffers = None
        self._refreshing = False
        self._last_error = None
        self._last_updated = None
        self._fetch_seq = 0
        self._refresh_seq = 0
        self._cache = {}
        self._cache_generation = 0

    def shutdown(self):
        self._executor.shutdown(wait=False)

    def _snapshot_locked(self):
        return OverviewSnapshot(
            groups=self._groups,
            plants=self._plants,
            chart=self._chart,
            active_kind=self._active_kind,
            window=self._window,
            modal=self._modal,
            buffers=self._buffers,
            refreshing=self._refreshing,
            last_error=self._last_error,
            last_updated=self._last_updated,
            fetch_seq=self._fetch_seq,
        )

    def snapshot(self) -> OverviewSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def cached_kinds(self):
        with self._lock:
            return set(self._cache)

    def _clear_cache_locked(self):
        self._cache = {}
        self._cache_generation += 1

    # --- Listings and chart ---

    def refresh(self) -> Future:
        """Reload both listings, drop the series cache and re-fetch the active kind."""
        with self._lock:
            self._clear_cache_locked()
            self._fetch_seq += 1
            self._refresh_seq += 1
            self._refreshing = True
            stamp = self._fetch_seq
            refresh_stamp = self._refresh_seq
            generation = self._cache_generation
            kind = self._active_kind
            window = self._window
        return self._executor.submit(self._refresh_task, stamp, refresh_stamp, generation, kind, window)

    def _refresh_task(self, stamp, refresh_stamp, generation, kind, window):
        groups = tuple(self.fetcher.fetch_ids_and_names(is_group=True))
        plants = tuple(self.fetcher.fetch_ids_and_names(is_group=False))
        with self._lock:
            if refresh_stamp == self._refresh_seq:
                self._groups = groups
                self._plants = plants
        logging.info("Overview: %d groups, %d plants listed", len(groups), len(plants))
        return self._load_kind(stamp, generation, kind, window, groups)

    def _load_kind(self, stamp, generation, kind, window, groups):
        labels = {str(group_id): name for group_id, name in groups}
        results = self.fetcher.fetch_series(list(labels), kind, window, is_group=True)
        chart = update_charts(None, self.name, results, kind, labels, rng=self.rng)
        with self._lock:
            if generation == self._cache_generation:
                self._cache[kind] = chart
            if stamp == self._fetch_seq:
                self._chart = chart
                self._refreshing = False
                self._last_updated = self.now_fn()
            else:
                logging.debug("Overview: discarding stale batch %s (latest=%s)", stamp, self._fetch_seq)
            return self._snapshot_locked()

    def switch_sensor_kind(self, kind) -> Future:
        """Show all group series for `kind`, from the cache when present."""
        kind = SensorKind.from_name(kind)
        with self._lock:
            self._active_kind = kind
            self._fetch_seq += 1
            cached = self._cache.get(kind)
            if cached is not None:
                self._chart = cached
                self._refreshing = False
                return completed_future(self._snapshot_locked())
            self._refreshing = True
            stamp = self._fetch_seq
            generation = self._cache_generation
            window = self._window
            groups = self._groups
        return self._executor.submit(self._load_kind, stamp, generation, kind, window, groups)

    def switch_time_window(self, duration) -> Future:
        duration = pd.Timedelta(duration).to_pytimedelta()
        start, end = window_ending_now(duration, self.now_fn())
        with self._lock:
            self._window = TimeWindow(start, end)
            self._clear_cache_locked()
            kind = self._active_kind
        return self.switch_sensor_kind(kind)

    # --- Create / delete ---

    def open_create_plant(self) -> OverviewSnapshot:
        with self._lock:
            self._modal = MODAL_CREATE_PLANT
            self._buffers = EditBuffers()
            self._last_error = None
            return self._snapshot_locked()

    def open_create_group(self) -> OverviewSnapshot:
        with self._lock:
            self._modal = MODAL_CREATE_GROUP
            self._buffers = buffers_from_records()
            self._last_error = None
            return self._snapshot_locked()

    def close_modal(self) -> OverviewSnapshot:
        with self._lock:
            self._modal = None
            self._buffers = None
            return self._snapshot_locked()

    def apply_edit(self, action) -> OverviewSnapshot:
        with self._lock:
            if self._modal is None:
                return self._snapshot_locked()
            self._buffers = apply_edit_action(self._buffers, action)
            return self._snapshot_locked()

    def field_updated(self, index, value) -> OverviewSnapshot:
        action = action_from_field_index(index, value)
        if action is None:
            return self.snapshot()
        return self.apply_edit(action)

    def commit(self) -> Future:
        """Create the plant or group described by the open modal; yields a CommitResult."""
        with self._lock:
            modal = self._modal
            buffers = self._buffers
        if modal == MODAL_CREATE_PLANT:
            return self._executor.submit(self._create, "create_plant", buffers)
        if modal == MODAL_CREATE_GROUP:
            return self._executor.submit(self._create, "create_group", buffers)
        return completed_future(CommitResult("commit", ok=False, error="no create dialog open"))

    def _failed(self, action, entity_id, exc):
        logging.error("Overview: %s failed: %s", action, exc)
        with self._lock:
            self._last_error = str(exc)
        return CommitResult(action, ok=False, entity_id=entity_id, error=str(exc))

    def _create(self, action, buffers):
        try:
            if action == "create_plant":
                entity_id = self.api.create_plant(plant_from_buffers(None, buffers))
            else:
                entity_id = self.api.create_group(group_from_buffers(None, buffers))
        except PlantBuddyAPIError as exc:
            return self._failed(action, None, exc)
        with self._lock:
            self._modal = None
            self._buffers = None
            self._last_error = None
        logging.info("Overview: %s succeeded id=%s", action, entity_id)
        self.refresh()
        return CommitResult(action, ok=True, entity_id=entity_id)

    def delete_group(self, group_id) -> Future:
        group_id = str(group_id or "").strip()
        if not group_id:
            return completed_future(CommitResult("delete_group", ok=False, error="missing group id"))
        return self._executor.submit(self._delete_group, group_id)

    def _delete_group(self, group_id):
        try:
            self.api.delete_group(group_id)
        except PlantBuddyAPIError as exc:
            return self._failed("delete_group", group_id, exc)
        logging.info("Overview: group %s deleted", group_id)
        self.refresh()
        return CommitResult("delete_group", ok=True, entity_id=group_id)
