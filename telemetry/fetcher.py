"""Concurrent per-entity telemetry fetching with per-request failure isolation."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from plantbuddy_api import PlantBuddyAPIError
from runtime.defaults import DEFAULT_FETCH_MAX_WORKERS
from telemetry.models import FetchRequest, FetchResult, TimeSeries
from telemetry.sensor_catalog import SensorKind


def _unique_ids(entity_ids):
    seen = set()
    unique = []
    for entity_id in entity_ids or []:
        key = str(entity_id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(key)
    return unique


class TelemetryFetcher:
    """
    Fan out sensor-series requests over a bounded thread pool.

    Results are returned in completion order, not request order; each result
    carries the FetchRequest it answers so callers can index by key.
    """

    def __init__(self, api, max_workers=DEFAULT_FETCH_MAX_WORKERS):
        self.api = api
        self.max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="telemetry-fetch")

    def shutdown(self):
        self._executor.shutdown(wait=False)

    def _fetch_one(self, request, window):
        points = self.api.get_sensor_data(request.entity_id, request.kind, window, is_group=request.is_group)
        if not points:
            return None
        return TimeSeries.from_points(request.entity_id, request.kind, points, window=window)

    def fetch_series(self, entity_ids, kind, window, is_group=False):
        """
        Fetch one series per entity id for `kind` over `window`.

        Failing requests (transport, HTTP status, malformed payload) are logged
        and dropped without affecting siblings. Responses without data are
        excluded. Returns a possibly empty list of FetchResult.
        """
        kind = SensorKind.from_name(kind)
        requests_list = [FetchRequest(entity_id, kind, bool(is_group)) for entity_id in _unique_ids(entity_ids)]
        if not requests_list:
            return []

        futures = {
            self._executor.submit(self._fetch_one, request, window): request
            for request in requests_list
        }

        results = []
        for future in as_completed(futures):
            request = futures[future]
            try:
                series = future.result()
            except PlantBuddyAPIError as exc:
                logging.warning(
                    "Telemetry fetcher: request failed entity=%s sensor=%s: %s",
                    request.entity_id,
                    kind.canonical_name,
                    exc,
                )
                continue
            except (TypeError, ValueError) as exc:
                logging.warning(
                    "Telemetry fetcher: malformed data entity=%s sensor=%s: %s",
                    request.entity_id,
                    kind.canonical_name,
                    exc,
                )
                continue
            if series is None:
                logging.debug(
                    "Telemetry fetcher: no data entity=%s sensor=%s",
                    request.entity_id,
                    kind.canonical_name,
                )
                continue
            results.append(FetchResult(request, series))

        logging.info(
            "Telemetry fetcher: %d/%d series fetched sensor=%s window=[%s -> %s]",
            len(results),
            len(requests_list),
            kind.canonical_name,
            window.start_iso,
            window.end_iso,
        )
        return results

    def fetch_ids_and_names(self, is_group=False):
        """Single-request lookup of (id, name) pairs; errors yield an empty list."""
        try:
            if is_group:
                return self.api.get_group_ids_names()
            return self.api.get_plant_ids_names()
        except PlantBuddyAPIError as exc:
            logging.warning(
                "Telemetry fetcher: %s overview lookup failed: %s",
                "group" if is_group else "plant",
                exc,
            )
            return []
