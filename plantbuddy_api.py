"""
PlantBuddy API wrapper.

This module provides a wrapper around the PlantBuddy HTTP service, the system
of record for plants, plant groups and their sensor telemetry. A single static
credential is encoded once as a Basic-auth header and attached to every
request. One client instance is meant to be shared by all pages and worker
threads: only creation of the underlying HTTP session is serialized, requests
themselves run concurrently.
"""

import base64
import logging
import threading

import requests

from runtime.defaults import DEFAULT_API_BASE_URL, DEFAULT_API_REQUEST_TIMEOUT_S
from telemetry.models import GroupRecord, PlantRecord
from telemetry.sensor_catalog import SensorKind

SENSOR_DATA_PATH = "sensor-data"
PLANT_PATH = "plant"
PLANT_OVERVIEW_PATH = "plant/overview"
GROUP_PATH = "plant-group"
GROUP_OVERVIEW_PATH = "plant-group/overview"


class PlantBuddyAPIError(Exception):
    """Base exception for PlantBuddy API errors."""
    pass


class AuthenticationError(PlantBuddyAPIError):
    """Raised when the service rejects the configured credential."""
    pass


class NotFoundError(PlantBuddyAPIError):
    """Raised when the requested plant or group does not exist."""
    pass


class ResponseFormatError(PlantBuddyAPIError):
    """Raised when a response body is not the JSON shape the endpoint promises."""
    pass


def build_basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class PlantBuddyAPI:
    """
    Wrapper class for the PlantBuddy API.

    Provides the sensor-series query, the id/name overview lookups and CRUD
    for plants and plant groups. All methods raise PlantBuddyAPIError (or a
    subclass) on failure; callers decide whether to swallow or surface them.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        username: str = "",
        password: str = "",
        timeout_s: float = DEFAULT_API_REQUEST_TIMEOUT_S,
    ):
        """
        Initialize the PlantBuddy API wrapper.

        Args:
            base_url: The base URL for the API endpoints
            username: User name of the static service credential
            password: Password of the static service credential
            timeout_s: Per-request timeout in seconds (timeouts are not retried)
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_s = float(timeout_s)
        self._auth_header = build_basic_auth_header(username, password)
        self._session = None
        self._session_lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            base_url=config.get("API_BASE_URL", DEFAULT_API_BASE_URL),
            username=config.get("API_USERNAME", ""),
            password=config.get("API_PASSWORD", ""),
            timeout_s=config.get("API_REQUEST_TIMEOUT_S", DEFAULT_API_REQUEST_TIMEOUT_S),
        )

    def _get_session(self):
        with self._session_lock:
            if self._session is None:
                self._session = requests.Session()
                logging.info("PlantBuddy API: HTTP session created for %s", self.base_url)
            return self._session

    def close(self):
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def _request(self, method, path, *, params=None, json_body=None, expect_json=True):
        """
        Send one request and return the decoded JSON body.

        Returns None for an empty body or when `expect_json` is False.

        Raises:
            AuthenticationError: On 401/403
            NotFoundError: On 404
            ResponseFormatError: If the body is not valid JSON
            PlantBuddyAPIError: On transport errors, timeouts and other non-2xx
        """
        url = f"{self.base_url}{path}"
        headers = {"Authorization": self._auth_header, "Accept": "application/json"}
        try:
            response = self._get_session().request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.exceptions.Timeout as e:
            raise PlantBuddyAPIError(f"Timeout after {self.timeout_s}s: {method} {path}") from e
        except requests.exceptions.RequestException as e:
            raise PlantBuddyAPIError(f"Transport error: {method} {path} - {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(f"Authentication failed ({status}): {method} {path}")
        if status == 404:
            raise NotFoundError(f"Not found: {method} {path}")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise PlantBuddyAPIError(f"HTTP error: {e}") from e

        if not expect_json or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Invalid JSON from {method} {path}: {e}") from e

    # --- Telemetry ---

    def get_sensor_data(self, entity_id, kind, window, is_group=False):
        """
        Fetch raw data points for one entity and sensor kind over a window.

        Returns:
            List of {"value": number, "timestamp": str} mappings, or None when
            the service reports no data (``{"data": null}``).
        """
        kind = SensorKind.from_name(kind)
        params = {
            "sensor": kind.canonical_name,
            "plantGroup" if is_group else "plant": str(entity_id),
            "from": window.start_iso,
            "to": window.end_iso,
        }
        payload = self._request("GET", SENSOR_DATA_PATH, params=params)
        if payload is None:
            return None
        if not isinstance(payload, dict) or "data" not in payload:
            raise ResponseFormatError(f"Sensor data response without 'data' field for {entity_id}")
        data = payload["data"]
        if data is None:
            return None
        if not isinstance(data, list):
            raise ResponseFormatError(f"Sensor data 'data' field is not a list for {entity_id}")
        return data

    def _get_ids_names(self, path, collection_key):
        payload = self._request("GET", path)
        if payload is None:
            return []
        if not isinstance(payload, dict):
            raise ResponseFormatError(f"Overview response from {path} is not an object")
        rows = payload.get(collection_key)
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise ResponseFormatError(f"Overview field '{collection_key}' is not a list")
        result = []
        for row in rows:
            if not isinstance(row, dict) or row.get("id") is None:
                raise ResponseFormatError(f"Overview row without id: {row!r}")
            result.append((str(row["id"]), str(row.get("name") or "")))
        return result

    def get_plant_ids_names(self):
        """Return [(id, name), ...] for all plants in a single request."""
        return self._get_ids_names(PLANT_OVERVIEW_PATH, "plants")

    def get_group_ids_names(self):
        """Return [(id, name), ...] for all plant groups in a single request."""
        return self._get_ids_names(GROUP_OVERVIEW_PATH, "plantGroups")

    # --- Plants ---

    def get_plant(self, plant_id) -> PlantRecord:
        payload = self._request("GET", f"{PLANT_PATH}/{plant_id}")
        try:
            record = PlantRecord.from_json(payload)
        except (AttributeError, TypeError, ValueError) as e:
            raise ResponseFormatError(f"Invalid plant payload for {plant_id}: {e}") from e
        if record.id is None:
            record.id = str(plant_id)
        return record

    def create_plant(self, record: PlantRecord):
        """Create a plant and return the id assigned by the service (None if not reported)."""
        payload = self._request("POST", PLANT_PATH, json_body=record.to_payload())
        created_id = payload.get("id") if isinstance(payload, dict) else None
        logging.info("PlantBuddy API: Created plant '%s' (id=%s)", record.name, created_id)
        return None if created_id is None else str(created_id)

    def update_plant(self, plant_id, record: PlantRecord):
        self._request("PUT", f"{PLANT_PATH}/{plant_id}", json_body=record.to_payload(), expect_json=False)
        logging.info("PlantBuddy API: Updated plant %s", plant_id)
        return str(plant_id)

    def save_plant(self, record: PlantRecord):
        """Update the plant if its id is known, otherwise create it. Returns the plant id."""
        if record.id:
            return self.update_plant(record.id, record)
        return self.create_plant(record)

    def delete_plant(self, plant_id):
        self._request("DELETE", f"{PLANT_PATH}/{plant_id}", expect_json=False)
        logging.info("PlantBuddy API: Deleted plant %s", plant_id)

    # --- Plant groups ---

    def get_group(self, group_id) -> GroupRecord:
        payload = self._request("GET", f"{GROUP_PATH}/{group_id}")
        try:
            record = GroupRecord.from_json(payload)
        except (AttributeError, TypeError, ValueError) as e:
            raise ResponseFormatError(f"Invalid plant group payload for {group_id}: {e}") from e
        if record.id is None:
            record.id = str(group_id)
        return record

    def create_group(self, record: GroupRecord):
        payload = self._request("POST", GROUP_PATH, json_body=record.to_payload())
        created_id = payload.get("id") if isinstance(payload, dict) else None
        logging.info("PlantBuddy API: Created plant group '%s' (id=%s)", record.name, created_id)
        return None if created_id is None else str(created_id)

    def update_group(self, group_id, record: GroupRecord):
        self._request("PUT", f"{GROUP_PATH}/{group_id}", json_body=record.to_payload(), expect_json=False)
        logging.info("PlantBuddy API: Updated plant group %s", group_id)
        return str(group_id)

    def save_group(self, record: GroupRecord):
        """Update the group if its id is known, otherwise create it. Returns the group id."""
        if record.id:
            return self.update_group(record.id, record)
        return self.create_group(record)

    def delete_group(self, group_id):
        self._request("DELETE", f"{GROUP_PATH}/{group_id}", expect_json=False)
        logging.info("PlantBuddy API: Deleted plant group %s", group_id)
