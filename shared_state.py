"""Thin helpers to standardize shared_data lock-based access."""


def _session_logs_copy(shared_data):
    lock = shared_data.get("log_lock")
    if lock is None:
        return list(shared_data.get("session_logs", []))
    with lock:
        return list(shared_data.get("session_logs", []))


def session_logs_tail(shared_data, limit=50, component=None):
    """Return a copy of the newest session log entries, optionally for one component only."""
    entries = _session_logs_copy(shared_data)
    if component:
        entries = [entry for entry in entries if entry.get("component") == component]
    return entries[-int(limit):]


def session_log_components(shared_data):
    """Sorted component names present in the session log."""
    return sorted({entry.get("component") for entry in _session_logs_copy(shared_data) if entry.get("component")})
