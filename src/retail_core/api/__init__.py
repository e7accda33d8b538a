"""REST client and fetch state for the reporting API.

Example:
    >>> from retail_core.api import QueryState, ReportClient, load_snapshot
    >>> from retail_core.config import ApiSettings
    >>> client = ReportClient(ApiSettings.from_env())
    >>> state = QueryState()
    >>> snapshot = load_snapshot(client, "2025-01-01", "2025-01-18", state)
"""

from retail_core.api.client import ReportClient, load_snapshot, make_session
from retail_core.api.state import QueryState, QueryToken, SliceState

__all__ = [
    "QueryState",
    "QueryToken",
    "ReportClient",
    "SliceState",
    "load_snapshot",
    "make_session",
]
