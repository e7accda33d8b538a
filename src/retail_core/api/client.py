"""HTTP client for the reporting REST API.

The backend performs the heavy aggregation; this client only fetches the
report rows. Sales slices are normalized and merged on receipt so every
consumer sees canonical store codes.

Example:
    >>> from retail_core.api import ReportClient
    >>> from retail_core.config import ApiSettings
    >>> client = ReportClient(ApiSettings(base_url="https://reports.example.com"))
    >>> rows = client.fetch_sales("2025-01-01", "2025-01-18")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from retail_core.api.state import QueryState
from retail_core.config import ApiSettings, StoreTopology
from retail_core.dashboard.metrics import DashboardSnapshot
from retail_core.exceptions import DataQualityError, FetchError
from retail_core.sales.aggregate import prepare_records
from retail_core.sales.records import SalesRecord
from retail_core.utils import month_ago_range, safe_number, year_ago_range

logger = logging.getLogger(__name__)

MARGIN_TOTAL_KEYS = ("TotalQty", "TotalAmount", "COGS", "GrossAmount", "GrossMarginAmount", "RGM")
MOM_PAGE_LIMIT = 50
RETRY_STATUSES = (429, 502, 503, 504)


def make_session(timeout: float = 60.0, retries: int = 3) -> requests.Session:
    """Session for the reporting API: JSON accept header, retries, timeout.

    Report queries are read-only, so POST (margin, MoM and ABC reports) is
    retried like GET. Throttling and gateway errors are retried with
    backoff; the final response is returned so ``ReportClient`` can turn
    its status into a ``FetchError``.
    """
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    policy = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "POST"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=policy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    send = session.request

    def request_with_timeout(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return send(method, url, **kwargs)

    session.request = request_with_timeout  # type: ignore[method-assign,assignment]
    return session


class ReportClient:
    """Typed access to the reporting endpoints.

    Every method raises ``FetchError`` when the request fails or the server
    answers with a non-2xx status.
    """

    def __init__(
        self,
        settings: ApiSettings,
        session: requests.Session | None = None,
        topology: StoreTopology | None = None,
    ) -> None:
        self.settings = settings
        self.session = session or make_session(settings.timeout, settings.retries)
        self.topology = topology or StoreTopology.default()

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}{path}"

    def _request(self, method: str, path: str, what: str, **kwargs: Any) -> Any:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {what}: {e}") from e

        if not (200 <= resp.status_code < 300):
            detail = (resp.text or "").strip()[:400]
            raise FetchError(
                detail or f"Failed to fetch {what} (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"Failed to fetch {what}: response is not JSON", resp.status_code) from e

    def _rows(self, path: str, what: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        data = self._request("GET", path, what, params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataQualityError(f"Expected a list of rows for {what}, got {type(data).__name__}")
        logger.info("Fetched %d %s rows", len(data), what)
        return data

    def _sales(self, path: str, what: str, start_date: str, end_date: str) -> list[SalesRecord]:
        rows = self._rows(path, what, {"startDate": start_date, "endDate": end_date})
        return prepare_records(rows, self.topology)

    # Sales slices -------------------------------------------------------

    def fetch_yesterday_sales(self) -> list[SalesRecord]:
        """Previous-day sales, normalized and merged."""
        return prepare_records(self._rows("/sales/yest-sales", "sales"), self.topology)

    def fetch_sales(self, start_date: str, end_date: str) -> list[SalesRecord]:
        """Sales for a date range, normalized and merged."""
        return self._sales("/sales/transactions", "sales", start_date, end_date)

    def fetch_last_month_sales(self, start_date: str, end_date: str) -> list[SalesRecord]:
        """Last-month comparison sales for an already shifted range."""
        return self._sales("/sales/lm-transactions", "LM MTD sales", start_date, end_date)

    def fetch_last_year_sales(self, start_date: str, end_date: str) -> list[SalesRecord]:
        """Last-year comparison sales for an already shifted range."""
        return self._sales("/sales/ly-transactions", "last year sales", start_date, end_date)

    # Reference data -----------------------------------------------------

    def fetch_store_targets(self) -> list[dict[str, Any]]:
        """Monthly targets, one row per store."""
        return self._rows("/store-target", "store targets")

    def fetch_stores(self) -> list[dict[str, Any]]:
        """Store master rows."""
        return self._rows("/stores/stores", "stores")

    def default_store_codes(self, known_codes: Sequence[int]) -> list[int]:
        """Known store codes minus the topology's excluded stores."""
        return [c for c in known_codes if c not in self.topology.excluded_store_codes]

    # Margin and ABC reports ---------------------------------------------

    def fetch_margin_report(
        self,
        start_date: str,
        end_date: str,
        store_codes: Sequence[int],
    ) -> dict[str, Any]:
        """Department sales margin report.

        Returns:
            ``{"items": [...departments], "grandTotal": {...}}``. Missing parts
            default to an empty list and zeroed totals.

        """
        body = {"storeCodes": list(store_codes), "startDate": start_date, "endDate": end_date}
        data = self._request("POST", "/margin/department-sales-margin", "margin report", json=body) or {}

        departments = data.get("Departments")
        grand_total = data.get("GrandTotal") or {key: 0 for key in MARGIN_TOTAL_KEYS}
        return {
            "items": departments if isinstance(departments, list) else [],
            "grandTotal": grand_total,
        }

    def fetch_mom_report(
        self,
        start_date: str,
        end_date: str,
        store_codes: Sequence[int],
        department: str | None = None,
        page: int = 1,
        limit: int = MOM_PAGE_LIMIT,
    ) -> list[dict[str, Any]]:
        """Month-on-month margin by department and brand (one page).

        Numeric fields missing from the payload are reported as 0 and brand
        names fall back to the brand description.
        """
        body = {
            "storeCodes": list(store_codes),
            "startDate": start_date,
            "endDate": end_date,
            "department": department or None,
            "page": page or 1,
            "limit": limit or MOM_PAGE_LIMIT,
        }
        data = self._request("POST", "/margin/mom-sales-margin", "MoM data", json=body) or {}

        months = data.get("MoMData")
        if not isinstance(months, list):
            return []
        return [
            {
                "Month": month.get("Month") or "",
                "Departments": [_mom_department(d) for d in month.get("Departments") or []],
            }
            for month in months
        ]

    def fetch_abc_report(self, body: dict[str, Any]) -> dict[str, Any]:
        """ABC classification page for the given filters."""
        data = self._request("POST", "/debug/abc-analysis", "ABC report", json=body)
        if not isinstance(data, dict):
            raise DataQualityError(f"Expected an object for ABC report, got {type(data).__name__}")
        return data


def _mom_department(dept: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {"Department": dept.get("Department") or ""}
    for key in MARGIN_TOTAL_KEYS:
        row[key] = safe_number(dept.get(key))

    brands = []
    for brand in dept.get("Brands") or []:
        name = (brand.get("BrandName") or "").strip() or (brand.get("BrandDescription") or "").strip()
        entry: dict[str, Any] = {"BrandCode": brand.get("BrandCode"), "Brand": name}
        for key in MARGIN_TOTAL_KEYS:
            entry[key] = safe_number(brand.get(key))
        brands.append(entry)
    row["Brands"] = brands
    return row


SNAPSHOT_SLICES = ("yesterday", "mtd", "last_month", "last_year", "targets")


def load_snapshot(
    client: ReportClient,
    start_date: str,
    end_date: str,
    state: QueryState | None = None,
) -> DashboardSnapshot:
    """Fetch every slice the dashboard needs for an MTD window.

    The last-month and last-year windows are derived from ``start_date`` and
    ``end_date``. When a ``QueryState`` is given, each slice is tracked in it
    and a slice superseded by a newer query is not written back.

    Raises:
        FetchError: If any slice fails. Earlier slices are kept in ``state``.

    """
    lm_start, lm_end = month_ago_range(start_date, end_date)
    ly_start, ly_end = year_ago_range(start_date, end_date)

    fetchers = {
        "yesterday": client.fetch_yesterday_sales,
        "mtd": lambda: client.fetch_sales(start_date, end_date),
        "last_month": lambda: client.fetch_last_month_sales(lm_start, lm_end),
        "last_year": lambda: client.fetch_last_year_sales(ly_start, ly_end),
        "targets": client.fetch_store_targets,
    }

    results: dict[str, list[dict[str, Any]]] = {}
    for name in SNAPSHOT_SLICES:
        token = state.begin(name) if state is not None else None
        try:
            results[name] = fetchers[name]()
        except (FetchError, DataQualityError) as e:
            if state is not None and token is not None:
                state.reject(token, str(e))
            raise
        if state is not None and token is not None:
            state.resolve(token, results[name])

    return DashboardSnapshot(
        yesterday=results["yesterday"],
        mtd=results["mtd"],
        last_month=results["last_month"],
        last_year=results["last_year"],
        targets=results["targets"],
        start_date=start_date,
        end_date=end_date,
    )
