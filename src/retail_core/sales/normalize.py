"""Store identity normalization.

Upstream feeds report some stores under alternate trading names or legal
entity names. This stage rewrites those rows to the store's canonical code
(and, where needed, its canonical name) before anything is merged or summed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from retail_core.config import StoreTopology
from retail_core.sales.records import STORE_CODE, STORE_NAME, SalesRecord

logger = logging.getLogger(__name__)


def normalize_sales(
    records: Iterable[SalesRecord],
    topology: StoreTopology | None = None,
) -> list[SalesRecord]:
    """Rewrite store identities according to the topology lookup tables.

    For each record:

    1. ``StoreName`` found in ``name_to_code``: only ``StoreCode`` is rewritten.
    2. Else ``StoreName`` found in ``name_to_name_and_code``: both are rewritten.
    3. Else the record passes through unchanged.

    Matching is exact and case-sensitive. Input dicts are never mutated;
    rewritten rows are shallow copies. The output has the same length and
    order as the input.

    Args:
        records: Raw sales records.
        topology: Lookup tables. Defaults to ``StoreTopology.default()``.

    Returns:
        List of normalized records.

    Examples:
        >>> normalize_sales([{"StoreName": "SADAA", "StoreCode": 99}])
        [{'StoreName': 'MAGSON SHANTIGRAM', 'StoreCode': 55}]

    """
    if topology is None:
        topology = StoreTopology.default()

    normalized: list[SalesRecord] = []
    rewritten = 0
    for item in records:
        name = item.get(STORE_NAME)
        if name and name in topology.name_to_code:
            item = {**item, STORE_CODE: topology.name_to_code[name]}
            rewritten += 1
        elif name and name in topology.name_to_name_and_code:
            new_name, new_code = topology.name_to_name_and_code[name]
            item = {**item, STORE_NAME: new_name, STORE_CODE: new_code}
            rewritten += 1
        normalized.append(item)

    logger.debug("Normalized %d records (%d store identities rewritten)", len(normalized), rewritten)
    return normalized
