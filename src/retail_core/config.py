"""Unified configuration for retail_core.

This module provides the two configuration objects used across the package:

- ``StoreTopology``: store identity lookup tables and merge rules that drive
  the sales normalizer and merger.
- ``ApiSettings``: where and how to reach the reporting REST API.

Both are plain dataclasses so they can be built in tests without touching
the filesystem or the environment.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from retail_core.exceptions import ConfigError

logger = logging.getLogger(__name__)

MergeRule = tuple[int, int]

# Trading-name aliases whose rows arrive under the wrong store code.
DEFAULT_NAME_TO_CODE: dict[str, int] = {
    "NASTABAZAR WAREHOUSE": 42,
    "NASTA BAZAR SHELA": 44,
    "NASTA BAZAR BODAKDEV": 45,
    "NASTA BAZAR JODHPUR": 53,
    "NASTA BAZAR RAJKOT": 58,
    "NASTA BAZAR SOBO": 61,
}

# Legal-entity names that must be reported under the store's trading name.
DEFAULT_NAME_TO_NAME_AND_CODE: dict[str, tuple[str, int]] = {
    "FOOD BOOK ASSOCIATE LLP VIJAY CHAR RASTA": ("MAGSON VIJAY CHAR RASTA", 51),
    "FARMAGS ASSOCIATES LLP": ("MAGSON SOUTH BOPAL", 50),
    "SADAA": ("MAGSON SHANTIGRAM", 55),
    "FOOD BOOK ASSOCIATE LLP HEBATPUR": ("MAGSON HEBATPUR", 52),
    "KRISHIV FOODS": ("MAGSON INFOCITY", 54),
    "MAGSON - MCW": ("MCW BODAKDEV", 31),
}

# (from, into). (62, 30) is known but disabled in production.
DEFAULT_MERGE_RULES: list[MergeRule] = [(35, 8)]

DEFAULT_EXCLUDED_STORE_CODES: frozenset[int] = frozenset({30, 62})


@dataclass
class StoreTopology:
    """Store identity tables and merge rules for one deployment.

    Attributes:
        name_to_code: StoreName -> StoreCode. Only the code is rewritten.
        name_to_name_and_code: StoreName -> (new StoreName, new StoreCode).
        merge_rules: Ordered (from, into) store code pairs.
        excluded_store_codes: Stores left out of the default dashboard
            selection and of the default margin report store list.
    """

    name_to_code: dict[str, int] = field(default_factory=dict)
    name_to_name_and_code: dict[str, tuple[str, int]] = field(default_factory=dict)
    merge_rules: list[MergeRule] = field(default_factory=list)
    excluded_store_codes: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        # A (code, code) rule would delete the store's rows instead of merging them.
        self_merges = sorted({src for src, dst in self.merge_rules if src == dst})
        if self_merges:
            raise ConfigError(f"Merge rules for stores {self_merges} merge a store into itself")

        # A rewritten name that is itself a lookup key would make a second
        # normalization pass change the record again.
        chained = sorted(
            new_name
            for new_name, _ in self.name_to_name_and_code.values()
            if new_name in self.name_to_code or new_name in self.name_to_name_and_code
        )
        if chained:
            raise ConfigError(
                f"Store names {chained} are both a rewrite target and a lookup key; "
                f"normalization would not be idempotent"
            )

    @classmethod
    def default(cls) -> StoreTopology:
        """Return the production topology of the retail chain."""
        return cls(
            name_to_code=dict(DEFAULT_NAME_TO_CODE),
            name_to_name_and_code=dict(DEFAULT_NAME_TO_NAME_AND_CODE),
            merge_rules=list(DEFAULT_MERGE_RULES),
            excluded_store_codes=DEFAULT_EXCLUDED_STORE_CODES,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoreTopology:
        """Build a topology from its JSON representation.

        Missing sections fall back to empty tables.

        Raises:
            ConfigError: If a section has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ConfigError("Store topology must be a JSON object")

        try:
            name_to_code = {str(k): int(v) for k, v in data.get("name_to_code", {}).items()}

            name_to_name_and_code: dict[str, tuple[str, int]] = {}
            for name, target in data.get("name_to_name_and_code", {}).items():
                if isinstance(target, dict):
                    new_name, new_code = target["name"], target["code"]
                else:
                    new_name, new_code = target
                name_to_name_and_code[str(name)] = (str(new_name), int(new_code))

            merge_rules = [(int(src), int(dst)) for src, dst in data.get("merge_rules", [])]
            excluded = frozenset(int(c) for c in data.get("excluded_store_codes", []))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid store topology: {e}") from e

        return cls(
            name_to_code=name_to_code,
            name_to_name_and_code=name_to_name_and_code,
            merge_rules=merge_rules,
            excluded_store_codes=excluded,
        )

    @classmethod
    def from_json(cls, path: str | Path) -> StoreTopology:
        """Load a topology from a JSON file.

        Expected shape::

            {
              "name_to_code": {"NASTA BAZAR SHELA": 44},
              "name_to_name_and_code": {"SADAA": ["MAGSON SHANTIGRAM", 55]},
              "merge_rules": [[35, 8]],
              "excluded_store_codes": [30, 62]
            }

        Args:
            path: Path to the topology JSON file.

        Returns:
            StoreTopology instance.

        Raises:
            ConfigError: If the file is missing, not valid JSON or malformed.
        """
        if isinstance(path, str):
            path = Path(path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot load store topology {path}: {e}") from e

        topology = cls.from_dict(data)
        logger.debug(
            "Loaded store topology from %s (%d aliases, %d renames, %d merge rules)",
            path,
            len(topology.name_to_code),
            len(topology.name_to_name_and_code),
            len(topology.merge_rules),
        )
        return topology


@dataclass
class ApiSettings:
    """Connection settings for the reporting REST API.

    Attributes:
        base_url: API root, e.g. ``https://reports.example.com``.
        timeout: Default request timeout in seconds.
        retries: Retry attempts for idempotent requests.
    """

    base_url: str
    timeout: float = 60.0
    retries: int = 3

    @classmethod
    def from_env(cls) -> ApiSettings:
        """Read settings from RETAIL_API_URL, RETAIL_API_TIMEOUT, RETAIL_API_RETRIES.

        Raises:
            ConfigError: If RETAIL_API_URL is unset or a number is malformed.
        """
        base_url = os.environ.get("RETAIL_API_URL", "").strip().strip('"').strip("'")
        if not base_url:
            raise ConfigError("RETAIL_API_URL is not set")

        try:
            timeout = float(os.environ.get("RETAIL_API_TIMEOUT", "60"))
            retries = int(os.environ.get("RETAIL_API_RETRIES", "3"))
        except ValueError as e:
            raise ConfigError(f"Invalid API settings in environment: {e}") from e

        return cls(base_url=base_url.rstrip("/"), timeout=timeout, retries=retries)
