"""Reference dataset: tables, indexes and load-time validation.

The dataset is built once from an externally produced artifact and never
mutated afterwards. Everything the classifiers need per request (compiled
patterns, exact-match maps, integer range bounds) is prepared here so a
classification call only reads.
"""

from __future__ import annotations

import ipaddress
import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import regex

from uaintel.common.exceptions import (
    DatasetIntegrityError,
    DatasetUnavailableError,
    PatternCompileError,
)
from uaintel.common.logging import get_logger
from uaintel.common.metrics import DATASET_LOAD_SECONDS
from uaintel.dataset.patterns import translate
from uaintel.dataset.tables import Record, Table

logger = get_logger(__name__)

IPV6_GROUPS = 8

# Columns each table must carry for the classifiers to work
TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    "crawler_list": (
        "id", "ua_string", "name", "ver", "ver_major", "last_seen", "respect_robotstxt",
        "family", "family_code", "family_homepage", "family_icon",
        "vendor", "vendor_code", "vendor_homepage", "class_id",
    ),
    "crawler_class": ("id", "crawler_classification", "crawler_classification_code"),
    "client_regex": ("client_id", "regstring"),
    "client_list": (
        "id", "class_id", "name", "name_code", "homepage", "icon", "icon_big", "engine",
        "vendor", "vendor_code", "vendor_homepage", "uptodate_current_version",
    ),
    "client_class": ("id", "client_classification", "client_classification_code", "deviceclass_id"),
    "os_regex": ("os_id", "regstring"),
    "os_list": (
        "id", "family", "family_code", "name", "name_code", "homepage", "icon", "icon_big",
        "vendor", "vendor_code", "vendor_homepage",
    ),
    "client_os_relation": ("client_id", "os_id"),
    "deviceclass_regex": ("deviceclass_id", "regstring"),
    "deviceclass_list": ("id", "name", "name_code", "icon", "icon_big"),
    "devicename_regex": ("id", "os_family_code", "os_code", "regstring"),
    "devicename_list": ("regex_id", "code", "marketname", "brand_id"),
    "devicename_brand": ("id", "brand_code", "brand", "brand_url", "icon", "icon_big"),
    "ip_list": (
        "ip", "class_id", "crawler_id", "ip_last_seen", "ip_hostname",
        "ip_country", "ip_city", "ip_country_code",
    ),
    "ip_class": ("id", "ip_classification", "ip_classification_code"),
    "datacenter_range": ("datacenter_id", "iplong_from", "iplong_to"),
    "datacenter_range6": (
        "datacenter_id",
        *(f"iplong_from{i}" for i in range(IPV6_GROUPS)),
        *(f"iplong_to{i}" for i in range(IPV6_GROUPS)),
    ),
    "datacenter_list": ("id", "name", "name_code", "homepage"),
}

OPTIONAL_TABLES = ("db_info",)

# (table, column, target table)
FOREIGN_KEYS: tuple[tuple[str, str, str], ...] = (
    ("crawler_list", "class_id", "crawler_class"),
    ("client_regex", "client_id", "client_list"),
    ("client_list", "class_id", "client_class"),
    ("client_class", "deviceclass_id", "deviceclass_list"),
    ("os_regex", "os_id", "os_list"),
    ("client_os_relation", "client_id", "client_list"),
    ("client_os_relation", "os_id", "os_list"),
    ("deviceclass_regex", "deviceclass_id", "deviceclass_list"),
    ("devicename_list", "regex_id", "devicename_regex"),
    ("devicename_list", "brand_id", "devicename_brand"),
    ("ip_list", "class_id", "ip_class"),
    ("ip_list", "crawler_id", "crawler_list"),
    ("datacenter_range", "datacenter_id", "datacenter_list"),
    ("datacenter_range6", "datacenter_id", "datacenter_list"),
)


@dataclass(frozen=True)
class Rule:
    """A compiled pattern row, kept in table order."""

    pattern: regex.Pattern
    row: Record


@dataclass(frozen=True)
class DeviceNameRule:
    """A marketname pattern, pre-filtered by OS family."""

    regex_id: Any
    os_code: str
    pattern: regex.Pattern


@dataclass(frozen=True)
class Range4:
    """Inclusive IPv4 datacenter range."""

    start: int
    end: int
    datacenter_id: Any

    def contains(self, value: int) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class Range6:
    """IPv6 datacenter range as eight per-group inclusive bounds."""

    bounds: tuple[tuple[int, int], ...]
    datacenter_id: Any

    def contains(self, groups: tuple[int, ...]) -> bool:
        return all(lo <= g <= hi for (lo, hi), g in zip(self.bounds, groups))


def canonical_ip_key(value: Any) -> str:
    """Normalise an IP list key to the text the classifier looks up."""
    text = str(value).strip().lower()
    try:
        address = ipaddress.ip_address(text)
    except ValueError:
        return text
    if isinstance(address, ipaddress.IPv6Address) and address.scope_id:
        address = ipaddress.IPv6Address(address.packed)
    return str(address)


def _compile_rules(table: Table) -> tuple[Rule, ...]:
    rules = []
    for index, row in enumerate(table.rows):
        record = table.record(row)
        try:
            pattern = translate(record["regstring"])
        except PatternCompileError as e:
            raise PatternCompileError(
                f"Bad pattern in {table.name} row {index}: {e.message}",
                details={"table": table.name, "row": index, **e.details},
                cause=e,
            ) from e
        rules.append(Rule(pattern=pattern, row=record))
    return tuple(rules)


def _as_int(table: Table, index: int, column: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DatasetIntegrityError(
            f"Non-integer bound in {table.name}.{column}",
            details={"table": table.name, "row": index, "column": column, "value": value},
            cause=e,
        ) from e


class Dataset:
    """Immutable, indexed reference dataset.

    Construct with :meth:`from_tables` (already-parsed ETL output) or
    :meth:`load` (JSON artifact on disk). Construction validates every
    foreign key and compiles every pattern; a corrupt dataset never
    becomes an instance.
    """

    def __init__(self, tables: Mapping[str, Table]) -> None:
        missing = [name for name in TABLE_COLUMNS if name not in tables]
        if missing:
            raise DatasetIntegrityError(
                f"Missing tables: {', '.join(missing)}",
                details={"missing": missing},
            )

        for name, columns in TABLE_COLUMNS.items():
            tables[name].require(*columns)

        for name, column, target in FOREIGN_KEYS:
            tables[name].check_references(column, tables[target])

        self._tables = MappingProxyType(dict(tables))

        # Pattern cascades
        self.client_rules = _compile_rules(self.table("client_regex"))
        self.os_rules = _compile_rules(self.table("os_regex"))
        self.deviceclass_rules = _compile_rules(self.table("deviceclass_regex"))
        self.devicename_rules = self._build_devicename_rules()

        # Exact-match maps, first row wins
        self.crawlers_by_ua = self.table("crawler_list").index_by("ua_string")
        self.client_os = self.table("client_os_relation").index_by("client_id")
        self.devicenames = self.table("devicename_list").index_by("regex_id", "code")
        self.ips = self._build_ip_index()

        # Datacenter ranges
        self.ranges4 = self._build_ranges4()
        self.ranges6 = self._build_ranges6()

        logger.info(
            "Dataset ready",
            tables=len(self._tables),
            crawlers=len(self.crawlers_by_ua),
            client_patterns=len(self.client_rules),
            os_patterns=len(self.os_rules),
            ips=len(self.ips),
        )

    @classmethod
    def from_tables(
        cls,
        raw: Mapping[str, Mapping[str, Any]],
        table_prefix: str = "udger_",
    ) -> Dataset:
        """Build a dataset from ETL output.

        Args:
            raw: Table name to ``{"columns": [...], "data": [[...], ...]}``.
                ``headers`` is accepted in place of ``columns``.
            table_prefix: Prefix stripped from table names.
        """
        with DATASET_LOAD_SECONDS.time():
            tables: dict[str, Table] = {}
            for name, payload in raw.items():
                short = name.removeprefix(table_prefix) if table_prefix else name
                columns = payload.get("columns", payload.get("headers"))
                if columns is None or "data" not in payload:
                    raise DatasetIntegrityError(
                        f"Table {name} needs columns and data",
                        details={"table": name},
                    )
                if isinstance(columns, Mapping):
                    # {column: position} form
                    columns = sorted(columns, key=columns.__getitem__)
                tables[short] = Table.from_raw(short, columns, payload["data"])
            return cls(tables)

    @classmethod
    def load(cls, path: Path | str, table_prefix: str = "udger_") -> Dataset:
        """Load a JSON artifact: one file of all tables, or a directory of them.

        Raises:
            DatasetUnavailableError: If the artifact cannot be read.
            DatasetIntegrityError: If its content fails validation.
        """
        path = Path(path)
        try:
            if path.is_dir():
                raw = {
                    table_file.stem: json.loads(table_file.read_text(encoding="utf-8"))
                    for table_file in sorted(path.glob("*.json"))
                }
            else:
                raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise DatasetUnavailableError(
                f"Cannot read dataset at {path}",
                details={"path": str(path)},
                cause=e,
            ) from e
        except json.JSONDecodeError as e:
            raise DatasetIntegrityError(
                f"Dataset at {path} is not valid JSON",
                details={"path": str(path)},
                cause=e,
            ) from e

        logger.info("Loading dataset", path=str(path), tables=len(raw))
        return cls.from_tables(raw, table_prefix=table_prefix)

    def table(self, name: str) -> Table:
        return self._tables[name]

    def _build_devicename_rules(self) -> Mapping[str, tuple[DeviceNameRule, ...]]:
        table = self.table("devicename_regex")
        grouped: dict[str, list[DeviceNameRule]] = {}
        for rule in _compile_rules(table):
            grouped.setdefault(rule.row["os_family_code"], []).append(
                DeviceNameRule(
                    regex_id=rule.row["id"],
                    os_code=rule.row["os_code"],
                    pattern=rule.pattern,
                )
            )
        return MappingProxyType({k: tuple(v) for k, v in grouped.items()})

    def _build_ip_index(self) -> Mapping[str, Record]:
        table = self.table("ip_list")
        index: dict[str, Record] = {}
        for row in table.rows:
            index.setdefault(canonical_ip_key(table.value(row, "ip")), table.record(row))
        return MappingProxyType(index)

    def _build_ranges4(self) -> tuple[Range4, ...]:
        table = self.table("datacenter_range")
        ranges = []
        for index, row in enumerate(table.rows):
            record = table.record(row)
            ranges.append(Range4(
                start=_as_int(table, index, "iplong_from", record["iplong_from"]),
                end=_as_int(table, index, "iplong_to", record["iplong_to"]),
                datacenter_id=record["datacenter_id"],
            ))
        return tuple(ranges)

    def _build_ranges6(self) -> tuple[Range6, ...]:
        table = self.table("datacenter_range6")
        ranges = []
        for index, row in enumerate(table.rows):
            record = table.record(row)
            bounds = tuple(
                (
                    _as_int(table, index, f"iplong_from{i}", record[f"iplong_from{i}"]),
                    _as_int(table, index, f"iplong_to{i}", record[f"iplong_to{i}"]),
                )
                for i in range(IPV6_GROUPS)
            )
            ranges.append(Range6(bounds=bounds, datacenter_id=record["datacenter_id"]))
        return tuple(ranges)

    # =========================================================================
    # Catalogue queries
    # =========================================================================

    def client_classifications(self) -> list[dict[str, Any]]:
        """All client classes as name/code pairs."""
        return [
            {
                "client_classification": r["client_classification"],
                "client_classification_code": r["client_classification_code"],
            }
            for r in self.table("client_class")
        ]

    def crawler_classifications(self) -> list[dict[str, Any]]:
        """All crawler classes as name/code pairs."""
        return [
            {
                "crawler_classification": r["crawler_classification"],
                "crawler_classification_code": r["crawler_classification_code"],
            }
            for r in self.table("crawler_class")
        ]

    def ip_classifications(self) -> list[dict[str, Any]]:
        """All IP classes as name/code pairs."""
        return [
            {
                "ip_classification": r["ip_classification"],
                "ip_classification_code": r["ip_classification_code"],
            }
            for r in self.table("ip_class")
        ]

    def crawler_families(self) -> list[dict[str, Any]]:
        """Distinct crawler family codes with their category code, sorted."""
        classes = self.table("crawler_class")
        pairs = {
            (r["family_code"], classes.join(r["class_id"])["crawler_classification_code"])
            for r in self.table("crawler_list")
            if r["family_code"]
        }
        return [
            {"family_code": family, "crawler_classification_code": category}
            for family, category in sorted(pairs, key=lambda p: (str(p[0]), str(p[1])))
        ]

    def info(self) -> dict[str, Any]:
        """Dataset metadata from the optional ``db_info`` table."""
        if "db_info" not in self._tables or not len(self._tables["db_info"]):
            return {}
        first = next(iter(self._tables["db_info"]))
        return {k: v for k, v in first.items() if k != "key"}
