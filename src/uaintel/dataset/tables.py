"""Immutable column-addressed tables.

A table is the in-memory form of one relation of the reference dataset:
a column list plus row tuples in source order. Rows are read as plain
dictionaries, and foreign keys resolve through id maps built once.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from uaintel.common.exceptions import DatasetIntegrityError

Record = Mapping[str, Any]

# Foreign key values meaning "no reference"
NULL_IDS: frozenset = frozenset({None, "", 0})


def is_null_id(value: Any) -> bool:
    """Check whether a foreign key value carries no reference."""
    try:
        return value in NULL_IDS
    except TypeError:
        return False


@dataclass(frozen=True)
class Table:
    """One relation of the dataset.

    Attributes:
        name: Table name without vendor prefix.
        columns: Column names in row order.
        rows: Row tuples in source order.
    """

    name: str
    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    _positions: Mapping[str, int] = field(init=False, repr=False, compare=False)
    _by_id: Mapping[Any, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        positions = {column: i for i, column in enumerate(self.columns)}
        object.__setattr__(self, "_positions", MappingProxyType(positions))

        by_id: dict[Any, int] = {}
        if "id" in positions:
            id_pos = positions["id"]
            for index, row in enumerate(self.rows):
                by_id.setdefault(row[id_pos], index)
        object.__setattr__(self, "_by_id", MappingProxyType(by_id))

    @classmethod
    def from_raw(
        cls,
        name: str,
        columns: Sequence[str],
        data: Iterable[Sequence[Any]],
    ) -> Table:
        """Build a table from an ETL column list and row arrays.

        Raises:
            DatasetIntegrityError: If a row's width differs from the columns.
        """
        columns = tuple(columns)
        rows = []
        for index, row in enumerate(data):
            if len(row) != len(columns):
                raise DatasetIntegrityError(
                    f"Row width mismatch in table {name}",
                    details={"table": name, "row": index, "expected": len(columns), "got": len(row)},
                )
            rows.append(tuple(row))
        return cls(name=name, columns=columns, rows=tuple(rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Record]:
        for row in self.rows:
            yield self.record(row)

    def has_column(self, column: str) -> bool:
        return column in self._positions

    def require(self, *columns: str) -> None:
        """Fail if any of the given columns is missing.

        Raises:
            DatasetIntegrityError: Naming the first missing column.
        """
        for column in columns:
            if column not in self._positions:
                raise DatasetIntegrityError(
                    f"Table {self.name} has no column {column}",
                    details={"table": self.name, "column": column},
                )

    def record(self, row: Sequence[Any]) -> Record:
        """Expose a row tuple as a read-only column mapping."""
        return MappingProxyType(dict(zip(self.columns, row)))

    def empty(self) -> Record:
        """Zero-valued record: every column is an empty string."""
        return MappingProxyType({column: "" for column in self.columns})

    def value(self, row: Sequence[Any], column: str) -> Any:
        return row[self._positions[column]]

    def column_values(self, column: str) -> list[Any]:
        position = self._positions[column]
        return [row[position] for row in self.rows]

    def has_id(self, row_id: Any) -> bool:
        try:
            return row_id in self._by_id
        except TypeError:
            return False

    def get(self, row_id: Any) -> Record | None:
        """Resolve an id to its record, or None when it does not resolve."""
        if is_null_id(row_id) or not self.has_id(row_id):
            return None
        return self.record(self.rows[self._by_id[row_id]])

    def join(self, row_id: Any) -> Record:
        """Resolve a foreign key; null or dangling ids give the empty record."""
        found = self.get(row_id)
        return found if found is not None else self.empty()

    def index_by(self, *columns: str) -> Mapping[Hashable, Record]:
        """Map a column (or column tuple) to the first row holding it."""
        self.require(*columns)
        positions = [self._positions[c] for c in columns]
        index: dict[Hashable, Record] = {}
        for row in self.rows:
            key = row[positions[0]] if len(positions) == 1 else tuple(row[p] for p in positions)
            if key not in index:
                index[key] = self.record(row)
        return MappingProxyType(index)

    def check_references(self, column: str, target: Table) -> None:
        """Verify that every non-null value of ``column`` resolves in ``target``.

        Raises:
            DatasetIntegrityError: On the first dangling foreign key.
        """
        self.require(column)
        position = self._positions[column]
        for index, row in enumerate(self.rows):
            value = row[position]
            if is_null_id(value) or target.has_id(value):
                continue
            raise DatasetIntegrityError(
                f"Dangling foreign key {self.name}.{column} -> {target.name}",
                details={"table": self.name, "row": index, "column": column, "value": value},
            )
