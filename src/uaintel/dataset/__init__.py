"""Reference dataset.

Immutable tables, id joins and pattern translation.
"""

from uaintel.dataset.loader import Dataset
from uaintel.dataset.patterns import translate
from uaintel.dataset.tables import Table

__all__ = [
    "Dataset",
    "Table",
    "translate",
]
