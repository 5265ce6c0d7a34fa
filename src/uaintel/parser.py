"""Session-like parser handle.

Holds the inputs of the current call, the cache toggle and the dataset
connection. A Parser is meant for one thread at a time; share the
underlying :class:`Classifier` (and its cache) across threads instead.

Usage:
    parser = Parser.from_path("udgerdb_v3.json")
    parser.set(ua="Googlebot/2.1 (+http://www.google.com/bot.html)", ip="66.249.64.73")
    result = parser.parse(nested=True, full=True)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import partial
from pathlib import Path
from typing import Any

from uaintel.cache import ResultCache
from uaintel.classification.engine import CacheKey, Classifier
from uaintel.classification.serializers import serialize
from uaintel.classification.templates import ParseResult
from uaintel.common.config import Settings, get_settings
from uaintel.common.exceptions import (
    ConfigurationError,
    DatasetUnavailableError,
    InvalidInputError,
)
from uaintel.common.logging import LoggerMixin
from uaintel.dataset.loader import Dataset

INPUT_FIELDS = frozenset({"ua", "ip"})


class Parser(LoggerMixin):
    """Classify a User-Agent and/or IP address set on the handle."""

    def __init__(
        self,
        dataset: Dataset | None = None,
        settings: Settings | None = None,
        loader: Callable[[], Dataset] | None = None,
    ) -> None:
        """Initialize the parser and connect to the dataset.

        Args:
            dataset: Already loaded dataset.
            settings: Application settings. Uses global settings if not provided.
            loader: Callable producing the dataset on (re)connect. Defaults to
                returning ``dataset``, or loading ``settings.dataset.path``.

        Raises:
            ConfigurationError: If no dataset source is available.
        """
        if settings is None:
            settings = get_settings()
        self.settings = settings

        if loader is None:
            if dataset is not None:
                loader = partial(_same, dataset)
            elif settings.dataset.path is not None:
                loader = partial(
                    Dataset.load,
                    settings.dataset.path,
                    table_prefix=settings.dataset.table_prefix,
                )
            else:
                raise ConfigurationError("No dataset given and DATASET_PATH is not set")
        self._loader = loader

        self.ua: str | None = None
        self.ip: str | None = None

        self._cache_enabled = settings.cache.enabled
        self._cache: ResultCache[CacheKey, ParseResult] = ResultCache(settings.cache.max_records)

        self._classifier: Classifier | None = None
        if dataset is not None:
            self._attach(dataset)
        else:
            self.connect()

    @classmethod
    def from_path(cls, path: Path | str, settings: Settings | None = None) -> Parser:
        """Create a parser that loads its dataset from a JSON artifact."""
        if settings is None:
            settings = get_settings()
        loader = partial(Dataset.load, path, table_prefix=settings.dataset.table_prefix)
        return cls(settings=settings, loader=loader)

    def _attach(self, dataset: Dataset) -> None:
        self._classifier = Classifier(dataset, settings=self.settings, cache=self._cache)

    # =========================================================================
    # Connection
    # =========================================================================

    @property
    def connected(self) -> bool:
        return self._classifier is not None

    def connect(self) -> bool:
        """Obtain the dataset from the loader.

        Returns:
            True if the dataset has been attached, False if already connected.
        """
        if self.connected:
            return False

        self._attach(self._loader())
        # A reloaded dataset may be a newer version
        self._cache.clear()
        self.logger.info("Dataset connected")
        return True

    def disconnect(self) -> bool:
        """Detach the dataset; parse() returns {} until reconnected.

        Returns:
            True if the dataset was detached, False if none was attached.
        """
        if not self.connected:
            return False

        self._classifier = None
        self.logger.info("Dataset disconnected")
        return True

    @property
    def dataset(self) -> Dataset:
        """The attached dataset.

        Raises:
            DatasetUnavailableError: When disconnected.
        """
        if self._classifier is None:
            raise DatasetUnavailableError()
        return self._classifier.dataset

    # =========================================================================
    # Inputs and parsing
    # =========================================================================

    def set(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        """Set the inputs of the next parse.

        Both inputs are replaced; one that is not given becomes unset.

        Args:
            data: Mapping with ``ua`` and/or ``ip`` keys.
            **fields: Same keys as keyword arguments.

        Raises:
            InvalidInputError: On a non-mapping, an unknown key or a non-string value.
        """
        if data is not None and not isinstance(data, Mapping):
            raise InvalidInputError(details={"got": type(data).__name__})

        values = {**(data or {}), **fields}
        unknown = sorted(set(values) - INPUT_FIELDS)
        if unknown:
            raise InvalidInputError(details={"unknown": unknown})

        for name, value in values.items():
            if value is not None and not isinstance(value, str):
                raise InvalidInputError(
                    f"{name} must be a string",
                    details={"field": name, "got": type(value).__name__},
                )

        ip = values.get("ip")
        self.ua = values.get("ua") or None
        self.ip = ip.lower() if ip else None

    def parse(self, full: bool = False, nested: bool = False) -> dict[str, Any]:
        """Classify the current inputs.

        Args:
            full: Verbose name/code fields in the nested shape.
            nested: Nested camelCase shape instead of the flat one.

        Returns:
            Both sections plus the cache flag, or {} when disconnected.
        """
        if self._classifier is None:
            self.logger.warning("Parse requested while disconnected")
            return {}

        result = self._classifier.classify(self.ua, self.ip, use_cache=self._cache_enabled)
        return serialize(result, full=full, nested=nested)

    # =========================================================================
    # Cache control
    # =========================================================================

    def set_cache_enable(self, enabled: bool) -> None:
        self._cache_enabled = bool(enabled)

    def is_cache_enable(self) -> bool:
        return self._cache_enabled

    def set_cache_size(self, records: int) -> None:
        """Set the maximum number of cached results."""
        self._cache.resize(records)

    def cache_clean(self) -> int:
        """Drop every cached result."""
        return self._cache.clear()

    @property
    def cache(self) -> ResultCache[CacheKey, ParseResult]:
        return self._cache

    # =========================================================================
    # Catalogue
    # =========================================================================

    def get_client_classifications(self) -> list[dict[str, Any]]:
        return self.dataset.client_classifications()

    def get_crawler_classifications(self) -> list[dict[str, Any]]:
        return self.dataset.crawler_classifications()

    def get_crawler_families(self) -> list[dict[str, Any]]:
        return self.dataset.crawler_families()

    def get_ip_classifications(self) -> list[dict[str, Any]]:
        return self.dataset.ip_classifications()

    def get_database_info(self) -> dict[str, Any]:
        return self.dataset.info()


def _same(dataset: Dataset) -> Dataset:
    return dataset
