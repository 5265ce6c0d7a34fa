"""Classification engine.

Combines the User-Agent and IP classifiers behind the result cache.
The engine keeps no per-call state, so one instance can serve many
threads at once.
"""

from uaintel.cache import ResultCache
from uaintel.classification.ip_address import IpAddressClassifier
from uaintel.classification.templates import ParseResult
from uaintel.classification.user_agent import UserAgentClassifier
from uaintel.common.config import Settings, get_settings
from uaintel.common.logging import get_logger
from uaintel.common.metrics import CLASSIFICATIONS
from uaintel.dataset.loader import Dataset

logger = get_logger(__name__)

CacheKey = tuple[str, str]


def cache_key(ua: str | None, ip: str | None) -> CacheKey:
    """Key for a pair of inputs; an absent input takes part as ""."""
    return (ua or "", ip or "")


class Classifier:
    """Classifies UA/IP pairs against one dataset."""

    def __init__(
        self,
        dataset: Dataset,
        settings: Settings | None = None,
        cache: ResultCache[CacheKey, ParseResult] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            dataset: Loaded reference dataset.
            settings: Application settings. Uses global settings if not provided.
            cache: Result cache shared by callers, or None for no caching.
        """
        if settings is None:
            settings = get_settings()

        self.dataset = dataset
        self.cache = cache
        self.user_agents = UserAgentClassifier(
            dataset,
            info_url_base=settings.info_url_base,
            regex_timeout=settings.dataset.regex_timeout,
        )
        self.ip_addresses = IpAddressClassifier(dataset, info_url_base=settings.info_url_base)

    def classify(
        self,
        ua: str | None = None,
        ip: str | None = None,
        use_cache: bool = True,
    ) -> ParseResult:
        """Classify a User-Agent and/or IP address.

        Args:
            ua: User-Agent string, or None when not provided.
            ip: IPv4/IPv6 address, or None when not provided.
            use_cache: Consult and fill the cache if one is attached.

        Returns:
            Typed result; ``from_cache`` is True when served from the cache.
        """
        caching = use_cache and self.cache is not None
        key = cache_key(ua, ip)

        if caching:
            cached = self.cache.read(key)
            if cached is not None:
                logger.debug("Result served from cache")
                return cached.served_from_cache()

        result = ParseResult(
            user_agent=self.user_agents.classify(ua),
            ip_address=self.ip_addresses.classify(ip),
        )
        if ua:
            CLASSIFICATIONS.labels(target="user_agent").inc()
        if ip:
            CLASSIFICATIONS.labels(target="ip_address").inc()

        if caching:
            self.cache.write(key, result)

        return result
