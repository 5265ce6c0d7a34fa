"""IP address classification.

Exact reputation lookup plus datacenter range enrichment. The two are
independent: an address can be both a known crawler and inside a
datacenter range.
"""

from ipaddress import IPv4Address, IPv6Address, ip_address

from uaintel.classification.templates import (
    CRAWLER_CODE,
    UNRECOGNIZED,
    UNRECOGNIZED_CODE,
    IpAddressResult,
    text,
)
from uaintel.common.logging import get_logger
from uaintel.dataset.loader import Dataset
from uaintel.dataset.tables import Record, is_null_id

logger = get_logger(__name__)


def parse_ip(value: str) -> IPv4Address | IPv6Address | None:
    """Parse an address, or return None if it is not valid syntax.

    An IPv6 zone suffix (``fe80::1%eth0``) is dropped: the zone only names
    the local interface, never a different address.
    """
    try:
        address = ip_address(value.strip())
    except ValueError:
        return None
    if isinstance(address, IPv6Address) and address.scope_id:
        return IPv6Address(address.packed)
    return address


def canonical_ip(address: IPv4Address | IPv6Address) -> str:
    """Lookup text: dotted quad for IPv4, compressed lowercase for IPv6."""
    return str(address)


def ipv6_groups(address: IPv6Address) -> tuple[int, ...]:
    """Split an IPv6 address into its eight 16-bit group values."""
    return tuple(int(group, 16) for group in address.exploded.split(":"))


class IpAddressClassifier:
    """Classifies IPv4/IPv6 addresses against a dataset."""

    def __init__(self, dataset: Dataset, info_url_base: str) -> None:
        self.dataset = dataset
        self.info_url_base = info_url_base

    def classify(self, ip: str | None) -> IpAddressResult:
        """Classify one address. An empty input gives the empty template.

        Invalid syntax only echoes the input back.
        """
        result = IpAddressResult()
        if not ip:
            return result

        logger.debug("Parse IP address: start", ip=ip)
        result.ip = ip

        address = parse_ip(ip)
        if address is None:
            logger.debug("Parse IP address: invalid syntax", ip=ip)
            return result

        result.ip_ver = address.version
        key = canonical_ip(address)

        record = self.dataset.ips.get(key)
        if record is not None:
            self._apply_record(result, record)
        else:
            result.ip_classification = UNRECOGNIZED
            result.ip_classification_code = UNRECOGNIZED_CODE

        if isinstance(address, IPv4Address):
            self._match_datacenter4(result, int(address))
        else:
            self._match_datacenter6(result, ipv6_groups(address))

        logger.debug("Parse IP address: end", classification=result.ip_classification_code)
        return result

    def _apply_record(self, result: IpAddressResult, record: Record) -> None:
        ip_class = self.dataset.table("ip_class").join(record["class_id"])

        result.ip_classification = text(ip_class["ip_classification"])
        result.ip_classification_code = text(ip_class["ip_classification_code"])
        result.ip_last_seen = text(record["ip_last_seen"])
        result.ip_hostname = text(record["ip_hostname"])
        result.ip_country = text(record["ip_country"])
        result.ip_country_code = text(record["ip_country_code"])
        result.ip_city = text(record["ip_city"])

        if is_null_id(record["crawler_id"]):
            return

        crawler = self.dataset.table("crawler_list").join(record["crawler_id"])
        category = self.dataset.table("crawler_class").join(crawler["class_id"])
        logger.debug("Parse IP address: crawler found", crawler=crawler["name"])

        result.crawler_name = text(crawler["name"])
        result.crawler_ver = text(crawler["ver"])
        result.crawler_ver_major = text(crawler["ver_major"])
        result.crawler_family = text(crawler["family"])
        result.crawler_family_code = text(crawler["family_code"])
        result.crawler_family_homepage = text(crawler["family_homepage"])
        result.crawler_family_vendor = text(crawler["vendor"])
        result.crawler_family_vendor_code = text(crawler["vendor_code"])
        result.crawler_family_vendor_homepage = text(crawler["vendor_homepage"])
        result.crawler_family_icon = text(crawler["family_icon"])
        if result.ip_classification_code == CRAWLER_CODE:
            result.crawler_family_info_url = (
                f"{self.info_url_base}/bot-detail?bot={text(crawler['family'])}#id{text(crawler['id'])}"
            )
        result.crawler_last_seen = text(crawler["last_seen"])
        result.crawler_category = text(category["crawler_classification"])
        result.crawler_category_code = text(category["crawler_classification_code"])
        result.crawler_respect_robotstxt = text(crawler["respect_robotstxt"])

    def _match_datacenter4(self, result: IpAddressResult, value: int) -> None:
        for rng in self.dataset.ranges4:
            if rng.contains(value):
                self._apply_datacenter(result, rng.datacenter_id)
                return

    def _match_datacenter6(self, result: IpAddressResult, groups: tuple[int, ...]) -> None:
        for rng in self.dataset.ranges6:
            if rng.contains(groups):
                self._apply_datacenter(result, rng.datacenter_id)
                return

    def _apply_datacenter(self, result: IpAddressResult, datacenter_id) -> None:
        datacenter = self.dataset.table("datacenter_list").join(datacenter_id)
        logger.debug("Parse IP address: datacenter found", datacenter=datacenter["name"])

        result.datacenter_name = text(datacenter["name"])
        result.datacenter_name_code = text(datacenter["name_code"])
        result.datacenter_homepage = text(datacenter["homepage"])
