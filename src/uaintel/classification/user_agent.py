"""User-Agent cascade.

Stages run in a fixed order and each one only fills fields: a stage that
finds nothing leaves the result as it was and the cascade continues.

1. crawler (exact string)
2. client (first matching pattern, skipped for crawlers)
3. OS (first matching pattern)
4. OS via client relation (only without 3 and with 2)
5. device class (first matching pattern)
6. device class via client class (only without 5 and with 2)
7. device marketname (only with a known OS family)
"""

from collections.abc import Sequence
from typing import Any

from uaintel.classification.templates import (
    CRAWLER,
    CRAWLER_CODE,
    UNRECOGNIZED,
    UNRECOGNIZED_CODE,
    UserAgentResult,
    text,
)
from uaintel.common.logging import get_logger
from uaintel.dataset.loader import Dataset, Rule
from uaintel.dataset.patterns import first_group, search
from uaintel.dataset.tables import Record, is_null_id

logger = get_logger(__name__)

ALL_OS_CODES = "-all-"


class UserAgentClassifier:
    """Classifies User-Agent strings against a dataset."""

    def __init__(
        self,
        dataset: Dataset,
        info_url_base: str,
        regex_timeout: float | None = None,
    ) -> None:
        self.dataset = dataset
        self.info_url_base = info_url_base
        self.regex_timeout = regex_timeout

    def classify(self, ua: str | None) -> UserAgentResult:
        """Run the full cascade. An empty input gives the empty template."""
        result = UserAgentResult()
        if not ua:
            return result

        logger.debug("Parse user agent: start", ua=ua)

        result.ua_string = ua
        result.ua_class = UNRECOGNIZED
        result.ua_class_code = UNRECOGNIZED_CODE

        client: Record | None = None
        client_class: Record | None = None

        crawler = self.dataset.crawlers_by_ua.get(ua)
        if crawler is not None:
            self._apply_crawler(result, crawler)
        else:
            client, client_class = self._match_client(result, ua)

        os_found = self._match_os(result, ua)
        if not os_found and client is not None:
            self._os_from_client(result, client)

        device_found = self._match_device_class(result, ua)
        if not device_found and client_class is not None:
            self._device_class_from_client(result, client_class)

        if result.os_family_code:
            self._match_marketname(result, ua)

        logger.debug("Parse user agent: end", ua_class=result.ua_class_code)
        return result

    def _first_match(self, rules: Sequence[Rule], ua: str, table: str):
        for rule in rules:
            match = search(rule.pattern, ua, self.regex_timeout, table)
            if match is not None:
                return rule, match
        return None, None

    def _url(self, path: str) -> str:
        return f"{self.info_url_base}/{path}"

    # =========================================================================
    # Stages
    # =========================================================================

    def _apply_crawler(self, result: UserAgentResult, crawler: Record) -> None:
        category = self.dataset.table("crawler_class").join(crawler["class_id"])
        logger.debug("Parse user agent: crawler found", crawler=crawler["name"])

        result.is_crawler = True
        result.crawler_id = crawler["id"]
        result.ua_class = CRAWLER
        result.ua_class_code = CRAWLER_CODE
        result.ua = text(crawler["name"])
        result.ua_version = text(crawler["ver"])
        result.ua_version_major = text(crawler["ver_major"])
        result.ua_family = text(crawler["family"])
        result.ua_family_code = text(crawler["family_code"])
        result.ua_family_homepage = text(crawler["family_homepage"])
        result.ua_family_vendor = text(crawler["vendor"])
        result.ua_family_vendor_code = text(crawler["vendor_code"])
        result.ua_family_vendor_homepage = text(crawler["vendor_homepage"])
        result.ua_family_icon = text(crawler["family_icon"])
        result.ua_family_info_url = self._url(
            f"bot-detail?bot={text(crawler['family'])}#id{text(crawler['id'])}"
        )
        result.crawler_last_seen = text(crawler["last_seen"])
        result.crawler_category = text(category["crawler_classification"])
        result.crawler_category_code = text(category["crawler_classification_code"])
        result.crawler_respect_robotstxt = text(crawler["respect_robotstxt"])

    def _match_client(
        self,
        result: UserAgentResult,
        ua: str,
    ) -> tuple[Record | None, Record | None]:
        rule, match = self._first_match(self.dataset.client_rules, ua, "client_regex")
        if rule is None:
            return None, None

        client = self.dataset.table("client_list").join(rule.row["client_id"])
        client_class = self.dataset.table("client_class").get(client["class_id"])
        category = client_class if client_class is not None else self.dataset.table("client_class").empty()
        logger.debug("Parse user agent: client found", client=client["name"])

        name = text(client["name"])
        version = first_group(match)

        result.ua_class = text(category["client_classification"])
        result.ua_class_code = text(category["client_classification_code"])
        if version:
            result.ua = f"{name} {version}"
            result.ua_version = version
            result.ua_version_major = version.split(".")[0]
        else:
            result.ua = name
        result.ua_uptodate_current_version = text(client["uptodate_current_version"])
        result.ua_family = name
        result.ua_family_code = text(client["name_code"])
        result.ua_family_homepage = text(client["homepage"])
        result.ua_family_vendor = text(client["vendor"])
        result.ua_family_vendor_code = text(client["vendor_code"])
        result.ua_family_vendor_homepage = text(client["vendor_homepage"])
        result.ua_family_icon = text(client["icon"])
        result.ua_family_icon_big = text(client["icon_big"])
        result.ua_family_info_url = self._url(f"browser-detail?browser={name}")
        result.ua_engine = text(client["engine"])

        return client, client_class

    def _match_os(self, result: UserAgentResult, ua: str) -> bool:
        rule, _ = self._first_match(self.dataset.os_rules, ua, "os_regex")
        if rule is None:
            return False

        logger.debug("Parse user agent: os found", os_id=rule.row["os_id"])
        self._apply_os(result, self.dataset.table("os_list").join(rule.row["os_id"]))
        return True

    def _os_from_client(self, result: UserAgentResult, client: Record) -> None:
        relation = self.dataset.client_os.get(client["id"])
        if relation is None:
            return

        logger.debug("Parse user agent: client os relation found", client_id=client["id"])
        self._apply_os(result, self.dataset.table("os_list").join(relation["os_id"]))

    def _apply_os(self, result: UserAgentResult, os_row: Record) -> None:
        name = text(os_row["name"])
        result.os = name
        result.os_code = text(os_row["name_code"])
        result.os_homepage = text(os_row["homepage"])
        result.os_icon = text(os_row["icon"])
        result.os_icon_big = text(os_row["icon_big"])
        result.os_info_url = self._url(f"os-detail?os={name}")
        result.os_family = text(os_row["family"])
        result.os_family_code = text(os_row["family_code"])
        result.os_family_vendor = text(os_row["vendor"])
        result.os_family_vendor_code = text(os_row["vendor_code"])
        result.os_family_vendor_homepage = text(os_row["vendor_homepage"])

    def _match_device_class(self, result: UserAgentResult, ua: str) -> bool:
        rule, _ = self._first_match(self.dataset.deviceclass_rules, ua, "deviceclass_regex")
        if rule is None:
            return False

        logger.debug("Parse user agent: device found by regex", deviceclass_id=rule.row["deviceclass_id"])
        self._apply_device_class(
            result,
            self.dataset.table("deviceclass_list").join(rule.row["deviceclass_id"]),
        )
        return True

    def _device_class_from_client(self, result: UserAgentResult, client_class: Record) -> None:
        deviceclass_id = client_class["deviceclass_id"]
        if is_null_id(deviceclass_id):
            return

        logger.debug("Parse user agent: device found by client class", deviceclass_id=deviceclass_id)
        self._apply_device_class(result, self.dataset.table("deviceclass_list").join(deviceclass_id))

    def _apply_device_class(self, result: UserAgentResult, device: Record) -> None:
        name = text(device["name"])
        result.device_class = name
        result.device_class_code = text(device["name_code"])
        result.device_class_icon = text(device["icon"])
        result.device_class_icon_big = text(device["icon_big"])
        result.device_class_info_url = self._url(f"device-detail?device={name}")

    def _match_marketname(self, result: UserAgentResult, ua: str) -> None:
        key: Any = None
        regex_id: Any = None
        for rule in self.dataset.devicename_rules.get(result.os_family_code, ()):
            if rule.os_code != ALL_OS_CODES and rule.os_code != result.os_code:
                continue
            code = first_group(search(rule.pattern, ua, self.regex_timeout, "devicename_regex"))
            if code:
                key = code.strip()
                regex_id = rule.regex_id
                break

        if regex_id is None:
            return

        device = self.dataset.devicenames.get((regex_id, key))
        if device is None:
            return

        brand = self.dataset.table("devicename_brand").join(device["brand_id"])
        logger.debug("Parse user agent: device marketname found", marketname=device["marketname"])

        result.device_marketname = text(device["marketname"])
        result.device_brand = text(brand["brand"])
        result.device_brand_code = text(brand["brand_code"])
        result.device_brand_homepage = text(brand["brand_url"])
        result.device_brand_icon = text(brand["icon"])
        result.device_brand_icon_big = text(brand["icon_big"])
        result.device_brand_info_url = self._url(
            f"devices-brand-detail?brand={text(brand['brand_code'])}"
        )
