"""Zero-valued result shapes.

Every field defaults to an empty string so "no match" needs no special
casing downstream. The flat field names are the public output keys.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any

UNRECOGNIZED = "Unrecognized"
UNRECOGNIZED_CODE = "unrecognized"
CRAWLER = "Crawler"
CRAWLER_CODE = "crawler"


@dataclass
class UserAgentResult:
    """Facts derived from a User-Agent string."""

    ua_string: str = ""
    ua_class: str = ""
    ua_class_code: str = ""
    ua: str = ""
    ua_version: str = ""
    ua_version_major: str = ""
    ua_uptodate_current_version: str = ""
    ua_family: str = ""
    ua_family_code: str = ""
    ua_family_homepage: str = ""
    ua_family_vendor: str = ""
    ua_family_vendor_code: str = ""
    ua_family_vendor_homepage: str = ""
    ua_family_icon: str = ""
    ua_family_icon_big: str = ""
    ua_family_info_url: str = ""
    ua_engine: str = ""
    os: str = ""
    os_code: str = ""
    os_homepage: str = ""
    os_icon: str = ""
    os_icon_big: str = ""
    os_info_url: str = ""
    os_family: str = ""
    os_family_code: str = ""
    os_family_vendor: str = ""
    os_family_vendor_code: str = ""
    os_family_vendor_homepage: str = ""
    device_class: str = ""
    device_class_code: str = ""
    device_class_icon: str = ""
    device_class_icon_big: str = ""
    device_class_info_url: str = ""
    device_marketname: str = ""
    device_brand: str = ""
    device_brand_code: str = ""
    device_brand_homepage: str = ""
    device_brand_icon: str = ""
    device_brand_icon_big: str = ""
    device_brand_info_url: str = ""
    crawler_last_seen: str = ""
    crawler_category: str = ""
    crawler_category_code: str = ""
    crawler_respect_robotstxt: str = ""

    # Not part of the flat output
    is_crawler: bool = field(default=False, repr=False)
    crawler_id: Any = field(default="", repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Flat output: every public field, set or not."""
        return {name: getattr(self, name) for name in USER_AGENT_FIELDS}


@dataclass
class IpAddressResult:
    """Facts derived from an IP address."""

    ip: str = ""
    ip_ver: int | str = ""
    ip_classification: str = ""
    ip_classification_code: str = ""
    ip_last_seen: str = ""
    ip_hostname: str = ""
    ip_country: str = ""
    ip_country_code: str = ""
    ip_city: str = ""
    crawler_name: str = ""
    crawler_ver: str = ""
    crawler_ver_major: str = ""
    crawler_family: str = ""
    crawler_family_code: str = ""
    crawler_family_homepage: str = ""
    crawler_family_vendor: str = ""
    crawler_family_vendor_code: str = ""
    crawler_family_vendor_homepage: str = ""
    crawler_family_icon: str = ""
    crawler_family_info_url: str = ""
    crawler_last_seen: str = ""
    crawler_category: str = ""
    crawler_category_code: str = ""
    crawler_respect_robotstxt: str = ""
    datacenter_name: str = ""
    datacenter_name_code: str = ""
    datacenter_homepage: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Flat output: every public field, set or not."""
        return {name: getattr(self, name) for name in IP_ADDRESS_FIELDS}


USER_AGENT_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(UserAgentResult) if f.repr
)
IP_ADDRESS_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(IpAddressResult))


@dataclass
class ParseResult:
    """Both sections of one classification plus the cache flag."""

    user_agent: UserAgentResult = field(default_factory=UserAgentResult)
    ip_address: IpAddressResult = field(default_factory=IpAddressResult)
    from_cache: bool = False

    def served_from_cache(self) -> "ParseResult":
        """Copy flagged as a cache hit; the stored value stays untouched."""
        return replace(self, from_cache=True)


def text(value: Any) -> str:
    """Render a dataset value the way results carry it: null becomes ""."""
    if value is None or value == "":
        return ""
    return str(value)
