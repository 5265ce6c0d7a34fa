"""Output projections of a ParseResult.

Two shapes are produced from the same typed facts, without re-running
any classification:

- flat: every field of both sections, empty strings included
- nested: only set values, placed under camelCase paths; ``full`` selects
  verbose name/code pairs, otherwise single code fields
"""

from typing import Any

from uaintel.classification.templates import IpAddressResult, ParseResult, UserAgentResult

Path = tuple[str, ...]
FieldMap = tuple[tuple[str, Path], ...]

# =============================================================================
# User agent paths
# =============================================================================

UA_CLASS_FULL: FieldMap = (
    ("ua_class", ("ua", "class", "name")),
    ("ua_class_code", ("ua", "class", "code")),
)
UA_CLASS_COMPACT: FieldMap = (
    ("ua_class_code", ("ua", "class")),
)

UA_FAMILY_FULL: FieldMap = (
    ("ua_version", ("ua", "version", "current")),
    ("ua_version_major", ("ua", "version", "major")),
    ("ua_uptodate_current_version", ("ua", "uptodateCurrentVersion")),
    ("ua_family", ("ua", "family", "name")),
    ("ua_family_code", ("ua", "family", "code")),
    ("ua_family_homepage", ("ua", "family", "homepage")),
    ("ua_family_vendor", ("ua", "family", "vendor", "name")),
    ("ua_family_vendor_code", ("ua", "family", "vendor", "code")),
    ("ua_family_vendor_homepage", ("ua", "family", "vendor", "homepage")),
    ("ua_family_icon", ("ua", "family", "icon")),
    ("ua_family_icon_big", ("ua", "family", "iconBig")),
)
UA_CLIENT_COMPACT: FieldMap = (
    ("ua_family_code", ("ua", "family")),
)
UA_CRAWLER_COMPACT: FieldMap = (
    ("ua_family_code", ("ua", "family", "code")),
    ("ua_family_homepage", ("ua", "family", "homepage")),
    ("ua_family_vendor_code", ("ua", "family", "vendor")),
)

CRAWLER_FULL: FieldMap = (
    ("crawler_last_seen", ("crawler", "lastSeen")),
    ("crawler_category", ("crawler", "category", "name")),
    ("crawler_category_code", ("crawler", "category", "code")),
    ("crawler_respect_robotstxt", ("crawler", "respectRobotsTxt")),
)
CRAWLER_COMPACT: FieldMap = (
    ("crawler_last_seen", ("crawler", "lastSeen")),
    ("crawler_category_code", ("crawler", "category")),
)

OS_FULL: FieldMap = (
    ("os", ("os", "name")),
    ("os_code", ("os", "code")),
    ("os_homepage", ("os", "homepage")),
    ("os_icon", ("os", "icon")),
    ("os_icon_big", ("os", "iconBig")),
    ("os_info_url", ("os", "infoUrl")),
    ("os_family", ("os", "family", "name")),
    ("os_family_code", ("os", "family", "code")),
    ("os_family_vendor", ("os", "family", "vendor", "name")),
    ("os_family_vendor_code", ("os", "family", "vendor", "code")),
    ("os_family_vendor_homepage", ("os", "family", "vendor", "homepage")),
)
OS_COMPACT: FieldMap = (
    ("os_code", ("os", "code")),
    ("os_family_code", ("os", "family")),
)

DEVICE_CLASS_FULL: FieldMap = (
    ("device_class", ("device", "class", "name")),
    ("device_class_code", ("device", "class", "code")),
    ("device_class_icon", ("device", "class", "icon")),
    ("device_class_icon_big", ("device", "class", "iconBig")),
    ("device_class_info_url", ("device", "class", "infoUrl")),
)
DEVICE_CLASS_COMPACT: FieldMap = (
    ("device_class_code", ("device", "class")),
)

# Same in both modes
DEVICE_MARKET: FieldMap = (
    ("device_marketname", ("device", "marketName")),
    ("device_brand", ("device", "brand", "name")),
    ("device_brand_code", ("device", "brand", "code")),
    ("device_brand_homepage", ("device", "brand", "homepage")),
    ("device_brand_icon", ("device", "brand", "icon")),
    ("device_brand_icon_big", ("device", "brand", "iconBig")),
    ("device_brand_info_url", ("device", "brand", "infoUrl")),
)

# =============================================================================
# IP address paths
# =============================================================================

IP_CLASS_FULL: FieldMap = (
    ("ip_ver", ("version",)),
    ("ip_classification", ("classification", "name")),
    ("ip_classification_code", ("classification", "code")),
)
IP_CLASS_COMPACT: FieldMap = (
    ("ip_classification_code", ("classification",)),
)

IP_DETAILS: FieldMap = (
    ("ip_last_seen", ("lastSeen",)),
    ("ip_hostname", ("hostname",)),
    ("ip_country", ("geo", "country", "name")),
    ("ip_country_code", ("geo", "country", "code")),
    ("ip_city", ("geo", "city")),
    ("crawler_name", ("crawler", "name")),
)

IP_CRAWLER_FULL: FieldMap = (
    ("crawler_ver", ("crawler", "version", "current")),
    ("crawler_ver_major", ("crawler", "version", "major")),
    ("crawler_family", ("crawler", "family", "name")),
    ("crawler_family_code", ("crawler", "family", "code")),
    ("crawler_family_homepage", ("crawler", "family", "homepage")),
    ("crawler_family_vendor", ("crawler", "family", "vendor", "name")),
    ("crawler_family_vendor_code", ("crawler", "family", "vendor", "code")),
    ("crawler_family_vendor_homepage", ("crawler", "family", "vendor", "homepage")),
    ("crawler_family_icon", ("crawler", "family", "icon")),
    ("crawler_family_info_url", ("crawler", "family", "infoUrl")),
    ("crawler_last_seen", ("crawler", "lastSeen")),
    ("crawler_category", ("crawler", "category", "name")),
    ("crawler_category_code", ("crawler", "category", "code")),
    ("crawler_respect_robotstxt", ("crawler", "respectRobotsTxt")),
)
IP_CRAWLER_COMPACT: FieldMap = (
    ("crawler_family_code", ("crawler", "family")),
    ("crawler_category_code", ("crawler", "category")),
    ("crawler_last_seen", ("crawler", "lastSeen")),
)

DATACENTER_FULL: FieldMap = (
    ("datacenter_name", ("datacenter", "name")),
    ("datacenter_name_code", ("datacenter", "code")),
    ("datacenter_homepage", ("datacenter", "homepage")),
)
DATACENTER_COMPACT: FieldMap = (
    ("datacenter_name_code", ("datacenter",)),
)


def _put(tree: dict[str, Any], path: Path, value: Any) -> None:
    node = tree
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def _project(tree: dict[str, Any], source: object, field_map: FieldMap) -> None:
    for name, path in field_map:
        value = getattr(source, name)
        if value:
            _put(tree, path, value)


def user_agent_tree(result: UserAgentResult, full: bool = False) -> dict[str, Any]:
    """Nested projection of the user agent section."""
    tree: dict[str, Any] = {}
    if not result.ua_string:
        return tree

    _put(tree, ("ua", "string"), result.ua_string)
    _project(tree, result, UA_CLASS_FULL if full else UA_CLASS_COMPACT)
    _project(tree, result, (("ua", ("ua", "name")),))

    if full:
        _project(tree, result, UA_FAMILY_FULL)
        # Detail links need a family name, and crawlers also a bot id
        if result.ua_family and (result.crawler_id or not result.is_crawler):
            _put(tree, ("ua", "family", "infoUrl"), result.ua_family_info_url)
    elif result.is_crawler:
        _project(tree, result, UA_CRAWLER_COMPACT)
    else:
        _project(tree, result, UA_CLIENT_COMPACT)
    _project(tree, result, (("ua_engine", ("ua", "engine")),))

    if result.is_crawler:
        _project(tree, result, CRAWLER_FULL if full else CRAWLER_COMPACT)

    _project(tree, result, OS_FULL if full else OS_COMPACT)
    _project(tree, result, DEVICE_CLASS_FULL if full else DEVICE_CLASS_COMPACT)
    _project(tree, result, DEVICE_MARKET)
    return tree


def ip_address_tree(result: IpAddressResult, full: bool = False) -> dict[str, Any]:
    """Nested projection of the IP address section."""
    tree: dict[str, Any] = {}
    if not result.ip:
        return tree

    tree["ip"] = result.ip
    _project(tree, result, IP_CLASS_FULL if full else IP_CLASS_COMPACT)
    _project(tree, result, IP_DETAILS)
    _project(tree, result, IP_CRAWLER_FULL if full else IP_CRAWLER_COMPACT)
    _project(tree, result, DATACENTER_FULL if full else DATACENTER_COMPACT)
    return tree


def to_flat(result: ParseResult) -> dict[str, Any]:
    """Flat shape with snake_case section names."""
    return {
        "user_agent": result.user_agent.to_dict(),
        "ip_address": result.ip_address.to_dict(),
        "from_cache": result.from_cache,
    }


def to_nested(result: ParseResult, full: bool = False) -> dict[str, Any]:
    """Nested shape with camelCase section names."""
    return {
        "userAgent": user_agent_tree(result.user_agent, full=full),
        "ipAddress": ip_address_tree(result.ip_address, full=full),
        "fromCache": result.from_cache,
    }


def serialize(result: ParseResult, full: bool = False, nested: bool = False) -> dict[str, Any]:
    """Project a result into the requested output shape."""
    if nested:
        return to_nested(result, full=full)
    return to_flat(result)
