"""Pytest configuration and fixtures for UAIntel tests."""

import copy
from typing import Any

import pytest

from uaintel.common.config import Settings
from uaintel.dataset.loader import Dataset
from uaintel.parser import Parser

# =============================================================================
# Sample User-Agents and addresses
# =============================================================================

GOOGLEBOT_UA = "Googlebot/2.1 (+http://www.google.com/bot.html)"
FIREFOX_WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0; WOW64; rv:40.0) Gecko/20100101 Firefox/40.0"
FIREFOX_ANDROID_UA = "Mozilla/5.0 (Android 7.0; Mobile; rv:50.0) Gecko/50.0 Firefox/50.0"
CHROME_MOBILE_UA = (
    "Mozilla/5.0 (Linux; Android 7.0; SM-G930F Build/NRD90M) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/55.0.2883.91 Mobile Safari/537.36"
)
DALVIK_UA = "Dalvik/2.1.0 (Linux; U; Android 6.0; SM-G930F Build/MMB29K)"
CURL_UA = "curl/7.64.1"
UNKNOWN_UA = "myUnknowUA"

GOOGLEBOT_IP = "66.249.64.73"
IPV6_EXPANDED = "2001:0db8:0000:0000:0000:0000:0000:0001"
IPV6_COMPRESSED = "2001:db8::1"

INFO_URL_BASE = "https://udger.com/resources/ua-list"


def _table(columns: list[str], *rows: list[Any]) -> dict[str, Any]:
    return {"columns": columns, "data": [list(r) for r in rows]}


def build_raw_tables() -> dict[str, dict[str, Any]]:
    """Small dataset in ETL form, table names carrying the vendor prefix."""
    return {
        "udger_crawler_class": _table(
            ["id", "crawler_classification", "crawler_classification_code"],
            [1, "Search engine bot", "search_engine_bot"],
            [2, "Site monitor", "site_monitor"],
        ),
        "udger_crawler_list": _table(
            [
                "id", "ua_string", "name", "ver", "ver_major", "last_seen", "respect_robotstxt",
                "family", "family_code", "family_homepage", "family_icon",
                "vendor", "vendor_code", "vendor_homepage", "class_id",
            ],
            [
                7, GOOGLEBOT_UA, "Googlebot/2.1", "2.1", "2", "2017-01-06 08:57:43", "yes",
                "Google", "googlebot", "http://www.google.com/bot.html", "bot_googlebot.png",
                "Google Inc.", "google_inc", "https://www.google.com/about/company/", 1,
            ],
            [
                8, "Pingdom.com_bot_version_1.4_(http://www.pingdom.com/)", "PingdomBot 1.4", "1.4", "1",
                "2017-01-01 00:00:00", "no",
                "PingdomBot", "pingdombot", "http://www.pingdom.com/", "bot_pingdom.png",
                "Pingdom AB", "pingdom_ab", "https://www.pingdom.com/", 2,
            ],
        ),
        "udger_client_class": _table(
            ["id", "client_classification", "client_classification_code", "deviceclass_id"],
            [1, "Browser", "browser", 1],
            [3, "Mobile browser", "mobile_browser", 3],
            [5, "Library", "library", 0],
        ),
        "udger_client_list": _table(
            [
                "id", "class_id", "name", "name_code", "homepage", "icon", "icon_big", "engine",
                "vendor", "vendor_code", "vendor_homepage", "uptodate_current_version",
            ],
            [
                3, 1, "Firefox", "firefox", "https://www.mozilla.org/", "firefox.png", "firefox_big.png",
                "Gecko", "Mozilla Foundation", "mozilla_foundation", "http://www.mozilla.org/", "50",
            ],
            [
                4, 1, "Chrome", "chrome", "http://www.google.com/chrome/", "chrome.png", "chrome_big.png",
                "WebKit/Blink", "Google Inc.", "google_inc", "https://www.google.com/about/company/", "55",
            ],
            [
                5, 5, "curl", "curl", "https://curl.se/", "curl.png", "",
                "", "", "", "", "",
            ],
            [
                6, 3, "Chrome Mobile", "chrome_mobile", "http://www.google.com/chrome/", "chrome.png", "chrome_big.png",
                "WebKit/Blink", "Google Inc.", "google_inc", "https://www.google.com/about/company/", "55",
            ],
        ),
        "udger_client_regex": _table(
            ["id", "client_id", "regstring"],
            [1, 6, r"/chrome\/([0-9a-z\+\-\.]+) mobile safari/si"],
            [2, 4, r"/chrome\/([0-9a-z\+\-\.]+).*safari/si"],
            [3, 3, r"/mozilla\/5\.0 .*firefox\/([0-9a-z\+\-\.]+).*/si"],
            [4, 5, r"/^curl\/?/si"],
        ),
        "udger_os_list": _table(
            [
                "id", "family", "family_code", "name", "name_code", "homepage", "icon", "icon_big",
                "vendor", "vendor_code", "vendor_homepage",
            ],
            [
                13, "Windows", "windows", "Windows 10", "windows_10", "https://en.wikipedia.org/wiki/Windows_10",
                "windows10.png", "windows10_big.png",
                "Microsoft Corporation.", "microsoft_corporation", "https://www.microsoft.com/about/",
            ],
            [
                20, "Android", "android", "Android 7 Nougat", "android_7", "https://en.wikipedia.org/wiki/Android_Nougat",
                "android.png", "android_big.png",
                "Google Inc.", "google_inc", "https://www.google.com/about/company/",
            ],
            [
                30, "Linux", "linux", "Linux", "linux", "https://www.linux.org/",
                "linux.png", "linux_big.png",
                "Linux Foundation", "linux_foundation", "https://www.linuxfoundation.org/",
            ],
        ),
        "udger_os_regex": _table(
            ["id", "os_id", "regstring"],
            [1, 13, r"/windows nt 10\.0/si"],
            [2, 20, r"/android 7\./si"],
        ),
        "udger_client_os_relation": _table(
            ["client_id", "os_id"],
            [5, 30],
            [3, 13],
        ),
        "udger_deviceclass_list": _table(
            ["id", "name", "name_code", "icon", "icon_big"],
            [1, "Desktop", "desktop", "desktop.png", "desktop_big.png"],
            [3, "Smartphone", "smartphone", "phone.png", "phone_big.png"],
        ),
        "udger_deviceclass_regex": _table(
            ["id", "deviceclass_id", "regstring"],
            [1, 3, r"/android.*mobile/si"],
        ),
        "udger_devicename_regex": _table(
            ["id", "os_family_code", "os_code", "regstring"],
            [1, "android", "-all-", r"/android [0-9\.]+; ([^;\)]+) build/si"],
            [2, "android", "android_9", r"/; ([^;\)]+)\)/si"],
        ),
        "udger_devicename_list": _table(
            ["regex_id", "code", "marketname", "brand_id"],
            [1, "SM-G930F", "Galaxy S7", 1],
        ),
        "udger_devicename_brand": _table(
            ["id", "brand_code", "brand", "brand_url", "icon", "icon_big"],
            [1, "samsung", "Samsung", "http://www.samsung.com/", "samsung.png", "samsung_big.png"],
        ),
        "udger_ip_class": _table(
            ["id", "ip_classification", "ip_classification_code"],
            [1, "Crawler", "crawler"],
            [2, "Known attack source", "known_attack_source"],
        ),
        "udger_ip_list": _table(
            [
                "ip", "class_id", "crawler_id", "ip_last_seen", "ip_hostname",
                "ip_country", "ip_city", "ip_country_code",
            ],
            [
                GOOGLEBOT_IP, 1, 7, "2017-01-06 06:31:15", "crawl-66-249-64-73.googlebot.com",
                "United States", "Mountain View", "US",
            ],
            [IPV6_EXPANDED, 2, "", "2017-01-01 00:00:00", "", "Germany", "Berlin", "DE"],
        ),
        "udger_datacenter_list": _table(
            ["id", "name", "name_code", "homepage"],
            [1, "Google Cloud", "google_cloud", "https://cloud.google.com/"],
            [2, "Example Hosting", "example_hosting", "https://hosting.example/"],
            [3, "Narrow DC", "narrow_dc", ""],
        ),
        "udger_datacenter_range": _table(
            ["datacenter_id", "iplong_from", "iplong_to"],
            [1, 1123631104, 1123639295],  # 66.249.64.0 - 66.249.95.255
            [2, 3232235520, 3232301055],  # 192.168.0.0 - 192.168.255.255
            [3, 3232235520, 3232235775],  # 192.168.0.0 - 192.168.0.255
        ),
        "udger_datacenter_range6": _table(
            [
                "datacenter_id",
                *(f"iplong_from{i}" for i in range(8)),
                *(f"iplong_to{i}" for i in range(8)),
            ],
            [2, 0x2001, 0x0DB8, 0, 0, 0, 0, 0, 0, 0x2001, 0x0DB8, *([0xFFFF] * 6)],
        ),
        "udger_db_info": _table(
            ["key", "version", "information", "lastupdate"],
            ["key", "20170106-01", "Test dataset", 1483711200],
        ),
    }


@pytest.fixture
def raw_tables() -> dict[str, dict[str, Any]]:
    """Fresh copy of the ETL tables, safe to modify per test."""
    return copy.deepcopy(build_raw_tables())


@pytest.fixture
def dataset(raw_tables) -> Dataset:
    """Validated dataset built from the sample tables."""
    return Dataset.from_tables(raw_tables)


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings."""
    return Settings(
        environment="development",
        info_url_base=INFO_URL_BASE,
        dataset={"regex_timeout": 1.0},
        cache={"enabled": False, "max_records": 10},
    )


@pytest.fixture
def parser(dataset, test_settings) -> Parser:
    """Parser attached to the sample dataset."""
    return Parser(dataset, settings=test_settings)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
