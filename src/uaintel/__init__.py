"""UAIntel - User-Agent and IP address classification.

Classifies User-Agent strings and IPv4/IPv6 addresses against a pre-loaded
reference dataset of crawler signatures, client/OS/device patterns,
IP reputation records and datacenter ranges.
"""

from uaintel.common.logging import setup_logging
from uaintel.dataset.loader import Dataset
from uaintel.parser import Parser

__version__ = "0.1.0"

__all__ = [
    "Dataset",
    "Parser",
    "setup_logging",
]
