"""Classification engine.

Cascading User-Agent and IP address classification over a Dataset.
"""

from uaintel.classification.engine import Classifier
from uaintel.classification.ip_address import IpAddressClassifier
from uaintel.classification.serializers import serialize
from uaintel.classification.templates import IpAddressResult, ParseResult, UserAgentResult
from uaintel.classification.user_agent import UserAgentClassifier

__all__ = [
    "Classifier",
    "IpAddressClassifier",
    "IpAddressResult",
    "ParseResult",
    "UserAgentClassifier",
    "UserAgentResult",
    "serialize",
]
