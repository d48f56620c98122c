"""
unfurler - Link preview metadata from a single streaming pass.

Title, description, image and favicon without building a DOM.
"""

from unfurler.unfurler import Unfurler, unfurl
from unfurler.models import UnfurlConfig, UnfurledData, UnfurlError, UnfurlResult
from unfurler.events import TagEventSource

__version__ = "0.1.0"
__all__ = [
    "Unfurler",
    "unfurl",
    "UnfurlConfig",
    "UnfurledData",
    "UnfurlError",
    "UnfurlResult",
    "TagEventSource",
]
