"""Accumulators that collect metadata candidates during the single pass."""

from typing import Optional

from unfurler.events import Attributes, get_attribute


class TitleAccumulator:
    """Collects the text of `title` elements."""

    def __init__(self):
        self.text = ""

    def on_text(self, content: str) -> None:
        self.text += content

    def finalize(self) -> Optional[str]:
        """Return the collected title, or None if nothing was collected."""
        if self.text == "":
            return None
        return self.text


class MetaTagAccumulator:
    """
    Classifies `meta` elements into Open Graph, Twitter Card and
    description buckets.

    Each element goes to at most one bucket, checked in this order:
    `property="og:*"`, `name="twitter:*"`, `name="description"`.
    Repeated keys keep the last value seen.
    """

    def __init__(self):
        self.og: dict[str, Optional[str]] = {}
        self.twitter: dict[str, Optional[str]] = {}
        self.description: Optional[str] = None

    def on_element(self, tag_name: str, attributes: Attributes) -> None:
        """
        Record one meta element.

        Args:
            tag_name: Element name (always "meta" when subscribed normally)
            attributes: Element attributes in document order
        """
        prop = get_attribute(attributes, "property")
        name = get_attribute(attributes, "name")
        content = get_attribute(attributes, "content")

        if prop is not None and prop.startswith("og:"):
            self.og[prop] = content
        elif name is not None and name.startswith("twitter:"):
            self.twitter[name] = content
        elif name == "description":
            self.description = content

    def finalize(self) -> tuple[dict[str, Optional[str]], dict[str, Optional[str]], Optional[str]]:
        return self.og, self.twitter, self.description


class LinkIconAccumulator:
    """
    Captures favicon and apple-touch-icon hrefs from `link` elements.

    `rel` must match exactly, so `rel="shortcut icon"` is not treated as
    an icon.
    """

    def __init__(self):
        self.icon: Optional[str] = None
        self.apple_icon: Optional[str] = None

    def on_element(self, tag_name: str, attributes: Attributes) -> None:
        rel = get_attribute(attributes, "rel")
        if rel == "icon":
            self.icon = get_attribute(attributes, "href")
        elif rel == "apple-touch-icon":
            self.apple_icon = get_attribute(attributes, "href")

    def finalize(self) -> tuple[Optional[str], Optional[str]]:
        return self.apple_icon, self.icon
