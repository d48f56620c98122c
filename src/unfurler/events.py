"""Streaming tag events on top of the lxml feed parser."""

from typing import NamedTuple, Optional, Protocol, Union
from lxml import etree
import structlog

logger = structlog.get_logger()

Attributes = tuple[tuple[str, Optional[str]], ...]


class ElementStart(NamedTuple):
    """An opening tag with its attributes in document order."""

    tag_name: str
    attributes: Attributes


class ElementEnd(NamedTuple):
    """A closing tag, explicit or implied by the tokenizer."""

    tag_name: str


class Text(NamedTuple):
    """A run of text inside the currently open element."""

    content: str


TagEvent = Union[ElementStart, ElementEnd, Text]


class ElementObserver(Protocol):
    def on_element(self, tag_name: str, attributes: Attributes) -> None: ...


class TextObserver(Protocol):
    def on_text(self, content: str) -> None: ...


def get_attribute(attributes: Attributes, name: str) -> Optional[str]:
    """Return the value of the first attribute called `name`, or None."""
    for key, value in attributes:
        if key == name:
            return value
    return None


class _ParserTarget:
    """lxml parser target forwarding callbacks to a TagEventSource."""

    def __init__(self, source: "TagEventSource"):
        self._source = source

    def start(self, tag, attrib):
        self._source.dispatch(ElementStart(tag.lower(), tuple(attrib.items())))

    def end(self, tag):
        self._source.dispatch(ElementEnd(tag.lower()))

    def data(self, data):
        self._source.dispatch(Text(data))

    def close(self):
        return None


class TagEventSource:
    """
    Single-pass event source that fans tag events out to observers.

    Bytes are pushed in with `feed()` as they arrive and tokenized
    incrementally; nothing is buffered beyond what the tokenizer needs to
    finish the current token. Observers subscribe per tag name with `on()`:
    anything with an `on_element` method receives that element's start
    events, anything with an `on_text` method receives the text found
    directly inside it.
    """

    def __init__(self, encoding: Optional[str] = None):
        """
        Create a fresh tokenizer session.

        Args:
            encoding: Charset announced by the transport, if any. When None
                the tokenizer detects it from the document itself.
        """
        self._element_observers: dict[str, list[ElementObserver]] = {}
        self._text_observers: dict[str, list[TextObserver]] = {}
        self._open: list[str] = []
        self._closed = False
        self.bytes_fed = 0
        self.elements_seen = 0

        target = _ParserTarget(self)
        try:
            self._parser = etree.HTMLParser(target=target, encoding=encoding)
        except LookupError:
            logger.warning("unknown_encoding", encoding=encoding)
            self._parser = etree.HTMLParser(target=target)

    def on(self, tag_name: str, observer) -> "TagEventSource":
        """
        Subscribe an observer to a tag name.

        Returns:
            self, so subscriptions can be chained
        """
        tag = tag_name.lower()
        if hasattr(observer, "on_element"):
            self._element_observers.setdefault(tag, []).append(observer)
        if hasattr(observer, "on_text"):
            self._text_observers.setdefault(tag, []).append(observer)
        return self

    def feed(self, chunk: bytes) -> None:
        """Tokenize the next chunk of the document."""
        if self._closed:
            raise RuntimeError("TagEventSource is already closed")
        if not chunk:
            return
        self.bytes_fed += len(chunk)
        self._parser.feed(chunk)

    def close(self) -> None:
        """Signal end of stream and flush any pending events."""
        if self._closed:
            return
        self._closed = True

        # The feed parser refuses to close on an empty document
        if self.bytes_fed:
            try:
                self._parser.close()
            except etree.XMLSyntaxError:
                if self.elements_seen:
                    raise
                logger.debug("no_markup_found", bytes=self.bytes_fed)

        logger.debug("stream_finished", bytes=self.bytes_fed, elements=self.elements_seen)

    def dispatch(self, event: TagEvent) -> None:
        """Deliver one event to the subscribed observers, in document order."""
        if isinstance(event, ElementStart):
            self.elements_seen += 1
            self._open.append(event.tag_name)
            for observer in self._element_observers.get(event.tag_name, ()):
                observer.on_element(event.tag_name, event.attributes)

        elif isinstance(event, ElementEnd):
            if event.tag_name in self._open:
                while self._open.pop() != event.tag_name:
                    pass

        elif self._open:
            for observer in self._text_observers.get(self._open[-1], ()):
                observer.on_text(event.content)
