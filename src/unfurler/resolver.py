"""Picks the best candidate per field once the pass is complete."""

from typing import Optional
from urllib.parse import urljoin
import structlog

from unfurler.extractors import LinkIconAccumulator, MetaTagAccumulator, TitleAccumulator
from unfurler.models import UnfurledData

logger = structlog.get_logger()


def first_present(*candidates: Optional[str]) -> Optional[str]:
    """Return the first candidate that is not None. Empty strings count as present."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def absolutize(candidate: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve a relative URL against the page URL.

    Anything starting with "http" is assumed absolute and returned as is.
    None and empty strings are returned unchanged. A candidate that
    cannot be parsed as a URL is dropped (None).
    """
    if candidate is None or candidate == "":
        return candidate
    if candidate.startswith("http"):
        return candidate
    try:
        return urljoin(base_url, candidate)
    except ValueError as e:
        logger.debug("unresolvable_url", candidate=candidate[:200], error=str(e))
        return None


def resolve(
    base_url: str,
    title: TitleAccumulator,
    meta: MetaTagAccumulator,
    icons: LinkIconAccumulator,
) -> UnfurledData:
    """
    Build the final metadata from the accumulators.

    Args:
        base_url: URL the document was requested from
        title: Title accumulator after the pass
        meta: Meta tag accumulator after the pass
        icons: Link icon accumulator after the pass

    Returns:
        UnfurledData with image and favicon made absolute
    """
    og, twitter, description = meta.finalize()
    apple_icon, icon = icons.finalize()

    image = first_present(
        og.get("og:image:secure_url"),
        og.get("og:image"),
        twitter.get("twitter:image"),
    )

    return UnfurledData(
        title=first_present(og.get("og:title"), twitter.get("twitter:title"), title.finalize()),
        description=first_present(
            og.get("og:description"),
            twitter.get("twitter:description"),
            description,
        ),
        image=absolutize(image, base_url),
        favicon=absolutize(first_present(apple_icon, icon), base_url),
    )
