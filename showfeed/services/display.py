"""Helpers for turning unified models into display values."""

import re
from typing import List, Optional

from showfeed.models.media import Show, ShowImage

TAG_RE = re.compile(r"<[^>]*>")


def strip_html(html: str | None) -> str:
    """Remove every tag-like substring and surrounding whitespace."""
    if not html:
        return ""
    return TAG_RE.sub("", html).strip()


def get_show_network(show: Show) -> str:
    """Return the broadcast network, else the web channel, else "Unknown"."""
    if show.network and show.network.name:
        return show.network.name
    if show.web_channel and show.web_channel.name:
        return show.web_channel.name
    return "Unknown"


def get_show_image(show: Show) -> str | None:
    """Return the show's original image URL, falling back to the medium one."""
    if not show.image:
        return None
    return show.image.original or show.image.medium or None


def original_area(image: ShowImage) -> int:
    """Pixel area of the original resolution, 0 when there is none."""
    original = image.resolutions.original
    if original is None:
        return 0
    return original.width * original.height


def get_best_poster_from_images(images: List[ShowImage]) -> Optional[str]:
    """Pick the URL of the largest poster.

    Only images typed "poster" are considered, unless there are none, in
    which case every image is. Candidates are ranked by the area of their
    original resolution; on a tie the first listed wins.

    Returns:
        The winner's original URL, else its medium URL, else None.
    """
    posters = [img for img in images if img.type == "poster"]
    source = posters or images
    if not source:
        return None

    # max() keeps the first of equal keys
    best = max(source, key=original_area)
    for resolution in (best.resolutions.original, best.resolutions.medium):
        if resolution and resolution.url:
            return resolution.url
    return None
