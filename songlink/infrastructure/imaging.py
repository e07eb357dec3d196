"""Thumbnail download and pixel helpers built on Pillow.

Used only by ``Thumbnail``; resolution never touches image data.
"""

import io

from PIL import Image, ImageStat
import requests

from songlink.config import get_logger, settings
from songlink.domain.exceptions import ImageDecodeError

logger = get_logger(__name__).bind(service="imaging")


def load_image(url: str) -> Image.Image:
    """Download ``url`` and decode it into a fully loaded Pillow image.

    Raises:
        ImageDecodeError: on HTTP failure or undecodable payload
    """
    try:
        response = requests.get(
            url,
            headers={"User-Agent": settings.client.user_agent},
            timeout=settings.transport.timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ImageDecodeError(f"Could not download thumbnail {url}: {e}") from e

    try:
        image = Image.open(io.BytesIO(response.content))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Could not decode thumbnail {url}: {e}") from e

    logger.debug(f"Decoded thumbnail {url} ({image.width}x{image.height})")
    return image


def average_color(image: Image.Image) -> tuple[int, int, int]:
    """Mean red, green and blue over every pixel of ``image``."""
    stat = ImageStat.Stat(image.convert("RGB"))
    red, green, blue = (round(channel) for channel in stat.mean)
    return red, green, blue
