# photostamp/fonts.py
import functools
import logging

from PIL import ImageFont

logger = logging.getLogger(__name__)

# family names the UI offers -> font files commonly found on desktop systems
FONT_FILES = {
    "arial": ["arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf", "DejaVuSans.ttf"],
    "dejavu sans": ["DejaVuSans.ttf"],
    "sans-serif": ["DejaVuSans.ttf", "arial.ttf", "LiberationSans-Regular.ttf"],
    "noto sans kr": ["NotoSansKR-Regular.otf", "NotoSansCJK-Regular.ttc", "DejaVuSans.ttf"],
    "malgun gothic": ["malgun.ttf", "NotoSansCJK-Regular.ttc", "DejaVuSans.ttf"],
}


@functools.lru_cache(maxsize=64)
def load_font(family, size):
    """
    Resolve a font family to a Pillow font of the given pixel size.

    family may also be a path to a .ttf/.otf file. Falls back to Pillow's
    built-in scalable font when nothing on the system matches.
    """
    size = max(1, int(round(size)))
    candidates = [family] + FONT_FILES.get(family.lower(), [f"{family}.ttf"])
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug("font %r not found, using Pillow default", family)
    return ImageFont.load_default(size=size)
