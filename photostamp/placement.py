# photostamp/placement.py
import logging
from dataclasses import replace

from PIL import ImageColor

from photostamp.config import (
    LOGO_SCALE_RANGE, LOGO_OPACITY_RANGE, DATE_SCALE_RANGE, DATE_OPACITY_RANGE,
)
from photostamp.geometry import to_normalized
from photostamp.models import (
    Position, LogoPlacement, DateStampPlacement, PlacementSnapshot, clamp,
)

logger = logging.getLogger(__name__)

LOGO = "logo"
DATE = "date"


def _is_color(value):
    try:
        ImageColor.getrgb(value)
    except (ValueError, AttributeError):
        return False
    return True


class PlacementStore:
    """
    Current logo and date-stamp placement, independent of any image.

    Setters clamp scale and opacity to their slider ranges instead of
    rejecting values. Renders read snapshot(), never the live fields.
    """

    def __init__(self, logo=None, date=None):
        self.logo = logo or LogoPlacement()
        self.date = date or DateStampPlacement()

    # --- logo ---
    def set_logo_position(self, position):
        self.logo = replace(self.logo, position=Position(*position))

    def set_logo_scale(self, scale):
        self.logo = replace(self.logo, scale=clamp(float(scale), LOGO_SCALE_RANGE))

    def set_logo_opacity(self, opacity):
        self.logo = replace(self.logo, opacity=clamp(float(opacity), LOGO_OPACITY_RANGE))

    def set_logo_asset(self, asset):
        """Swap the logo asset; the previous asset's pixels are released."""
        previous = self.logo.asset
        if previous is not None and previous is not asset:
            previous.release()
        self.logo = replace(self.logo, asset=asset)

    def remove_logo(self):
        self.set_logo_asset(None)

    # --- date stamp ---
    def set_date_text(self, text):
        self.date = replace(self.date, text=text or "")

    def set_date_position(self, position):
        self.date = replace(self.date, position=Position(*position))

    def set_date_scale(self, scale):
        self.date = replace(self.date, scale=clamp(float(scale), DATE_SCALE_RANGE))

    def set_date_opacity(self, opacity):
        self.date = replace(self.date, opacity=clamp(float(opacity), DATE_OPACITY_RANGE))

    def set_font(self, family=None, size=None, color=None):
        """Partial font update; arguments left as None, or an unparsable color, keep their value."""
        changes = {}
        if family is not None:
            changes["family"] = family
        if size is not None:
            changes["size"] = size
        if color is not None:
            if _is_color(color):
                changes["color"] = color
            else:
                logger.warning("ignoring invalid font color %r", color)
        self.date = replace(self.date, font=replace(self.date.font, **changes))

    # --- dragging ---
    def drag_end(self, layer, raw_pixel, view_scale, image):
        """
        Store the position of a dragged logo or date stamp.

        raw_pixel is the overlay's top-left on a surface zoomed by
        view_scale; image is the image backing that surface.
        """
        rx, ry = raw_pixel
        pos = Position(*to_normalized((rx / view_scale, ry / view_scale), image.width, image.height))
        if layer == LOGO:
            self.set_logo_position(pos)
        elif layer == DATE:
            self.set_date_position(pos)
        else:
            raise ValueError(f"unknown placement layer: {layer}")
        logger.debug("%s dragged to (%.4f, %.4f)", layer, pos.x, pos.y)
        return pos

    def snapshot(self):
        return PlacementSnapshot(logo=self.logo, date=self.date)

    def restore(self, snapshot):
        """Write a snapshot back without releasing its logo asset."""
        self.logo = snapshot.logo
        self.date = snapshot.date
