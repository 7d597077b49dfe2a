# photostamp/geometry.py
"""
Coordinate conversion between normalized image fractions and pixel space.

Logo and date placements are stored as fractions of the target image
(0 = left/top edge, 1 = full width/height). Annotations are stored in pixel
units of the template image and are scaled by template_ratio() when drawn on
other images of the batch.
"""
from dataclasses import dataclass


def to_pixel(pos, target_width, target_height):
    """Normalized (x, y) -> pixel (px, py) on a target of the given size."""
    x, y = pos
    return x * target_width, y * target_height


def to_normalized(pixel_pos, source_width, source_height):
    """
    Pixel (px, py) -> normalized (x, y).

    Exact inverse of to_pixel(); reading back a dragged position and
    rendering it again never drifts.
    """
    px, py = pixel_pos
    return px / source_width, py / source_height


def fit_scale(source_width, source_height, target_width, target_height):
    """Uniform scale fitting the source entirely inside the target box."""
    return min(target_width / source_width, target_height / source_height)


def template_ratio(current_width, template_width):
    """Factor applied to template-pixel annotation geometry on the current image."""
    if not template_width:
        return 1.0
    return current_width / template_width


def letterbox(source_width, source_height, target_width, target_height):
    """
    Fit the source into a fixed target box and center it.

    Returns (scale, offset_x, offset_y); the scaled image occupies
    source_width*scale x source_height*scale starting at the offset.
    """
    scale = fit_scale(source_width, source_height, target_width, target_height)
    offset_x = (target_width - source_width * scale) / 2
    offset_y = (target_height - source_height * scale) / 2
    return scale, offset_x, offset_y


@dataclass(frozen=True)
class SurfaceTransform:
    """
    Maps points on a rendering surface to template-pixel space.

    view_scale is the surface zoom for the current image, ratio is
    template_ratio() of the current image against the template.
    """
    view_scale: float = 1.0
    ratio: float = 1.0

    @property
    def factor(self):
        return self.view_scale * self.ratio

    def to_template(self, point):
        x, y = point
        return x / self.factor, y / self.factor

    def to_surface(self, point):
        x, y = point
        return x * self.factor, y * self.factor
