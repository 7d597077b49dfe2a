# photostamp/pipeline.py
"""
Layered compositing shared by the live preview and the export path.

compose_frame() turns an image, a placement snapshot and an annotation list
into a Frame: a flat, ordered list of draw operations in surface pixels.
The preview executes the frame with QPainter (qt_surface), the exporter with
Pillow (pil_surface). Both get exactly the same geometry, so two frames of
the same inputs that differ only in render_scale differ in every position
and size by exactly that factor.

Layer order is fixed: image, logo, date, annotations, then the preview-only
draft shape and selection outline.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from photostamp.annotations import annotation_bounds
from photostamp.config import (
    DASH_PATTERN, ARROW_HEAD_LENGTH, ARROW_HEAD_ANGLE_DEG, DATE_FONT_DIVISOR,
    DEFAULT_ANNOTATION_FONT, LETTERBOX_BACKGROUND, SELECTION_COLOR, SELECTION_PADDING,
)
from photostamp.geometry import to_pixel, template_ratio, letterbox
from photostamp.models import (
    BoxAnnotation, DashedBoxAnnotation, ArrowAnnotation, TextAnnotation,
)

logger = logging.getLogger(__name__)

LAYER_IMAGE = "image"
LAYER_LOGO = "logo"
LAYER_DATE = "date"
LAYER_ANNOTATION = "annotation"
LAYER_DRAFT = "draft"
LAYER_SELECTION = "selection"


@dataclass(frozen=True)
class ImageOp:
    layer: str
    source: object          # PIL image
    x: float
    y: float
    width: float
    height: float
    opacity: float = 1.0

    def bounds(self):
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True)
class TextOp:
    """Text anchored at its top-left; the baseline sits one font size below."""
    layer: str
    text: str
    x: float
    y: float
    font_size: float
    family: str
    color: str
    opacity: float = 1.0
    annotation_id: Optional[str] = None

    @property
    def baseline(self):
        return self.y + self.font_size

    def bounds(self):
        return self.x, self.y, len(self.text) * self.font_size * 0.6, self.font_size * 1.2


@dataclass(frozen=True)
class RectOp:
    layer: str
    x: float
    y: float
    width: float
    height: float
    color: str
    line_width: float
    dash: Tuple[float, ...] = ()
    annotation_id: Optional[str] = None

    def bounds(self):
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True)
class LineSegment:
    x0: float
    y0: float
    x1: float
    y1: float


@dataclass(frozen=True)
class ArcSegment:
    """Quarter arc around (cx, cy); angles in degrees, clockwise on screen (y down)."""
    cx: float
    cy: float
    radius: float
    start: float
    end: float


@dataclass(frozen=True)
class PathOp:
    layer: str
    segments: Tuple[object, ...]
    color: str
    line_width: float
    dash: Tuple[float, ...] = ()
    closed: bool = True
    annotation_id: Optional[str] = None


@dataclass(frozen=True)
class LineOp:
    layer: str
    x0: float
    y0: float
    x1: float
    y1: float
    color: str
    line_width: float
    dash: Tuple[float, ...] = ()
    annotation_id: Optional[str] = None


@dataclass
class Frame:
    width: int
    height: int
    background: Optional[str] = None
    ops: List[object] = field(default_factory=list)

    def layer(self, name):
        return [op for op in self.ops if op.layer == name]

    def hit_overlay(self, point):
        """The logo or date op under a surface point, topmost first."""
        px, py = point
        for op in reversed(self.ops):
            if op.layer not in (LAYER_LOGO, LAYER_DATE):
                continue
            x, y, w, h = op.bounds()
            if x <= px <= x + w and y <= py <= y + h:
                return op
        return None


@dataclass(frozen=True)
class RenderTarget:
    """What the pipeline needs from an image: its size and decoded pixels."""
    width: int
    height: int
    image: object = None

    @classmethod
    def from_entry(cls, entry):
        return cls(entry.width, entry.height, entry.image)


def rounded_rect_segments(x, y, w, h, r):
    """Four straight edges and four quarter-arc corners, clockwise from the top edge."""
    r = max(0.0, min(r, w / 2, h / 2))
    return (
        LineSegment(x + r, y, x + w - r, y),
        ArcSegment(x + w - r, y + r, r, 270, 360),
        LineSegment(x + w, y + r, x + w, y + h - r),
        ArcSegment(x + w - r, y + h - r, r, 0, 90),
        LineSegment(x + w - r, y + h, x + r, y + h),
        ArcSegment(x + r, y + h - r, r, 90, 180),
        LineSegment(x, y + h - r, x, y + r),
        ArcSegment(x + r, y + r, r, 180, 270),
    )


class _Placer:
    """Scale plus translation from template pixels to surface pixels."""

    def __init__(self, k, offset):
        self.k = k
        self.ox, self.oy = offset

    def point(self, x, y):
        return self.ox + x * self.k, self.oy + y * self.k

    def length(self, v):
        return v * self.k

    def dash(self, annotation):
        if isinstance(annotation, DashedBoxAnnotation) or annotation.style.line_style == "dashed":
            return tuple(d * self.k for d in DASH_PATTERN)
        return ()


def _box_ops(a, p, layer):
    x, y = p.point(*a.position)
    w = p.length(a.size.width)
    h = p.length(a.size.height)
    width = p.length(a.style.thickness)
    dash = p.dash(a)
    if a.style.corner_radius > 0:
        segments = rounded_rect_segments(x, y, w, h, p.length(a.style.corner_radius))
        return [PathOp(layer, segments, a.style.color, width, dash, True, a.id)]
    return [RectOp(layer, x, y, w, h, a.style.color, width, dash, a.id)]


def _arrow_ops(a, p, layer):
    dx0, dy0, dx1, dy1 = a.points
    sx, sy = p.point(a.position.x + dx0, a.position.y + dy0)
    ex, ey = p.point(a.position.x + dx1, a.position.y + dy1)
    width = p.length(a.style.thickness)
    dash = p.dash(a)
    ops = [LineOp(layer, sx, sy, ex, ey, a.style.color, width, dash, a.id)]

    angle = math.atan2(ey - sy, ex - sx)
    head = p.length(ARROW_HEAD_LENGTH)
    wing = math.radians(ARROW_HEAD_ANGLE_DEG)
    for side in (angle - wing, angle + wing):
        hx = ex - head * math.cos(side)
        hy = ey - head * math.sin(side)
        ops.append(LineOp(layer, ex, ey, hx, hy, a.style.color, width, dash, a.id))
    return ops


def _text_ops(a, p, layer):
    if not a.text:
        return []
    x, y = p.point(*a.position)
    return [TextOp(layer, a.text, x, y, p.length(a.font_size),
                   a.font_family or DEFAULT_ANNOTATION_FONT, a.style.color, 1.0, a.id)]


# one renderer per annotation variant; DashedBoxAnnotation reuses the box path
ANNOTATION_RENDERERS = {
    BoxAnnotation: _box_ops,
    DashedBoxAnnotation: _box_ops,
    ArrowAnnotation: _arrow_ops,
    TextAnnotation: _text_ops,
}


def annotation_ops(annotation, placer, layer=LAYER_ANNOTATION):
    renderer = ANNOTATION_RENDERERS.get(type(annotation))
    if renderer is None:
        logger.warning("skipping annotation %s: no renderer for %r",
                       getattr(annotation, "id", "?"), type(annotation).__name__)
        return []
    return renderer(annotation, placer, layer)


def compose_frame(target, scene, annotations=(), template_width=None, render_scale=1.0,
                  canvas_size=None, selected_id=None, draft=None):
    """
    Build the draw sequence for one image.

    target: RenderTarget (or anything with width/height/image)
    scene: PlacementSnapshot, read-only for the whole render
    annotations: creation-ordered annotations in template pixels
    template_width: width of the template image; defaults to the target's
    render_scale: 1.0 for export, the view's fit scale for the preview
    canvas_size: (w, h) to letterbox into a fixed output size; the image is
        fitted and centered on a white background and render_scale is
        multiplied by the fit scale
    selected_id / draft: preview-only selection outline and in-progress shape
    """
    iw, ih = target.width, target.height
    offset = (0.0, 0.0)
    scale = render_scale
    background = None
    if canvas_size:
        fit, ox, oy = letterbox(iw, ih, canvas_size[0], canvas_size[1])
        scale = render_scale * fit
        offset = (ox * render_scale, oy * render_scale)
        width = int(round(canvas_size[0] * render_scale))
        height = int(round(canvas_size[1] * render_scale))
        background = LETTERBOX_BACKGROUND
    else:
        width = int(round(iw * render_scale))
        height = int(round(ih * render_scale))

    frame = Frame(width=width, height=height, background=background)
    ox, oy = offset

    # 1. base image
    if target.image is not None:
        frame.ops.append(ImageOp(LAYER_IMAGE, target.image, ox, oy, iw * scale, ih * scale))
    else:
        logger.warning("base image missing, rendering overlays only")

    # 2. logo: width follows the target image, height keeps the logo's aspect ratio
    logo = scene.logo
    if logo.asset is not None and logo.asset.image is not None:
        lx, ly = to_pixel(logo.position, iw, ih)
        lw = iw * logo.scale * scale
        frame.ops.append(ImageOp(
            LAYER_LOGO, logo.asset.image,
            ox + lx * scale, oy + ly * scale,
            lw, lw * logo.asset.aspect_ratio, logo.opacity,
        ))
    elif logo.asset is not None:
        logger.warning("logo %s has no decoded pixels, skipping logo layer", logo.asset.name)

    # 3. date stamp: font size tied to the image width
    date = scene.date
    if date.text:
        dx, dy = to_pixel(date.position, iw, ih)
        font_size = iw * date.scale / DATE_FONT_DIVISOR * scale
        frame.ops.append(TextOp(
            LAYER_DATE, date.text, ox + dx * scale, oy + dy * scale,
            font_size, date.font.family, date.font.color, date.opacity,
        ))

    # 4. annotations, in template pixels scaled to this image
    ratio = template_ratio(iw, template_width or iw)
    placer = _Placer(ratio * scale, offset)
    for annotation in annotations:
        frame.ops.extend(annotation_ops(annotation, placer))

    # 5. preview affordances
    if draft is not None:
        frame.ops.extend(annotation_ops(draft, placer, LAYER_DRAFT))
    if selected_id is not None:
        for annotation in annotations:
            if annotation.id == selected_id:
                bx, by, bw, bh = annotation_bounds(annotation)
                x, y = placer.point(bx, by)
                pad = SELECTION_PADDING
                frame.ops.append(RectOp(
                    LAYER_SELECTION, x - pad, y - pad,
                    placer.length(bw) + 2 * pad, placer.length(bh) + 2 * pad,
                    SELECTION_COLOR, 1, (4, 4), annotation.id,
                ))
    return frame
