# photostamp/annotations.py
"""
Per-image annotation lists and the draw-gesture state machine.

Gesture points arrive in surface pixels and are converted to the template
image's pixel grid through a SurfaceTransform before anything is stored.
"""
import enum
import logging
from dataclasses import replace

from photostamp.config import DEFAULT_ANNOTATION_FONT_SIZE
from photostamp.geometry import SurfaceTransform
from photostamp.models import (
    Position, Size, AnnotationStyle, ToolSettings, BoxAnnotation,
    DashedBoxAnnotation, ArrowAnnotation, TextAnnotation, new_id,
)

logger = logging.getLogger(__name__)

TOOLS = ("box", "dashed-box", "arrow", "text")

HIT_TOLERANCE = 6


class DrawState(enum.Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


def annotation_bounds(annotation):
    """Axis-aligned (x, y, w, h) of an annotation in template pixels."""
    x, y = annotation.position
    if isinstance(annotation, BoxAnnotation):
        return x, y, annotation.size.width, annotation.size.height
    if isinstance(annotation, ArrowAnnotation):
        ex, ey = annotation.end
        return min(x, ex), min(y, ey), abs(ex - x), abs(ey - y)
    if isinstance(annotation, TextAnnotation):
        # rough advance width, no font metrics are available here
        size = annotation.font_size
        return x, y, len(annotation.text) * size * 0.6, size * 1.2
    return x, y, 0, 0


def _contains(bounds, point, tolerance):
    x, y, w, h = bounds
    px, py = point
    return x - tolerance <= px <= x + w + tolerance and y - tolerance <= py <= y + h + tolerance


class AnnotationEngine:
    """
    Holds the annotations of every image and drives draw gestures.

    text_prompt is called synchronously when the text tool is used; it
    returns the entered text, or None/"" when the user cancels.
    """

    def __init__(self, text_prompt=None, tool_settings=None):
        self.text_prompt = text_prompt
        self.tool_settings = tool_settings or ToolSettings()
        self._lists = {}
        self.tool = None
        self.selected_id = None
        self.state = DrawState.IDLE
        self.draft = None
        self._image_id = None
        self._start = None

    # --- list operations ---
    def get_annotations(self, image_id):
        return tuple(self._lists.get(image_id, ()))

    def add_annotation(self, image_id, annotation):
        self._lists.setdefault(image_id, []).append(annotation)
        logger.debug("annotation %s (%s) added to %s", annotation.id, annotation.type, image_id)
        return annotation

    def remove_annotation(self, image_id, annotation_id):
        items = self._lists.get(image_id)
        if not items:
            return False
        kept = [a for a in items if a.id != annotation_id]
        removed = len(kept) != len(items)
        self._lists[image_id] = kept
        if removed and self.selected_id == annotation_id:
            self.selected_id = None
        return removed

    def update_annotation(self, image_id, annotation_id, **changes):
        """Replace fields of an annotation; unknown ids are ignored."""
        items = self._lists.get(image_id, [])
        for i, a in enumerate(items):
            if a.id == annotation_id:
                if "position" in changes:
                    changes["position"] = Position(*changes["position"])
                items[i] = replace(a, **changes)
                return items[i]
        return None

    def remove_image(self, image_id):
        dropped = self._lists.pop(image_id, [])
        if any(a.id == self.selected_id for a in dropped):
            self.selected_id = None
        if self._image_id == image_id:
            self.cancel()

    def clear(self):
        self._lists.clear()
        self.selected_id = None
        self.cancel()

    # --- selection ---
    def select(self, annotation_id):
        self.selected_id = annotation_id

    def clear_selection(self):
        self.selected_id = None

    def hit_test(self, image_id, point, tolerance=HIT_TOLERANCE):
        """Topmost annotation under a template-pixel point, or None."""
        for annotation in reversed(self.get_annotations(image_id)):
            if _contains(annotation_bounds(annotation), point, tolerance):
                return annotation
        return None

    def pick(self, image_id, point, transform=None):
        """Topmost annotation under a surface point, HIT_TOLERANCE surface pixels of slack."""
        transform = transform or SurfaceTransform()
        return self.hit_test(image_id, transform.to_template(point), HIT_TOLERANCE / transform.factor)

    # --- gestures ---
    def set_tool(self, tool):
        if tool is not None and tool not in TOOLS:
            raise ValueError(f"unknown annotation tool: {tool}")
        self.tool = tool

    def pointer_down(self, image_id, point, transform=None):
        """
        Start a gesture at a surface point.

        Without a tool this is a selection click. Returns the annotation
        committed by the text tool, otherwise None.
        """
        transform = transform or SurfaceTransform()
        start = Position(*transform.to_template(point))

        if self.tool is None or image_id is None:
            hit = self.pick(image_id, point, transform)
            self.selected_id = hit.id if hit else None
            self.state = DrawState.IDLE
            return None

        self.state = DrawState.DRAWING
        self._image_id = image_id
        self._start = start
        self.draft = None

        if self.tool == "text":
            text = self.text_prompt() if self.text_prompt else None
            if not text:
                return self._finish(DrawState.CANCELLED)
            s = self.tool_settings
            annotation = TextAnnotation(
                id=new_id(),
                position=start,
                style=AnnotationStyle(color=s.color, thickness=s.thickness),
                text=text,
                font_size=s.font_size or DEFAULT_ANNOTATION_FONT_SIZE,
            )
            return self._commit(annotation)
        return None

    def pointer_move(self, point, transform=None):
        if self.state is not DrawState.DRAWING or self.tool == "text":
            return None
        transform = transform or SurfaceTransform()
        end = Position(*transform.to_template(point))
        self.draft = self._shape(self._start, end)
        return self.draft

    def pointer_up(self, point=None, transform=None):
        """Commit the drawn shape; a degenerate shape cancels the gesture."""
        if self.state is not DrawState.DRAWING:
            return None
        if point is not None:
            self.pointer_move(point, transform)
        draft = self.draft
        if draft is None or _degenerate(draft):
            return self._finish(DrawState.CANCELLED)
        return self._commit(draft)

    def cancel(self):
        if self.state is DrawState.DRAWING:
            self._finish(DrawState.CANCELLED)
        self.draft = None

    def drag_end(self, image_id, annotation_id, point, transform=None):
        """Move a committed annotation so its top-left lands on a surface point."""
        transform = transform or SurfaceTransform()
        return self.update_annotation(image_id, annotation_id,
                                      position=transform.to_template(point))

    def _shape(self, start, end):
        s = self.tool_settings
        if self.tool == "arrow":
            return ArrowAnnotation(
                id=new_id(),
                position=start,
                style=AnnotationStyle(color=s.color, thickness=s.thickness),
                points=(0, 0, end.x - start.x, end.y - start.y),
            )
        cls = DashedBoxAnnotation if self.tool == "dashed-box" else BoxAnnotation
        return cls(
            id=new_id(),
            position=Position(min(start.x, end.x), min(start.y, end.y)),
            style=AnnotationStyle(
                color=s.color,
                thickness=s.thickness,
                line_style="dashed" if self.tool == "dashed-box" else "solid",
                corner_radius=s.corner_radius,
            ),
            size=Size(abs(end.x - start.x), abs(end.y - start.y)),
        )

    def _commit(self, annotation):
        self.add_annotation(self._image_id, annotation)
        self._finish(DrawState.COMMITTED)
        self.tool = None  # tools are single-use
        return annotation

    def _finish(self, state):
        self.state = state
        self.draft = None
        self._image_id = None
        self._start = None
        return None


def _degenerate(annotation):
    if isinstance(annotation, BoxAnnotation):
        return annotation.size.width == 0 and annotation.size.height == 0
    if isinstance(annotation, ArrowAnnotation):
        return annotation.points[2] == 0 and annotation.points[3] == 0
    return False
