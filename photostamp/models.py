# photostamp/models.py
"""Data model shared by the placement store, annotation engine and renderers."""
from dataclasses import dataclass, asdict, fields
from typing import ClassVar, Dict, NamedTuple, Optional, Tuple
import uuid

from photostamp.config import (
    DEFAULT_LOGO_POSITION, DEFAULT_LOGO_SCALE, DEFAULT_LOGO_OPACITY,
    DEFAULT_DATE_POSITION, DEFAULT_DATE_SCALE, DEFAULT_DATE_OPACITY,
    DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE, DEFAULT_FONT_COLOR,
    DEFAULT_TOOL_COLOR, DEFAULT_TOOL_THICKNESS, DEFAULT_TOOL_CORNER_RADIUS,
    DEFAULT_ANNOTATION_FONT_SIZE, DEFAULT_EXPORT_QUALITY,
    EXPORT_FORMATS, QUALITY_RANGE,
)


def clamp(value, bounds):
    lo, hi = bounds
    return max(lo, min(hi, value))


def new_id():
    return uuid.uuid4().hex


class Position(NamedTuple):
    x: float
    y: float


class Size(NamedTuple):
    width: float
    height: float


@dataclass
class LogoAsset:
    """Logo bytes plus the decoded pixel source (a PIL image) when available."""
    name: str
    data: bytes
    width: int
    height: int
    image: object = None

    @property
    def aspect_ratio(self):
        return self.height / self.width if self.width else 1.0

    def release(self):
        if self.image is not None:
            self.image.close()
            self.image = None


@dataclass(frozen=True)
class LogoPlacement:
    position: Position = Position(*DEFAULT_LOGO_POSITION)
    scale: float = DEFAULT_LOGO_SCALE
    opacity: float = DEFAULT_LOGO_OPACITY
    asset: Optional[LogoAsset] = None


@dataclass(frozen=True)
class FontSettings:
    family: str = DEFAULT_FONT_FAMILY
    size: int = DEFAULT_FONT_SIZE   # base size kept in presets, rendering uses the date scale
    color: str = DEFAULT_FONT_COLOR


@dataclass(frozen=True)
class DateStampPlacement:
    text: str = ""
    position: Position = Position(*DEFAULT_DATE_POSITION)
    scale: float = DEFAULT_DATE_SCALE
    opacity: float = DEFAULT_DATE_OPACITY
    font: FontSettings = FontSettings()


@dataclass(frozen=True)
class PlacementSnapshot:
    logo: LogoPlacement = LogoPlacement()
    date: DateStampPlacement = DateStampPlacement()


@dataclass(frozen=True)
class AnnotationStyle:
    color: str = DEFAULT_TOOL_COLOR
    thickness: float = DEFAULT_TOOL_THICKNESS
    line_style: str = "solid"   # solid | dashed
    corner_radius: float = 0


@dataclass(frozen=True)
class Annotation:
    """
    Base of the annotation variants.

    position (and every size below) is in pixel units of the template
    image, not in normalized fractions.
    """
    id: str
    position: Position
    style: AnnotationStyle = AnnotationStyle()

    type: ClassVar[str] = ""


@dataclass(frozen=True)
class BoxAnnotation(Annotation):
    size: Size = Size(0, 0)

    type: ClassVar[str] = "box"


@dataclass(frozen=True)
class DashedBoxAnnotation(BoxAnnotation):
    type: ClassVar[str] = "dashed-box"


@dataclass(frozen=True)
class ArrowAnnotation(Annotation):
    points: Tuple[float, float, float, float] = (0, 0, 0, 0)   # dx0, dy0, dx1, dy1

    type: ClassVar[str] = "arrow"

    @property
    def end(self):
        return Position(self.position.x + self.points[2], self.position.y + self.points[3])


@dataclass(frozen=True)
class TextAnnotation(Annotation):
    text: str = ""
    font_size: float = DEFAULT_ANNOTATION_FONT_SIZE
    font_family: Optional[str] = None

    type: ClassVar[str] = "text"


ANNOTATION_TYPES: Dict[str, type] = {
    cls.type: cls
    for cls in (BoxAnnotation, DashedBoxAnnotation, ArrowAnnotation, TextAnnotation)
}


def annotation_to_dict(annotation):
    data = asdict(annotation)
    data["type"] = annotation.type
    data["position"] = {"x": annotation.position.x, "y": annotation.position.y}
    if "size" in data:
        data["size"] = {"width": annotation.size.width, "height": annotation.size.height}
    if "points" in data:
        data["points"] = list(annotation.points)
    return data


# camelCase names used by web clients of the same record
_STYLE_ALIASES = {"lineStyle": "line_style", "borderRadius": "corner_radius"}


def _style_from_dict(data):
    known = {f.name for f in fields(AnnotationStyle)}
    kwargs = {}
    for key, value in data.items():
        key = _STYLE_ALIASES.get(key, key)
        if key in known:
            kwargs[key] = value
    return AnnotationStyle(**kwargs)


def annotation_from_dict(data):
    """Build an annotation from its dict form; unknown types give None."""
    cls = ANNOTATION_TYPES.get(data.get("type"))
    if cls is None:
        return None
    pos = data.get("position") or {}
    kwargs = {
        "id": data.get("id") or new_id(),
        "position": Position(float(pos.get("x", 0)), float(pos.get("y", 0))),
        "style": _style_from_dict(data.get("style") or {}),
    }
    if issubclass(cls, BoxAnnotation):
        size = data.get("size") or {}
        kwargs["size"] = Size(float(size.get("width", 0)), float(size.get("height", 0)))
    elif cls is ArrowAnnotation:
        kwargs["points"] = tuple(float(p) for p in data.get("points", (0, 0, 0, 0)))
    elif cls is TextAnnotation:
        kwargs["text"] = data.get("text", "")
        kwargs["font_size"] = float(data.get("font_size", DEFAULT_ANNOTATION_FONT_SIZE))
        kwargs["font_family"] = data.get("font_family")
    return cls(**kwargs)


@dataclass(frozen=True)
class ToolSettings:
    """Style applied to newly drawn annotations."""
    color: str = DEFAULT_TOOL_COLOR
    thickness: float = DEFAULT_TOOL_THICKNESS
    corner_radius: float = DEFAULT_TOOL_CORNER_RADIUS
    font_size: float = DEFAULT_ANNOTATION_FONT_SIZE


@dataclass
class ImageEntry:
    """One source photograph; the entry owns its decoded pixels."""
    id: str
    name: str
    width: int
    height: int
    image: object = None       # PIL.Image, None once released or when undecoded
    source: object = None      # path or bytes the image can be decoded from again

    def release(self):
        if self.image is not None:
            self.image.close()
            self.image = None


def _parse_size(size):
    """Normalize an export size to "original" or "WxH"; anything else is a ValueError."""
    if not size or str(size).lower() == "original":
        return "original"
    w, sep, h = str(size).strip().lower().partition("x")
    if not sep or not w.isdigit() or not h.isdigit() or int(w) == 0 or int(h) == 0:
        raise ValueError(f"invalid export size: {size!r} (use 'original' or WxH)")
    return f"{int(w)}x{int(h)}"


@dataclass
class ExportSettings:
    filename: Optional[str] = None
    suffix: str = ""
    format: str = "png"
    quality: int = DEFAULT_EXPORT_QUALITY
    size: str = "original"

    def __post_init__(self):
        fmt = self.format.lower()
        if fmt == "jpeg":
            fmt = "jpg"
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"unsupported export format: {self.format}")
        self.format = fmt
        self.quality = int(clamp(self.quality, QUALITY_RANGE))
        self.size = _parse_size(self.size)

    @property
    def extension(self):
        return "." + self.format

    @property
    def mime_type(self):
        return "image/png" if self.format == "png" else "image/jpeg"

    @property
    def target_size(self):
        """(w, h) for a fixed output size, None for 'original'."""
        if self.size == "original":
            return None
        w, _, h = self.size.partition("x")
        return int(w), int(h)
