# photostamp/qt_surface.py
"""Executes a pipeline Frame with QPainter for the interactive preview."""
from PIL.ImageQt import ImageQt
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QImage, QPainter, QPainterPath, QPen, QPixmap

from photostamp.pipeline import ImageOp, TextOp, RectOp, PathOp, LineOp, LineSegment


def pil_to_qpixmap(img):
    """
    Convert a PIL image to a QPixmap.

    Args:
        img: PIL.Image

    Returns:
        QPixmap
    """
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    qim = ImageQt(img)
    pix = QPixmap.fromImage(QImage(qim))
    return pix


class PixmapCache:
    """QPixmaps keyed by the PIL image they were converted from."""

    def __init__(self):
        self._items = {}

    def get(self, img):
        key = id(img)
        hit = self._items.get(key)
        if hit is None or hit[0] is not img:
            hit = (img, pil_to_qpixmap(img))
            self._items[key] = hit
        return hit[1]

    def clear(self):
        self._items.clear()


def _pen(color, width, dash):
    pen = QPen(QColor(color))
    pen.setWidthF(max(width, 0.5))
    pen.setCapStyle(Qt.FlatCap)
    pen.setJoinStyle(Qt.RoundJoin)
    if dash:
        # Qt dash lengths are multiples of the pen width
        w = pen.widthF()
        pen.setDashPattern([d / w for d in dash])
    return pen


def _path(op):
    path = QPainterPath()
    for i, seg in enumerate(op.segments):
        if isinstance(seg, LineSegment):
            if i == 0:
                path.moveTo(seg.x0, seg.y0)
            path.lineTo(seg.x1, seg.y1)
        else:
            r = seg.radius
            rect = QRectF(seg.cx - r, seg.cy - r, 2 * r, 2 * r)
            if i == 0:
                path.arcMoveTo(rect, -seg.start)
            # Qt angles run counter-clockwise, pipeline angles clockwise (y down)
            path.arcTo(rect, -seg.start, -(seg.end - seg.start))
    if op.closed:
        path.closeSubpath()
    return path


class QtPainterSurface:
    """Draws frames onto an active QPainter."""

    def __init__(self, painter, cache=None):
        self.painter = painter
        self.cache = cache or PixmapCache()

    def draw(self, frame, origin=(0, 0)):
        p = self.painter
        p.save()
        p.translate(*origin)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        if frame.background:
            p.fillRect(QRectF(0, 0, frame.width, frame.height), QColor(frame.background))
        for op in frame.ops:
            if isinstance(op, ImageOp):
                pix = self.cache.get(op.source)
                p.setOpacity(op.opacity)
                p.drawPixmap(QRectF(op.x, op.y, op.width, op.height), pix, QRectF(pix.rect()))
                p.setOpacity(1.0)
            elif isinstance(op, TextOp):
                font = QFont(op.family)
                font.setPixelSize(max(1, int(round(op.font_size))))
                p.setFont(font)
                p.setPen(QColor(op.color))
                p.setOpacity(op.opacity)
                p.drawText(QPointF(op.x, op.baseline), op.text)
                p.setOpacity(1.0)
            elif isinstance(op, RectOp):
                p.setPen(_pen(op.color, op.line_width, op.dash))
                p.setBrush(Qt.NoBrush)
                p.drawRect(QRectF(op.x, op.y, op.width, op.height))
            elif isinstance(op, PathOp):
                p.setPen(_pen(op.color, op.line_width, op.dash))
                p.setBrush(Qt.NoBrush)
                p.drawPath(_path(op))
            elif isinstance(op, LineOp):
                p.setPen(_pen(op.color, op.line_width, op.dash))
                p.drawLine(QPointF(op.x0, op.y0), QPointF(op.x1, op.y1))
        p.restore()
