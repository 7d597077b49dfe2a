"""QPainter surface tests; they run on the offscreen platform and skip without PySide6."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")

from PIL import Image  # noqa: E402
from PySide6.QtGui import QColor, QGuiApplication, QImage, QPainter  # noqa: E402

from photostamp.pipeline import Frame, ImageOp, RectOp  # noqa: E402
from photostamp.qt_surface import PixmapCache, QtPainterSurface  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QGuiApplication.instance() or QGuiApplication([])


def paint(frame, size):
    canvas = QImage(size[0], size[1], QImage.Format_ARGB32)
    canvas.fill(QColor("#000000"))
    painter = QPainter(canvas)
    try:
        QtPainterSurface(painter).draw(frame)
    finally:
        painter.end()
    return canvas


class TestQtPainterSurface:
    def test_background_and_image(self, qapp) -> None:
        src = Image.new("RGB", (10, 10), (0, 0, 255))
        frame = Frame(40, 40, "#FFFFFF", [ImageOp("image", src, 10, 10, 20, 20)])
        out = paint(frame, (40, 40))
        assert out.pixelColor(20, 20).name() == "#0000ff"
        assert out.pixelColor(2, 2).name() == "#ffffff"

    def test_rect_outline(self, qapp) -> None:
        frame = Frame(50, 50, "#FFFFFF", [RectOp("annotation", 10, 10, 30, 30, "#FF0000", 3)])
        out = paint(frame, (50, 50))
        assert out.pixelColor(10, 25).name() == "#ff0000"
        assert out.pixelColor(25, 25).name() == "#ffffff"

    def test_pixmap_cache_reuses_conversion(self, qapp) -> None:
        cache = PixmapCache()
        img = Image.new("RGBA", (4, 4))
        assert cache.get(img) is cache.get(img)
