"""Unit tests for photostamp/pipeline.py: layer order, sizing and scale invariance."""

import math
from dataclasses import dataclass, fields

import pytest
from PIL import Image

from photostamp.models import (
    Annotation, AnnotationStyle, ArrowAnnotation, BoxAnnotation, DashedBoxAnnotation,
    DateStampPlacement, LogoPlacement, PlacementSnapshot, Position, Size, TextAnnotation,
)
from photostamp.pipeline import (
    ArcSegment, ImageOp, LineOp, LineSegment, PathOp, RectOp, RenderTarget, TextOp,
    compose_frame, rounded_rect_segments,
)

GEOMETRY_FIELDS = {"x", "y", "width", "height", "font_size", "line_width",
                   "x0", "y0", "x1", "y1", "cx", "cy", "radius"}


def scene_with(logo_asset=None, text=""):
    logo = LogoPlacement(position=Position(0.02, 0.02), scale=0.3, opacity=0.8, asset=logo_asset)
    date = DateStampPlacement(text=text, position=Position(0.02, 0.06), scale=0.15, opacity=0.5)
    return PlacementSnapshot(logo=logo, date=date)


def sample_annotations():
    return [
        BoxAnnotation(id="b", position=Position(100, 100), size=Size(100, 50),
                      style=AnnotationStyle(thickness=3)),
        DashedBoxAnnotation(id="d", position=Position(10, 20), size=Size(60, 40),
                            style=AnnotationStyle(line_style="dashed", corner_radius=8)),
        ArrowAnnotation(id="a", position=Position(300, 300), points=(0, 0, 100, 0)),
        TextAnnotation(id="t", position=Position(50, 60), text="note"),
    ]


def geometry(op):
    """Flat list of every geometric number carried by an op."""
    values = []
    for f in fields(op):
        v = getattr(op, f.name)
        if f.name in GEOMETRY_FIELDS:
            values.append(v)
        elif f.name == "dash":
            values.extend(v)
        elif f.name == "segments":
            for seg in v:
                values.extend(getattr(seg, s.name) for s in fields(seg)
                              if s.name in GEOMETRY_FIELDS)
    return values


@pytest.fixture
def target():
    return RenderTarget(1000, 800, Image.new("RGB", (1000, 800)))


class TestLayerOrder:
    def test_fixed_order(self, target, logo_asset) -> None:
        frame = compose_frame(target, scene_with(logo_asset, "22.03"), sample_annotations(), 1000)
        layers = [op.layer for op in frame.ops]
        assert layers[:3] == ["image", "logo", "date"]
        assert set(layers[3:]) == {"annotation"}

    def test_annotations_in_creation_order(self, target) -> None:
        frame = compose_frame(target, scene_with(), sample_annotations(), 1000)
        ids = []
        for op in frame.layer("annotation"):
            if op.annotation_id not in ids:
                ids.append(op.annotation_id)
        assert ids == ["b", "d", "a", "t"]

    def test_selection_drawn_last(self, target) -> None:
        frame = compose_frame(target, scene_with(), sample_annotations(), 1000, selected_id="b")
        assert frame.ops[-1].layer == "selection"
        assert frame.ops[-1].annotation_id == "b"


class TestLogoAndDate:
    def test_logo_example(self, target, logo_asset) -> None:
        frame = compose_frame(target, scene_with(logo_asset), (), 1000)
        (logo,) = frame.layer("logo")
        assert (logo.x, logo.y) == pytest.approx((20, 16))
        assert logo.width == pytest.approx(300)
        # logo_asset is 200x100: aspect ratio kept
        assert logo.height == pytest.approx(150)
        assert logo.opacity == pytest.approx(0.8)

    def test_logo_uses_current_image_not_template(self, logo_asset) -> None:
        small = RenderTarget(500, 400, object())
        frame = compose_frame(small, scene_with(logo_asset), (), template_width=1000)
        (logo,) = frame.layer("logo")
        assert (logo.x, logo.y, logo.width) == pytest.approx((10, 8, 150))

    def test_date_font_size(self) -> None:
        t = RenderTarget(1200, 900, object())
        frame = compose_frame(t, scene_with(text="22.03"), (), 1200)
        (date,) = frame.layer("date")
        assert date.font_size == pytest.approx(60)
        assert (date.x, date.y) == pytest.approx((24, 54))
        assert date.baseline == pytest.approx(54 + 60)
        assert date.opacity == pytest.approx(0.5)

    def test_empty_date_is_not_drawn(self, target) -> None:
        assert compose_frame(target, scene_with(text=""), (), 1000).layer("date") == []


class TestScaleInvariance:
    def test_logo_doubles(self, target, logo_asset) -> None:
        frame = compose_frame(target, scene_with(logo_asset), (), 1000, render_scale=2)
        (logo,) = frame.layer("logo")
        assert (logo.x, logo.y, logo.width) == pytest.approx((40, 32, 600))
        assert (frame.width, frame.height) == (2000, 1600)

    @pytest.mark.parametrize("scale", [0.25, 2.0, 3.7])
    def test_every_primitive_scales(self, target, logo_asset, scale) -> None:
        scene = scene_with(logo_asset, "22.03")
        base = compose_frame(target, scene, sample_annotations(), 1000, render_scale=1)
        scaled = compose_frame(target, scene, sample_annotations(), 1000, render_scale=scale)
        assert len(base.ops) == len(scaled.ops)
        for a, b in zip(base.ops, scaled.ops):
            assert type(a) is type(b)
            assert geometry(b) == pytest.approx([v * scale for v in geometry(a)])


class TestAnnotationGeometry:
    def test_proportional_on_smaller_image(self) -> None:
        box = BoxAnnotation(id="b", position=Position(100, 100), size=Size(100, 50),
                            style=AnnotationStyle(thickness=4))
        frame = compose_frame(RenderTarget(500, 400, object()), scene_with(), [box], 1000)
        (rect,) = frame.layer("annotation")
        assert isinstance(rect, RectOp)
        assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((50, 50, 50, 25))
        assert rect.line_width == pytest.approx(2)

    def test_dash_pattern_scaled(self) -> None:
        box = DashedBoxAnnotation(id="d", position=Position(0, 0), size=Size(10, 10))
        frame = compose_frame(RenderTarget(500, 400, object()), scene_with(), [box], 1000)
        assert frame.layer("annotation")[0].dash == pytest.approx((5, 2.5))

    def test_rounded_box_is_eight_segments(self, target) -> None:
        box = BoxAnnotation(id="r", position=Position(0, 0), size=Size(100, 60),
                            style=AnnotationStyle(corner_radius=10))
        (path,) = compose_frame(target, scene_with(), [box], 1000).layer("annotation")
        assert isinstance(path, PathOp)
        kinds = [type(s) for s in path.segments]
        assert kinds == [LineSegment, ArcSegment] * 4

    def test_corner_radius_is_capped(self) -> None:
        segs = rounded_rect_segments(0, 0, 20, 10, 50)
        assert segs[1].radius == pytest.approx(5)

    def test_arrow_head(self, target) -> None:
        arrow = ArrowAnnotation(id="a", position=Position(0, 0), points=(0, 0, 100, 0))
        shaft, left, right = compose_frame(target, scene_with(), [arrow], 1000).layer("annotation")
        assert isinstance(shaft, LineOp)
        assert (shaft.x1, shaft.y1) == pytest.approx((100, 0))
        for wing in (left, right):
            assert (wing.x0, wing.y0) == pytest.approx((100, 0))
            assert math.hypot(wing.x1 - 100, wing.y1) == pytest.approx(15)
            assert wing.x1 == pytest.approx(100 - 15 * math.cos(math.radians(30)))
        assert {round(left.y1, 6), round(right.y1, 6)} == {7.5, -7.5}

    def test_text_baseline_below_anchor(self, target) -> None:
        note = TextAnnotation(id="t", position=Position(10, 20), text="hi")
        (op,) = compose_frame(target, scene_with(), [note], 1000).layer("annotation")
        assert isinstance(op, TextOp)
        assert op.baseline == pytest.approx(20 + 16)


class TestDegradation:
    def test_missing_base_image_keeps_overlays(self, logo_asset) -> None:
        frame = compose_frame(RenderTarget(1000, 800, None), scene_with(logo_asset, "x"), (), 1000)
        assert [op.layer for op in frame.ops] == ["logo", "date"]

    def test_undecoded_logo_is_skipped(self, target, logo_asset) -> None:
        logo_asset.release()
        frame = compose_frame(target, scene_with(logo_asset), (), 1000)
        assert frame.layer("logo") == []

    def test_unknown_annotation_is_skipped(self, target) -> None:
        @dataclass(frozen=True)
        class Circle(Annotation):
            type = "dashed-circle"

        notes = [Circle(id="c", position=Position(0, 0)), sample_annotations()[0]]
        frame = compose_frame(target, scene_with(), notes, 1000)
        assert [op.annotation_id for op in frame.layer("annotation")] == ["b"]


class TestLetterbox:
    def test_fixed_size_fits_and_centers(self, logo_asset) -> None:
        target = RenderTarget(1000, 800, object())
        box = BoxAnnotation(id="b", position=Position(100, 100), size=Size(100, 50))
        frame = compose_frame(target, scene_with(logo_asset), [box], 1000, canvas_size=(640, 400))
        assert (frame.width, frame.height) == (640, 400)
        assert frame.background == "#FFFFFF"
        image, logo, rect = frame.ops
        assert isinstance(image, ImageOp)
        assert (image.x, image.y, image.width, image.height) == pytest.approx((70, 0, 500, 400))
        assert (logo.x, logo.y, logo.width) == pytest.approx((70 + 10, 8, 150))
        assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((120, 50, 50, 25))
