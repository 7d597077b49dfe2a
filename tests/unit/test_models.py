"""Unit tests for photostamp/models.py."""

import pytest

from photostamp.models import (
    AnnotationStyle, ArrowAnnotation, BoxAnnotation, DashedBoxAnnotation, ExportSettings,
    Position, Size, TextAnnotation, annotation_from_dict, annotation_to_dict,
)


class TestExportSettings:
    def test_jpeg_alias(self) -> None:
        s = ExportSettings(format="JPEG")
        assert s.format == "jpg"
        assert s.extension == ".jpg"
        assert s.mime_type == "image/jpeg"

    def test_unsupported_format(self) -> None:
        with pytest.raises(ValueError):
            ExportSettings(format="gif")

    def test_quality_clamped(self) -> None:
        assert ExportSettings(quality=500).quality == 100
        assert ExportSettings(quality=1).quality == 10

    @pytest.mark.parametrize("size, expected", [
        ("original", None),
        ("", None),
        ("640x400", (640, 400)),
        ("500X400", (500, 400)),
    ])
    def test_target_size(self, size, expected) -> None:
        assert ExportSettings(size=size).target_size == expected

    @pytest.mark.parametrize("size", ["640by400", "x400", "640x", "0x10", "-5x10", "axb"])
    def test_malformed_size(self, size) -> None:
        with pytest.raises(ValueError):
            ExportSettings(size=size)

    def test_size_is_normalized(self) -> None:
        assert ExportSettings(size=" 500X400").size == "500x400"
        assert ExportSettings(size=None).size == "original"


class TestAnnotationDicts:
    @pytest.mark.parametrize("annotation", [
        BoxAnnotation(id="b", position=Position(1, 2), size=Size(3, 4),
                      style=AnnotationStyle(corner_radius=5)),
        DashedBoxAnnotation(id="d", position=Position(1, 2), size=Size(3, 4),
                            style=AnnotationStyle(line_style="dashed")),
        ArrowAnnotation(id="a", position=Position(5, 5), points=(0, 0, 10, -3)),
        TextAnnotation(id="t", position=Position(7, 8), text="hi", font_size=20),
    ])
    def test_dict_form_keeps_variant(self, annotation) -> None:
        data = annotation_to_dict(annotation)
        assert data["type"] == annotation.type
        assert annotation_from_dict(data) == annotation

    def test_unknown_type(self) -> None:
        assert annotation_from_dict({"type": "dashed-circle", "id": "x"}) is None

    def test_dashed_box_is_a_box(self) -> None:
        assert isinstance(DashedBoxAnnotation(id="d", position=Position(0, 0)), BoxAnnotation)

    def test_style_ignores_unknown_keys(self) -> None:
        data = {
            "type": "box", "id": "b", "position": {"x": 1, "y": 2},
            "size": {"width": 3, "height": 4},
            "style": {"color": "#00FF00", "lineStyle": "dashed", "borderRadius": 4, "shadow": 1},
        }
        box = annotation_from_dict(data)
        assert box.style == AnnotationStyle(color="#00FF00", line_style="dashed", corner_radius=4)
