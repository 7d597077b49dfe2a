"""Shared fixtures: small synthetic photos and logos built with Pillow."""

import io

import pytest
from PIL import Image

from photostamp.models import ImageEntry, LogoAsset


def png_bytes(img):
    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()


def make_entry(image_id, width, height, color=(40, 90, 160), name=None, with_source=True):
    img = Image.new("RGB", (width, height), color)
    return ImageEntry(
        id=image_id,
        name=name or f"{image_id}.jpg",
        width=width,
        height=height,
        image=img,
        source=png_bytes(img) if with_source else None,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def logo_asset():
    img = Image.new("RGBA", (200, 100), (255, 0, 0, 255))
    return LogoAsset(name="logo.png", data=png_bytes(img), width=200, height=100, image=img)
