# photostamp/image_io.py
import asyncio
import io
import os
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from photostamp.models import ImageEntry, LogoAsset, new_id

SUPPORTED_EXTS = {'.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff'}


class DecodeError(ValueError):
    """An image or logo could not be decoded."""


def is_image_file(path):
    _, ext = os.path.splitext(str(path).lower())
    return ext in SUPPORTED_EXTS


def collect_image_paths(paths):
    """Expand files and folders into image file paths, keeping order and dropping duplicates."""
    found = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            candidates = sorted(f for f in p.rglob("*") if f.is_file())
        else:
            candidates = [p]
        for f in candidates:
            if f.is_file() and is_image_file(f) and str(f) not in found:
                found.append(str(f))
    return found


def open_image_fix_orientation(source):
    """
    Open a path or bytes and apply the EXIF orientation.

    Raises DecodeError when Pillow cannot read the data.
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(source)
        img = ImageOps.exif_transpose(img)  # EXIF orientation
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e
    return img


def generate_thumbnail(source, max_size=1024):
    img = open_image_fix_orientation(source)
    img.thumbnail((max_size, max_size), Image.LANCZOS)
    return img


async def decode_image(source):
    """Awaitable decode; the Pillow work runs in a worker thread."""
    return await asyncio.to_thread(open_image_fix_orientation, source)


def load_image_entry(path):
    img = open_image_fix_orientation(path)
    return ImageEntry(
        id=new_id(),
        name=Path(path).name,
        width=img.width,
        height=img.height,
        image=img,
        source=str(path),
    )


def load_logo_asset(source, name=None):
    """Read a logo from a path or bytes, keeping the raw bytes for re-decoding at export."""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        name = name or "logo"
    else:
        try:
            data = Path(source).read_bytes()
        except OSError as e:
            raise DecodeError(f"cannot read logo {source}: {e}") from e
        name = name or Path(source).name
    img = open_image_fix_orientation(data).convert("RGBA")
    return LogoAsset(name=name, data=data, width=img.width, height=img.height, image=img)
