# photostamp/exporter.py
import io
import logging

from PIL import Image

from photostamp.pil_surface import render_frame
from photostamp.pipeline import RenderTarget, compose_frame

logger = logging.getLogger(__name__)


class EncodeError(RuntimeError):
    """Encoding an image produced no output."""


class RenderError(RuntimeError):
    """A frame could not be drawn, e.g. an overlay has an unknown color."""


def composite(
    image,                 # PIL.Image, the decoded source at full resolution
    scene,                 # PlacementSnapshot
    annotations=(),        # annotations of this image, template pixels
    template_width=None,   # width of the first image of the batch
    size=None,             # (w, h) fixed output size or None for original
):
    """
    Draw logo, date stamp and annotations onto image and return the RGBA result.

    With size the image is letterboxed: scaled to fit, centered, and the
    free area filled white; overlays follow the same fit scale and offset.
    """
    target = RenderTarget(image.width, image.height, image)
    frame = compose_frame(
        target, scene, annotations,
        template_width=template_width or image.width,
        render_scale=1.0,
        canvas_size=size,
    )
    try:
        return render_frame(frame)
    except ValueError as e:
        raise RenderError(f"cannot render image: {e}") from e


def encode(img, output_format="png", quality=90):
    """Serialize to PNG or JPEG bytes."""
    buf = io.BytesIO()
    try:
        if output_format.lower() in ("jpg", "jpeg"):
            rgb = img.convert("RGB")
            rgb.save(buf, "JPEG", quality=quality, optimize=True)
        else:
            img.save(buf, "PNG", compress_level=6)
    except (OSError, ValueError) as e:
        raise EncodeError(f"{output_format} encoding failed: {e}") from e
    data = buf.getvalue()
    if not data:
        raise EncodeError(f"{output_format} encoding produced no output")
    return data


def export_image(image, scene, annotations, template_width, settings):
    """Composite and encode one image according to ExportSettings."""
    composed = composite(image, scene, annotations, template_width, settings.target_size)
    logger.debug("composited %dx%d -> %dx%d (%s)", image.width, image.height,
                 composed.width, composed.height, settings.format)
    if settings.format == "jpg":
        # JPEG has no alpha; flatten onto white like the letterbox background
        flat = Image.new("RGBA", composed.size, (255, 255, 255, 255))
        composed = Image.alpha_composite(flat, composed)
    return encode(composed, settings.format, settings.quality)
