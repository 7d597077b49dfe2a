# photostamp/pil_surface.py
"""Executes a pipeline Frame with Pillow for export."""
import math

from PIL import Image, ImageColor, ImageDraw

from photostamp.fonts import load_font
from photostamp.pipeline import ImageOp, TextOp, RectOp, PathOp, LineOp, LineSegment

ARC_STEP_DEG = 5


def _rgba(color, opacity=1.0):
    r, g, b, *a = ImageColor.getrgb(color)
    alpha = a[0] if a else 255
    return r, g, b, int(round(alpha * opacity))


def _with_opacity(img, opacity):
    img = img.convert("RGBA")
    if opacity >= 1:
        return img
    alpha = img.getchannel("A").point(lambda v: int(round(v * opacity)))
    img.putalpha(alpha)
    return img


def _arc_points(seg):
    steps = max(1, int(math.ceil(abs(seg.end - seg.start) / ARC_STEP_DEG)))
    pts = []
    for i in range(steps + 1):
        a = math.radians(seg.start + (seg.end - seg.start) * i / steps)
        pts.append((seg.cx + seg.radius * math.cos(a), seg.cy + seg.radius * math.sin(a)))
    return pts


def flatten(segments):
    """Path segments -> one polyline (list of points)."""
    pts = []
    for seg in segments:
        if isinstance(seg, LineSegment):
            seg_pts = [(seg.x0, seg.y0), (seg.x1, seg.y1)]
        else:
            seg_pts = _arc_points(seg)
        if pts and seg_pts and pts[-1] == seg_pts[0]:
            seg_pts = seg_pts[1:]
        pts.extend(seg_pts)
    return pts


def dash_polyline(points, pattern):
    """Split a polyline into the 'on' runs of a dash pattern."""
    runs = []
    if len(points) < 2 or not pattern or sum(pattern) <= 0:
        return [points]
    idx = 0
    remaining = pattern[0]
    on = True
    current = [points[0]]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        seg_len = math.hypot(x1 - x0, y1 - y0)
        pos = 0.0
        while seg_len - pos > remaining:
            pos += remaining
            t = pos / seg_len
            p = (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)
            if on:
                current.append(p)
                runs.append(current)
                current = []
            else:
                current = [p]
            on = not on
            idx = (idx + 1) % len(pattern)
            remaining = pattern[idx]
        remaining -= seg_len - pos
        if on:
            current.append((x1, y1))
    if on and len(current) > 1:
        runs.append(current)
    return runs


def _stroke(draw, points, color, width, dash):
    w = max(1, int(round(width)))
    for run in dash_polyline(points, dash) if dash else [points]:
        if len(run) > 1:
            draw.line(run, fill=_rgba(color), width=w, joint="curve")


def render_frame(frame):
    """Rasterize a Frame into a new RGBA image of frame.width x frame.height."""
    bg = _rgba(frame.background) if frame.background else (0, 0, 0, 0)
    canvas = Image.new("RGBA", (max(1, frame.width), max(1, frame.height)), bg)

    for op in frame.ops:
        if isinstance(op, ImageOp):
            size = (max(1, int(round(op.width))), max(1, int(round(op.height))))
            src = op.source
            if src.size != size:
                src = src.resize(size, Image.LANCZOS)
            src = _with_opacity(src, op.opacity)
            layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            # plain copy onto the empty layer; alpha is applied once, by alpha_composite
            layer.paste(src, (int(round(op.x)), int(round(op.y))))
            canvas = Image.alpha_composite(canvas, layer)
        elif isinstance(op, TextOp):
            layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            draw = ImageDraw.Draw(layer)
            font = load_font(op.family, op.font_size)
            draw.text((op.x, op.baseline), op.text, font=font,
                      fill=_rgba(op.color, op.opacity), anchor="ls")
            canvas = Image.alpha_composite(canvas, layer)
        elif isinstance(op, RectOp):
            x, y, w, h = op.x, op.y, op.width, op.height
            points = [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]
            _stroke(ImageDraw.Draw(canvas), points, op.color, op.line_width, op.dash)
        elif isinstance(op, PathOp):
            points = flatten(op.segments)
            if op.closed and points and points[0] != points[-1]:
                points.append(points[0])
            _stroke(ImageDraw.Draw(canvas), points, op.color, op.line_width, op.dash)
        elif isinstance(op, LineOp):
            _stroke(ImageDraw.Draw(canvas), [(op.x0, op.y0), (op.x1, op.y1)],
                    op.color, op.line_width, op.dash)
    return canvas
