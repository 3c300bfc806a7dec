"""
Pillow rasterizer and image payload codec for the annotation surface.

Payloads are PNG images wrapped in a ``data:`` URL so that they can be
stored in a text column and handed straight to a browser.
"""
from __future__ import annotations

import base64
import binascii
import io
from typing import Iterable, Optional

from PIL import Image, ImageColor, ImageDraw, UnidentifiedImageError

from .strokes import Point, Stroke

EMPTY_PAYLOAD = ''
PAYLOAD_PREFIX = 'data:image/png;base64,'


def is_valid_color(value: str) -> bool:
    try:
        ImageColor.getrgb(value)
    except (ValueError, AttributeError):
        return False
    return True


def new_surface(width: int, height: int, background: str) -> Image.Image:
    return Image.new('RGB', (max(1, int(width)), max(1, int(height))), background)


def draw_segment(draw: ImageDraw.ImageDraw, start: Point, end: Point, color: str, width: float) -> None:
    """Paint one segment with round caps.

    Both live drawing and replay go through here, so a stroke painted
    point by point and the same stroke replayed later produce identical
    pixels.
    """
    line_width = max(1, int(round(width)))
    draw.line([(start.x, start.y), (end.x, end.y)], fill=color, width=line_width)
    radius = line_width / 2.0
    for p in (start, end):
        draw.ellipse([p.x - radius, p.y - radius, p.x + radius, p.y + radius], fill=color)


def draw_stroke(image: Image.Image, stroke: Stroke, background: str) -> None:
    if len(stroke.points) < 2:
        return
    draw = ImageDraw.Draw(image)
    color = stroke.render_color(background)
    width = stroke.render_width()
    for start, end in zip(stroke.points, stroke.points[1:]):
        draw_segment(draw, start, end, color, width)


def render(width: int, height: int, strokes: Iterable[Stroke], background: str,
           base: Optional[Image.Image] = None) -> Image.Image:
    """Full replay: background, optional base layer, then strokes in order."""
    image = new_surface(width, height, background)
    if base is not None:
        image.paste(base, (0, 0))
    for stroke in strokes:
        draw_stroke(image, stroke, background)
    return image


def encode_payload(image: Image.Image) -> str:
    buffered = io.BytesIO()
    image.save(buffered, format='PNG')
    return PAYLOAD_PREFIX + base64.b64encode(buffered.getvalue()).decode('ascii')


def decode_payload(payload: str) -> Image.Image:
    """Turn a payload back into an RGB image.

    Accepts a full ``data:`` URL or bare base64.  Raises ``ValueError``
    when the payload is not a decodable image.
    """
    if not payload:
        raise ValueError('empty image payload')
    data = payload.split('base64,', 1)[1] if 'base64,' in payload else payload
    try:
        raw = base64.b64decode(data, validate=True)
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (binascii.Error, UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValueError(f'invalid image payload: {exc}') from exc
    return img.convert('RGB')
