"""Freehand annotation: stroke model, capture engine and rasterizer."""

from .engine import AnnotationEngine, DRAWING, IDLE
from .raster import EMPTY_PAYLOAD, decode_payload, encode_payload
from .strokes import (
    NOMINAL_PRESSURE,
    TOOL_ERASER,
    TOOL_PEN,
    Point,
    PointerEvent,
    Stroke,
    SurfaceGeometry,
)

__all__ = [
    'AnnotationEngine',
    'DRAWING',
    'IDLE',
    'EMPTY_PAYLOAD',
    'decode_payload',
    'encode_payload',
    'NOMINAL_PRESSURE',
    'TOOL_ERASER',
    'TOOL_PEN',
    'Point',
    'PointerEvent',
    'Stroke',
    'SurfaceGeometry',
]
