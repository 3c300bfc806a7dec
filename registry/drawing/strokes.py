"""
Immutable value types for freehand annotation.

A :class:`Stroke` is one pen gesture from press to release.  Points are
stored in canvas space, i.e. already scaled to the backing-store
resolution of the drawing surface; :class:`SurfaceGeometry` performs
that mapping from client (pointer event) coordinates.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

TOOL_PEN = 'pen'
TOOL_ERASER = 'eraser'
TOOLS = (TOOL_PEN, TOOL_ERASER)

# Pressure reported for input devices that have no pressure sensor
NOMINAL_PRESSURE = 0.5


def _clamp_pressure(value: Optional[float]) -> float:
    if value is None:
        return NOMINAL_PRESSURE
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    pressure: float = NOMINAL_PRESSURE

    def __post_init__(self) -> None:
        object.__setattr__(self, 'pressure', _clamp_pressure(self.pressure))

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'pressure': self.pressure}


@dataclass(frozen=True)
class Stroke:
    """A committed pen gesture.

    ``color`` and ``width`` are the pen settings at the time of the
    gesture.  Eraser strokes keep the pen width the user picked; the
    rasterizer paints them with the background colour at double width
    (see :meth:`render_color` / :meth:`render_width`).
    """
    points: tuple[Point, ...]
    color: str = '#000000'
    width: float = 2.0
    tool: str = TOOL_PEN
    timestamp: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'points', tuple(self.points))
        if self.width <= 0:
            raise ValueError('stroke width must be positive')
        if self.tool not in TOOLS:
            raise ValueError(f'unknown tool {self.tool!r}')

    @property
    def is_eraser(self) -> bool:
        return self.tool == TOOL_ERASER

    def render_color(self, background: str) -> str:
        return background if self.is_eraser else self.color

    def render_width(self) -> float:
        return self.width * 2 if self.is_eraser else self.width

    def to_dict(self) -> dict:
        return {
            'points': [p.to_dict() for p in self.points],
            'color': self.color,
            'width': self.width,
            'tool': self.tool,
        }


@dataclass(frozen=True)
class PointerEvent:
    """A begin/move event delivered by a mouse, pen or touch source.

    ``force`` is only meaningful for touch input; when the device does
    not report one the nominal pressure is used.
    """
    client_x: float
    client_y: float
    is_touch: bool = False
    force: Optional[float] = None

    @property
    def pressure(self) -> float:
        if self.is_touch and self.force:
            return _clamp_pressure(self.force)
        return NOMINAL_PRESSURE


@dataclass(frozen=True)
class SurfaceGeometry:
    """Where the surface sits on screen and how large its backing store is.

    ``left``/``top`` is the surface origin in client space,
    ``display_*`` the CSS size it is shown at and ``backing_*`` the
    pixel size of the raster behind it.
    """
    display_width: float
    display_height: float
    backing_width: int
    backing_height: int
    left: float = 0.0
    top: float = 0.0

    @classmethod
    def for_device_pixel_ratio(cls, display_width: float, display_height: float,
                               device_pixel_ratio: float = 1.0,
                               left: float = 0.0, top: float = 0.0) -> 'SurfaceGeometry':
        dpr = device_pixel_ratio or 1.0
        return cls(
            display_width=display_width,
            display_height=display_height,
            backing_width=int(round(display_width * dpr)),
            backing_height=int(round(display_height * dpr)),
            left=left,
            top=top,
        )

    @property
    def scale_x(self) -> float:
        return self.backing_width / self.display_width if self.display_width else 1.0

    @property
    def scale_y(self) -> float:
        return self.backing_height / self.display_height if self.display_height else 1.0

    def to_canvas(self, event: PointerEvent) -> Point:
        return Point(
            x=(event.client_x - self.left) * self.scale_x,
            y=(event.client_y - self.top) * self.scale_y,
            pressure=event.pressure,
        )
