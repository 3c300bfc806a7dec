"""
Freehand annotation engine used to digitise handwritten prescriptions.

The engine owns one drawing surface (a Pillow image) and the drawing
session behind it: the committed strokes plus undo and redo stacks of
stroke batches.  It is a two-state machine::

    Idle --begin_stroke--> Drawing --extend_stroke--> Drawing
    Drawing --end_stroke--> Idle

``clear``, ``undo`` and ``redo`` are accepted in either state.  Nothing
here raises on user input: calls that have nothing to act on (undo with
an empty stack, a tap with a single point, input while disabled) are
no-ops.

The committed list is always the in-order concatenation of the batches
on the undo stack, so every re-render is a full replay of that list on
a freshly filled background.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Iterable, Optional

from PIL import Image, ImageDraw

from . import raster
from .strokes import Point, PointerEvent, Stroke, SurfaceGeometry, TOOL_PEN, TOOLS

logger = logging.getLogger(__name__)

IDLE = 'idle'
DRAWING = 'drawing'

StrokeListener = Callable[[Stroke], None]
CanvasListener = Callable[[str], None]


class AnnotationEngine:
    def __init__(self, width: int = 800, height: int = 600, *, background: str = '#FFFFFF',
                 color: str = '#000000', stroke_width: float = 2.0, tool: str = TOOL_PEN,
                 geometry: Optional[SurfaceGeometry] = None,
                 on_stroke_committed: Optional[StrokeListener] = None,
                 on_canvas_change: Optional[CanvasListener] = None) -> None:
        self.width = int(width)
        self.height = int(height)
        self.background = background
        self._color = '#000000'
        self._stroke_width = 2.0
        self._tool = TOOL_PEN
        self.color = color
        self.stroke_width = stroke_width
        self.tool = tool
        self.disabled = False
        self.geometry = geometry or SurfaceGeometry(self.width, self.height, self.width, self.height)
        self.on_stroke_committed = on_stroke_committed
        self.on_canvas_change = on_canvas_change

        self.state = IDLE
        self.committed_strokes: list[Stroke] = []
        self.undo_stack: list[tuple[Stroke, ...]] = []
        self.redo_stack: list[tuple[Stroke, ...]] = []
        self._buffer: list[Point] = []
        self._pen: Optional[Stroke] = None
        self._base: Optional[Image.Image] = None
        self._surface = raster.new_surface(self.width, self.height, background)

    # ------------------------------------------------------------------
    # Pen settings (invalid values are ignored)
    # ------------------------------------------------------------------
    @property
    def color(self) -> str:
        return self._color

    @color.setter
    def color(self, value: str) -> None:
        if isinstance(value, str) and raster.is_valid_color(value):
            self._color = value

    @property
    def stroke_width(self) -> float:
        return self._stroke_width

    @stroke_width.setter
    def stroke_width(self, value: float) -> None:
        try:
            value = float(value)
        except (TypeError, ValueError):
            return
        if value > 0:
            self._stroke_width = value

    @property
    def tool(self) -> str:
        return self._tool

    @tool.setter
    def tool(self, value: str) -> None:
        if value in TOOLS:
            self._tool = value

    # ------------------------------------------------------------------
    # Gesture lifecycle
    # ------------------------------------------------------------------
    def begin_stroke(self, point: Point) -> None:
        if self.disabled or self.state == DRAWING:
            return
        # A new gesture invalidates anything that could be redone.
        self.redo_stack.clear()
        self._buffer = [point]
        # Settings are fixed for the duration of the gesture.
        self._pen = Stroke(points=(point,), color=self.color, width=self.stroke_width, tool=self.tool)
        self.state = DRAWING

    def extend_stroke(self, point: Point) -> None:
        if self.disabled or self.state != DRAWING:
            return
        previous = self._buffer[-1]
        self._buffer.append(point)
        draw = ImageDraw.Draw(self._surface)
        raster.draw_segment(draw, previous, point,
                            self._pen.render_color(self.background), self._pen.render_width())

    def end_stroke(self) -> Optional[Stroke]:
        if self.state != DRAWING:
            return None
        points, self._buffer = self._buffer, []
        pen, self._pen = self._pen, None
        self.state = IDLE
        if len(points) < 2:
            return None
        stroke = Stroke(points=tuple(points), color=pen.color, width=pen.width,
                        tool=pen.tool, timestamp=time.monotonic())
        self._commit((stroke,))
        if self.on_stroke_committed is not None:
            self.on_stroke_committed(stroke)
        self._notify()
        return stroke

    # Pointer adapters --------------------------------------------------
    def pointer_down(self, event: PointerEvent) -> None:
        self.begin_stroke(self.geometry.to_canvas(event))

    def pointer_move(self, event: PointerEvent) -> None:
        self.extend_stroke(self.geometry.to_canvas(event))

    def pointer_up(self) -> Optional[Stroke]:
        return self.end_stroke()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def undo(self) -> None:
        if not self.undo_stack:
            return
        batch = self.undo_stack.pop()
        del self.committed_strokes[len(self.committed_strokes) - len(batch):]
        self.redo_stack.append(batch)
        self._render()
        self._notify()

    def redo(self) -> None:
        if not self.redo_stack:
            return
        batch = self.redo_stack.pop()
        self.committed_strokes.extend(batch)
        self.undo_stack.append(batch)
        self._render()
        self._notify()

    def clear(self) -> None:
        self._buffer = []
        self._pen = None
        self.state = IDLE
        self.committed_strokes.clear()
        self.undo_stack.clear()
        self.redo_stack.clear()
        self._base = None
        self._render()
        if self.on_canvas_change is not None:
            self.on_canvas_change(raster.EMPTY_PAYLOAD)

    def replay(self, strokes: Iterable[Stroke]) -> None:
        """Commit already-captured strokes as if they had been drawn now."""
        committed = 0
        for stroke in strokes:
            if self.disabled or len(stroke.points) < 2:
                continue
            committed += 1
            self.redo_stack.clear()
            raster.draw_stroke(self._surface, stroke, self.background)
            self._commit((stroke,))
            if self.on_stroke_committed is not None:
                self.on_stroke_committed(stroke)
        if committed:
            self._notify()

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------
    @property
    def is_blank(self) -> bool:
        return not self.committed_strokes and self._base is None

    def snapshot(self) -> str:
        if self.is_blank:
            return raster.EMPTY_PAYLOAD
        return raster.encode_payload(self._surface)

    def restore(self, payload: str) -> None:
        """Repaint from an exported payload.

        The restored raster becomes the base layer under any strokes
        drawn afterwards; per-stroke history is not recoverable from a
        raster so the stacks start empty.
        """
        if not payload:
            return
        try:
            image = raster.decode_payload(payload)
        except ValueError:
            logger.warning('ignoring undecodable canvas payload (%d chars)', len(payload))
            return
        self._buffer = []
        self._pen = None
        self.state = IDLE
        self.committed_strokes.clear()
        self.undo_stack.clear()
        self.redo_stack.clear()
        self._base = image
        self._render()
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _commit(self, batch: tuple[Stroke, ...]) -> None:
        self.undo_stack.append(batch)
        self.committed_strokes.extend(batch)

    def _render(self) -> None:
        self._surface = raster.render(self.width, self.height, self.committed_strokes,
                                      self.background, base=self._base)
        # A gesture still in progress stays on top of the replayed history
        if self.state == DRAWING and len(self._buffer) >= 2:
            raster.draw_stroke(self._surface, replace(self._pen, points=tuple(self._buffer)), self.background)

    def _notify(self) -> None:
        if self.on_canvas_change is not None:
            self.on_canvas_change(self.snapshot())

    @property
    def surface(self) -> Image.Image:
        return self._surface
