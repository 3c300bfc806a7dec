"""
Rebuild a drawing session from request data.

Clients either send the strokes they captured (canvas-space points) or
an already flattened payload, e.g. when re-saving a prescription that
was loaded for viewing.  Both end up in an :class:`AnnotationEngine`
configured from the ``CANVAS_*`` settings.
"""
from typing import Iterable, Optional

from django.conf import settings

from registry.drawing import AnnotationEngine, Point, Stroke


def new_engine(**kwargs) -> AnnotationEngine:
    options = {
        'background': settings.CANVAS_BACKGROUND,
        'color': settings.CANVAS_STROKE_COLOR,
        'stroke_width': settings.CANVAS_STROKE_WIDTH,
    }
    options.update(kwargs)
    return AnnotationEngine(settings.CANVAS_WIDTH, settings.CANVAS_HEIGHT, **options)


def stroke_from_dict(data: dict) -> Stroke:
    return Stroke(
        points=tuple(Point(p['x'], p['y'], p.get('pressure')) for p in data['points']),
        color=data.get('color') or settings.CANVAS_STROKE_COLOR,
        width=data.get('width') or settings.CANVAS_STROKE_WIDTH,
        tool=data.get('tool') or 'pen',
    )


def build_session(strokes: Optional[Iterable[dict]] = None, canvas: Optional[str] = None) -> Optional[AnnotationEngine]:
    """``None`` when the request said nothing about the drawing."""
    if strokes is None and canvas is None:
        return None
    engine = new_engine()
    if canvas:
        engine.restore(canvas)
    if strokes:
        engine.replay(stroke_from_dict(s) for s in strokes)
    return engine
