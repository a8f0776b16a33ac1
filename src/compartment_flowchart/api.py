"""Public entry points — layout, routing and drawing in one place."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from compartment_flowchart.errors import EmptyModelError
from compartment_flowchart.layout import MAX_COLUMNS, GridBox, compute_layout
from compartment_flowchart.model import Model
from compartment_flowchart.renderers.base import DrawingSurface
from compartment_flowchart.renderers.svg import SvgSurface
from compartment_flowchart.routing import ArrowDescriptor, route_flows

logger = logging.getLogger(__name__)


@dataclass
class Diagram:
    """Everything a drawing surface needs: labelled boxes and arrows."""

    boxes: list[GridBox]
    labels: list[str]
    arrows: list[ArrowDescriptor] = field(default_factory=list)
    title: str = ""


def build_diagram(model: Model, max_columns: int = MAX_COLUMNS) -> Diagram:
    """Lay out the compartments of ``model`` and route all of its flows."""
    boxes = compute_layout(len(model), max_columns)
    arrows = route_flows(model, boxes)
    return Diagram(
        boxes=boxes,
        labels=[c.label for c in model.compartments],
        arrows=arrows,
        title=model.title,
    )


def draw_diagram(diagram: Diagram, surface: DrawingSurface) -> None:
    """Issue draw commands for ``diagram``: boxes first, then arrows."""
    for box, label in zip(diagram.boxes, diagram.labels):
        surface.rectangle(box, label)
    for arrow in diagram.arrows:
        if arrow.curved:
            surface.curved_arrow(arrow.start, arrow.end, arrow.curvature)
        else:
            surface.straight_arrow(arrow.start, arrow.end)


def render_svg(model: Model, max_columns: int = MAX_COLUMNS, allow_empty: bool = True) -> str:
    """Render ``model`` as a flow diagram and return the SVG document."""
    if not len(model) and not allow_empty:
        raise EmptyModelError("model has no compartments")
    diagram = build_diagram(model, max_columns)
    logger.debug("rendering %d boxes and %d arrows to SVG", len(diagram.boxes), len(diagram.arrows))
    surface = SvgSurface(title=diagram.title)
    draw_diagram(diagram, surface)
    return surface.to_svg()
