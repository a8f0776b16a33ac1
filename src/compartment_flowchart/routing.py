"""Flow routing — turn resolved flows into arrow geometry.

Every drawable flow becomes exactly one arrow descriptor:

  - GROWTH   → SelfLoopCurve:   small arc sitting on the top edge of the box.
  - INFLOW   → ExternalInflow:  vertical arrow dropping onto the top edge.
  - OUTFLOW  → ExternalOutflow: vertical arrow leaving the bottom edge.
  - TRANSFER → Connector:       straight between index-adjacent boxes, curved
                                over the top of the row otherwise.

Descriptors are frozen values; route_flows builds and returns a fresh list
on every call and never touches shared state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from compartment_flowchart.layout import GridBox, Point
from compartment_flowchart.model import Model
from compartment_flowchart.topology import FlowKind, FlowTopology, resolve_topology

logger = logging.getLogger(__name__)

# ─── Constants ──────────────────────────────────────────────────────────────

EXTERNAL_ARROW_LENGTH: float = 0.1  # length of inflow/outflow stubs
SELF_LOOP_CURVATURE: float = 1.0  # control offset as a fraction of the chord
CONNECTOR_CURVATURE: float = 0.5


# ─── Arrow Descriptors ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SelfLoopCurve:
    """Growth term: an arc from 25% to 75% of the box width on its top edge."""

    compartment: str
    box: GridBox
    expression: str
    start: Point
    end: Point
    curvature: float = SELF_LOOP_CURVATURE

    curved: ClassVar[bool] = True


@dataclass(frozen=True)
class ExternalInflow:
    """Flow entering from outside the model, arriving at the top edge."""

    compartment: str
    box: GridBox
    expression: str
    start: Point
    end: Point

    curved: ClassVar[bool] = False
    curvature: ClassVar[float] = 0.0


@dataclass(frozen=True)
class ExternalOutflow:
    """Flow leaving the model, departing from the bottom edge."""

    compartment: str
    box: GridBox
    expression: str
    start: Point
    end: Point

    curved: ClassVar[bool] = False
    curvature: ClassVar[float] = 0.0


@dataclass(frozen=True)
class Connector:
    """Transfer between two compartments, from the subtracting to the adding one."""

    source: str
    target: str
    from_box: GridBox
    to_box: GridBox
    expression: str
    start: Point
    end: Point
    curved: bool = False
    curvature: float = 0.0


ArrowDescriptor = Union[SelfLoopCurve, ExternalInflow, ExternalOutflow, Connector]


# ─── Geometry Helpers ───────────────────────────────────────────────────────


def curve_control_point(start: Point, end: Point, curvature: float) -> Point:
    """Control point of the quadratic curve from ``start`` to ``end``.

    The point sits on the left normal of the chord (seen walking from start to
    end), at ``curvature * chord_length`` from the chord midpoint. A positive
    curvature therefore bends a left-to-right curve upward.
    """
    mx = (start.x + end.x) / 2
    my = (start.y + end.y) / 2
    dx = end.x - start.x
    dy = end.y - start.y
    return Point(x=mx - curvature * dy, y=my + curvature * dx)


def self_loop_endpoints(box: GridBox) -> tuple[Point, Point]:
    quarter = box.width / 4
    return Point(box.xmin + quarter, box.ymax), Point(box.xmin + 3 * quarter, box.ymax)


def connector_geometry(
    src_idx: int,
    tgt_idx: int,
    from_box: GridBox,
    to_box: GridBox,
) -> tuple[Point, Point, bool, float]:
    """Return (start, end, curved, curvature) for a transfer between two boxes.

    Index-adjacent compartments get a straight arrow between facing side
    edges. Non-adjacent boxes in one row arc from top centre to top centre,
    bending upward so the curve clears the boxes in between. Boxes in
    different rows are joined through the gap between them: from the facing
    horizontal edges, with the bend kept small enough that the control point
    stays inside that gap.
    """
    if abs(src_idx - tgt_idx) == 1:
        if tgt_idx > src_idx:
            return from_box.right_center(), to_box.left_center(), False, 0.0
        return from_box.left_center(), to_box.right_center(), False, 0.0

    if from_box.ymin >= to_box.ymax:
        start, end = from_box.bottom_center(), to_box.top_center()
    elif to_box.ymin >= from_box.ymax:
        start, end = from_box.top_center(), to_box.bottom_center()
    else:
        start = from_box.top_center()
        end = to_box.top_center()
        curvature = CONNECTOR_CURVATURE if end.x >= start.x else -CONNECTOR_CURVATURE
        return start, end, True, curvature

    # control y = mid_y + curvature * dx; it must not leave the gap.
    dx = abs(end.x - start.x)
    dy = abs(end.y - start.y)
    curvature = CONNECTOR_CURVATURE if dx == 0 else min(CONNECTOR_CURVATURE, dy / (2 * dx))
    return start, end, True, curvature


# ─── Routing ────────────────────────────────────────────────────────────────


def route_topology(topology: FlowTopology, boxes: list[GridBox]) -> list[ArrowDescriptor]:
    """Produce arrow descriptors for an already-validated flow graph."""
    graph = topology.graph
    arrows: list[ArrowDescriptor] = []

    for flow in topology.flows():
        if flow.kind is FlowKind.GROWTH:
            box = boxes[graph.nodes[flow.source]["index"]]
            start, end = self_loop_endpoints(box)
            arrows.append(SelfLoopCurve(flow.source, box, flow.expression, start, end))

        elif flow.kind is FlowKind.INFLOW:
            box = boxes[graph.nodes[flow.target]["index"]]
            arrows.append(
                ExternalInflow(
                    compartment=flow.target,
                    box=box,
                    expression=flow.expression,
                    start=Point(box.xcenter, box.ymax + EXTERNAL_ARROW_LENGTH),
                    end=Point(box.xcenter, box.ymax),
                )
            )

        elif flow.kind is FlowKind.OUTFLOW:
            box = boxes[graph.nodes[flow.source]["index"]]
            arrows.append(
                ExternalOutflow(
                    compartment=flow.source,
                    box=box,
                    expression=flow.expression,
                    start=Point(box.xcenter, box.ymin),
                    end=Point(box.xcenter, box.ymin - EXTERNAL_ARROW_LENGTH),
                )
            )

        else:
            src_idx = graph.nodes[flow.source]["index"]
            tgt_idx = graph.nodes[flow.target]["index"]
            from_box, to_box = boxes[src_idx], boxes[tgt_idx]
            start, end, curved, curvature = connector_geometry(src_idx, tgt_idx, from_box, to_box)
            arrows.append(
                Connector(
                    source=flow.source,
                    target=flow.target,
                    from_box=from_box,
                    to_box=to_box,
                    expression=flow.expression,
                    start=start,
                    end=end,
                    curved=curved,
                    curvature=curvature,
                )
            )

    return arrows


def route_flows(model: Model, boxes: list[GridBox]) -> list[ArrowDescriptor]:
    """Classify every flow term of ``model`` and route it against ``boxes``.

    ``boxes`` must be index-aligned with ``model.compartments`` (as returned by
    compute_layout). Arrows come out in compartment order, then term order.

    Raises:
        ValueError: if the box count does not match the compartment count.
        MalformedFlowTermError: if a term has no leading sign.
        TopologyError: for branching or inconsistent shared flows; no arrows
            are returned in that case.
    """
    if len(boxes) != len(model):
        raise ValueError(f"got {len(boxes)} boxes for {len(model)} compartments")

    topology = resolve_topology(model)
    arrows = route_topology(topology, boxes)

    if logger.isEnabledFor(logging.DEBUG):
        curved = sum(1 for a in arrows if a.curved)
        logger.debug("routed %d arrows (%d curved)", len(arrows), curved)
    return arrows
