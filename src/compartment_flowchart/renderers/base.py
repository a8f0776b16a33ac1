"""Base drawing-surface protocol."""

from __future__ import annotations

from typing import Protocol

from compartment_flowchart.layout import GridBox, Point


class DrawingSurface(Protocol):
    """Protocol that every drawing backend must implement.

    All coordinates are unit-square fractions with y growing upward.
    """

    def rectangle(self, box: GridBox, label: str) -> None:
        """Draw a compartment box with its label centred inside."""
        ...

    def straight_arrow(self, start: Point, end: Point) -> None:
        """Draw a straight line from ``start`` with an arrowhead at ``end``."""
        ...

    def curved_arrow(self, start: Point, end: Point, curvature: float) -> None:
        """Draw a curve from ``start`` with an arrowhead at ``end``.

        ``curvature`` follows routing.curve_control_point: positive bends to
        the left of the direction of travel.
        """
        ...
