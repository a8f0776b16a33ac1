"""Layout module — grid placement of compartment boxes.

Compartments are tiled row-major onto the unit square:

  - Columns: [0, 1] is cut into ``2 * max_columns`` equal steps; a box takes
    one step and leaves the next one free as a gap.
  - Rows: the band [Y_PLOT_MIN, Y_PLOT_MAX] is cut into ``2 * row_count`` steps
    with the same box/gap alternation. Row 0 is the top row.

Coordinates are unit-square fractions with y growing upward, so a box's
``ymax`` is its top edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ─── Constants ──────────────────────────────────────────────────────────────

MAX_COLUMNS: int = 4  # boxes per row before wrapping
Y_PLOT_MIN: float = 0.2  # bottom of the band that holds the rows
Y_PLOT_MAX: float = 0.8  # top of the band that holds the rows


# ─── Geometry Primitives ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A 2D point in unit-square coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class GridBox:
    """Axis-aligned box of one compartment, in unit-square coordinates."""

    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @property
    def xcenter(self) -> float:
        return (self.xmin + self.xmax) / 2

    @property
    def ycenter(self) -> float:
        return (self.ymin + self.ymax) / 2

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def top_center(self) -> Point:
        return Point(self.xcenter, self.ymax)

    def bottom_center(self) -> Point:
        return Point(self.xcenter, self.ymin)

    def left_center(self) -> Point:
        return Point(self.xmin, self.ycenter)

    def right_center(self) -> Point:
        return Point(self.xmax, self.ycenter)


# ─── Grid Layout ────────────────────────────────────────────────────────────


def row_count(compartment_count: int, max_columns: int = MAX_COLUMNS) -> int:
    """Number of grid rows needed for ``compartment_count`` boxes (ceil division)."""
    return -(-compartment_count // max_columns)


def compute_layout(compartment_count: int, max_columns: int = MAX_COLUMNS) -> list[GridBox]:
    """Compute one GridBox per compartment, in compartment order.

    Pure function of its two arguments. An empty model yields an empty list;
    a partially filled last row simply stops at the last compartment.

    Raises ValueError for a negative count or ``max_columns < 1``.
    """
    if compartment_count < 0:
        raise ValueError(f"compartment_count must be >= 0, got {compartment_count}")
    if max_columns < 1:
        raise ValueError(f"max_columns must be >= 1, got {max_columns}")
    if compartment_count == 0:
        return []

    rows = row_count(compartment_count, max_columns)
    x_step = 1.0 / (2 * max_columns)
    y_step = (Y_PLOT_MAX - Y_PLOT_MIN) / (2 * rows)

    boxes: list[GridBox] = []
    for index in range(compartment_count):
        row, col = divmod(index, max_columns)
        boxes.append(
            GridBox(
                xmin=(2 * col) * x_step,
                xmax=(2 * col + 1) * x_step,
                ymin=Y_PLOT_MAX - (2 * row + 1) * y_step,
                ymax=Y_PLOT_MAX - (2 * row) * y_step,
            )
        )

    logger.debug("laid out %d boxes on a %dx%d grid", compartment_count, rows, max_columns)
    return boxes
