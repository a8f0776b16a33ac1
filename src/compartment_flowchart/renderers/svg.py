"""SVG drawing surface — renders boxes and arrows to an SVG string."""

from __future__ import annotations

from compartment_flowchart.layout import GridBox, Point
from compartment_flowchart.routing import curve_control_point

# ─── Constants ──────────────────────────────────────────────────────────────

CANVAS_WIDTH = 800  # pixels spanned by the unit interval on x
CANVAS_HEIGHT = 600  # pixels spanned by the unit interval on y
PADDING = 20  # canvas padding in pixels
FONT_SIZE = 14
FONT_FAMILY = "sans-serif"

_FILL_STROKE = 'fill="white" stroke="black" stroke-width="1.5"'
_LINE_STROKE = 'fill="none" stroke="black" stroke-width="1.5" stroke-linejoin="miter"'
_MARKER_ID = "arrowhead"


def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _font(size: int = FONT_SIZE) -> str:
    return f'font-family="{FONT_FAMILY}" font-size="{size}"'


def _fmt(v: float) -> str:
    """Pixel value with at most two decimals and no trailing zeros."""
    text = f"{v:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


# ─── Coordinate Helpers ─────────────────────────────────────────────────────


def _px(x: float) -> float:
    return PADDING + x * CANVAS_WIDTH


def _py(y: float) -> float:
    # Unit-square y grows upward, SVG y grows downward.
    return PADDING + (1.0 - y) * CANVAS_HEIGHT


def _pt(p: Point) -> str:
    return f"{_fmt(_px(p.x))},{_fmt(_py(p.y))}"


# ─── Public Surface ─────────────────────────────────────────────────────────


class SvgSurface:
    """DrawingSurface that accumulates SVG elements; call to_svg() when done."""

    def __init__(self, title: str = "") -> None:
        self.title = title
        self._shapes: list[str] = []
        self._arrows: list[str] = []

    def rectangle(self, box: GridBox, label: str) -> None:
        x, y = _px(box.xmin), _py(box.ymax)
        w, h = box.width * CANVAS_WIDTH, box.height * CANVAS_HEIGHT
        cx, cy = _px(box.xcenter), _py(box.ycenter)
        lines = _escape(label).split("\n")
        font = _font()

        if len(lines) == 1:
            label_svg = (
                f'<text x="{_fmt(cx)}" y="{_fmt(cy)}" dominant-baseline="central" '
                f'text-anchor="middle" {font}>{lines[0]}</text>'
            )
        else:
            total_h = len(lines) * (FONT_SIZE + 2)
            start_y = cy - total_h / 2 + FONT_SIZE / 2
            tspans = "".join(
                f'<tspan x="{_fmt(cx)}" y="{_fmt(start_y + i * (FONT_SIZE + 2))}">{line}</tspan>'
                for i, line in enumerate(lines)
            )
            label_svg = f'<text text-anchor="middle" {font}>{tspans}</text>'

        rect_svg = f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(w)}" height="{_fmt(h)}" {_FILL_STROKE}/>'
        self._shapes.append(f"{rect_svg}\n{label_svg}")

    def straight_arrow(self, start: Point, end: Point) -> None:
        self._arrows.append(
            f'<line x1="{_fmt(_px(start.x))}" y1="{_fmt(_py(start.y))}" '
            f'x2="{_fmt(_px(end.x))}" y2="{_fmt(_py(end.y))}" '
            f'{_LINE_STROKE} marker-end="url(#{_MARKER_ID})"/>'
        )

    def curved_arrow(self, start: Point, end: Point, curvature: float) -> None:
        control = curve_control_point(start, end, curvature)
        d = f"M {_pt(start)} Q {_pt(control)} {_pt(end)}"
        self._arrows.append(f'<path d="{d}" {_LINE_STROKE} marker-end="url(#{_MARKER_ID})"/>')

    def to_svg(self) -> str:
        svg_w = PADDING * 2 + CANVAS_WIDTH
        svg_h = PADDING * 2 + CANVAS_HEIGHT
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{svg_w}" height="{svg_h}" viewBox="0 0 {svg_w} {svg_h}">',
        ]
        if self.title:
            parts.append(f"<title>{_escape(self.title)}</title>")
        parts.extend(
            [
                "<defs>",
                f'  <marker id="{_MARKER_ID}" markerWidth="10" markerHeight="7" refX="10" refY="3.5" orient="auto">',
                '    <polygon points="0 0, 10 3.5, 0 7" fill="black"/>',
                "  </marker>",
                "</defs>",
                f'<rect width="{svg_w}" height="{svg_h}" fill="white"/>',
            ]
        )
        # Boxes first, arrows on top so arrowheads stay visible at box edges.
        parts.extend(self._shapes)
        parts.extend(self._arrows)
        parts.append("</svg>")
        return "\n".join(parts)
