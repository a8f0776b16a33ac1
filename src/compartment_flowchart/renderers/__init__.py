"""Drawing surfaces that consume laid-out boxes and routed arrows."""

from compartment_flowchart.renderers.base import DrawingSurface
from compartment_flowchart.renderers.svg import SvgSurface

__all__ = ["DrawingSurface", "SvgSurface"]
