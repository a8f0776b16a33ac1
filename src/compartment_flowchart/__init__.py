"""Flow diagrams for compartmental models: grid layout plus flow routing."""

from compartment_flowchart.api import Diagram, build_diagram, draw_diagram, render_svg
from compartment_flowchart.errors import (
    EmptyModelError,
    FlowchartError,
    MalformedFlowTermError,
    ModelError,
    TopologyError,
)
from compartment_flowchart.layout import GridBox, Point, compute_layout
from compartment_flowchart.model import Compartment, FlowTerm, Model, model_from_dict, parse_flow_term
from compartment_flowchart.routing import (
    ArrowDescriptor,
    Connector,
    ExternalInflow,
    ExternalOutflow,
    SelfLoopCurve,
    route_flows,
)

__all__ = [
    "ArrowDescriptor",
    "Compartment",
    "Connector",
    "Diagram",
    "EmptyModelError",
    "ExternalInflow",
    "ExternalOutflow",
    "FlowTerm",
    "FlowchartError",
    "GridBox",
    "MalformedFlowTermError",
    "Model",
    "ModelError",
    "Point",
    "SelfLoopCurve",
    "TopologyError",
    "build_diagram",
    "compute_layout",
    "draw_diagram",
    "model_from_dict",
    "parse_flow_term",
    "render_svg",
    "route_flows",
]
