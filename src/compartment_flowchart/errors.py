"""Error taxonomy for model validation and flow routing."""

from __future__ import annotations


class FlowchartError(Exception):
    """Base class for every error raised on account of a model description."""


class ModelError(FlowchartError):
    """The model structure itself is unusable (duplicate names, missing keys, ...)."""


class MalformedFlowTermError(ModelError):
    """A flow term has no leading ``+``/``-`` sign or no expression after it."""

    def __init__(self, term: str, compartment: str | None = None) -> None:
        self.term = term
        self.compartment = compartment
        where = f" in compartment {compartment!r}" if compartment is not None else ""
        super().__init__(f"malformed flow term {term!r}{where}: expected a leading '+' or '-' followed by an expression")


class EmptyModelError(ModelError):
    """The model has no compartments and the caller asked for a non-empty diagram."""


class TopologyError(FlowchartError):
    """A flow expression cannot be drawn as a single two-endpoint arrow.

    Raised for branching flows (the expression occurs in three or more
    compartments) and for two-compartment flows that do not leave one
    compartment and enter the other.
    """

    def __init__(self, expression: str, compartments: list[str], reason: str) -> None:
        self.expression = expression
        self.compartments = list(compartments)
        self.reason = reason
        names = ", ".join(self.compartments)
        super().__init__(f"flow {expression!r} ({reason}): found in {names}")
