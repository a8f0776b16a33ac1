"""Model IR — compartments and their signed flow terms.

A model is an ordered sequence of compartments. Each compartment owns the
terms of its net-flow equation as raw strings such as ``"-b*S*I"``; the sign
says whether the term is added to or subtracted from the compartment's rate of
change. Terms are parsed lazily so a malformed term is reported together with
the compartment it belongs to.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from compartment_flowchart.errors import MalformedFlowTermError, ModelError

SIGNS = ("+", "-")


# ─── Flow Terms ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FlowTerm:
    """A parsed flow term: its sign and the normalized expression.

    Two terms from different compartments describe the same flow iff their
    expressions are textually identical.
    """

    sign: str
    expression: str

    @property
    def is_positive(self) -> bool:
        return self.sign == "+"

    def __str__(self) -> str:
        return f"{self.sign}{self.expression}"


def parse_flow_term(text: str, compartment: str | None = None) -> FlowTerm:
    """Split ``text`` into its leading sign and the remaining expression.

    Surrounding whitespace is ignored on both the term and the expression.
    Raises MalformedFlowTermError if the sign is missing or nothing follows it.
    """
    if not isinstance(text, str):
        raise MalformedFlowTermError(repr(text), compartment)
    stripped = text.strip()
    if not stripped or stripped[0] not in SIGNS:
        raise MalformedFlowTermError(text, compartment)
    expression = stripped[1:].strip()
    if not expression:
        raise MalformedFlowTermError(text, compartment)
    return FlowTerm(sign=stripped[0], expression=expression)


# ─── Compartments & Model ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Compartment:
    """One state variable of the model, drawn as a single box."""

    name: str
    label: str = ""
    flows: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence of terms but store an immutable copy.
        object.__setattr__(self, "flows", tuple(self.flows))
        if not self.label:
            object.__setattr__(self, "label", self.name)

    def flow_terms(self) -> list[FlowTerm]:
        """Parse every flow term of this compartment, in declaration order."""
        return [parse_flow_term(term, self.name) for term in self.flows]


@dataclass(frozen=True)
class Model:
    """An ordered, read-only collection of compartments with unique names."""

    compartments: tuple[Compartment, ...]
    title: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "compartments", tuple(self.compartments))
        seen: set[str] = set()
        for comp in self.compartments:
            if not comp.name:
                raise ModelError("compartment names must be non-empty")
            if comp.name in seen:
                raise ModelError(f"duplicate compartment name {comp.name!r}")
            seen.add(comp.name)

    def __len__(self) -> int:
        return len(self.compartments)

    def __iter__(self) -> Iterator[Compartment]:
        return iter(self.compartments)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.compartments]

    def index_of(self, name: str) -> int:
        """Position of the compartment called ``name``; KeyError if absent."""
        for idx, comp in enumerate(self.compartments):
            if comp.name == name:
                return idx
        raise KeyError(name)


def model_from_dict(data: Mapping[str, Any]) -> Model:
    """Build a Model from the modelbuilder-style in-memory structure.

    Expected shape::

        {"title": "SIR", "var": [{"varname": "S", "vartext": "Susceptible",
                                  "flows": ["-b*S*I"]}, ...]}

    ``vartext`` and ``flows`` are optional per variable.
    """
    if "var" not in data:
        raise ModelError("model description has no 'var' entry")
    variables = data["var"]
    if isinstance(variables, (str, bytes)) or not isinstance(variables, Sequence):
        raise ModelError("'var' must be a sequence of variable descriptions")

    compartments: list[Compartment] = []
    for pos, var in enumerate(variables):
        if not isinstance(var, Mapping) or "varname" not in var:
            raise ModelError(f"variable #{pos + 1} has no 'varname'")
        flows = var.get("flows") or ()
        if isinstance(flows, str):
            flows = (flows,)
        compartments.append(
            Compartment(
                name=str(var["varname"]),
                label=str(var.get("vartext") or ""),
                flows=tuple(flows),
            )
        )
    return Model(compartments=tuple(compartments), title=str(data.get("title") or ""))
