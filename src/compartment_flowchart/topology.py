"""Topology resolution — infer the flow graph from matching term text.

Flows are not declared as edges; a transfer from S to I is written as
``-b*S*I`` in S and ``+b*S*I`` in I. This module turns those textual matches
into an explicit graph before any geometry is computed:

  1. Occurrence graph: bipartite DiGraph, expression → compartments it appears in.
  2. Validation: an expression may reach at most two compartments, and a
     two-compartment expression must leave one and enter the other.
  3. Flow graph: MultiDiGraph over compartment names (plus source/sink
     sentinels for the outside world), one edge per drawable flow.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from dataclasses import dataclass

import networkx as nx

from compartment_flowchart.errors import TopologyError
from compartment_flowchart.model import FlowTerm, Model

logger = logging.getLogger(__name__)

# Sentinel node ids for flows that enter from / leave to the unmodeled world.
SOURCE_PREFIX = "__source_"
SINK_PREFIX = "__sink_"

TERM = "term"
COMPARTMENT = "compartment"


class FlowKind(enum.Enum):
    GROWTH = "growth"
    INFLOW = "inflow"
    OUTFLOW = "outflow"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class ResolvedFlow:
    """One drawable flow, as stored on a flow-graph edge."""

    kind: FlowKind
    expression: str
    source: str  # compartment name or source sentinel
    target: str  # compartment name or sink sentinel
    order: tuple[int, int]  # (compartment index, term index) of the owning term


@dataclass
class FlowTopology:
    """Validated flow graph of a model.

    Attributes:
        graph: MultiDiGraph; compartment nodes carry ``index`` and ``label``,
            sentinel nodes carry ``external=True``. Every edge carries a
            ``flow`` attribute holding its ResolvedFlow.
        occurrences: the bipartite expression → compartment graph it was
            resolved from.
    """

    graph: nx.MultiDiGraph
    occurrences: nx.DiGraph

    def flows(self) -> Iterator[ResolvedFlow]:
        """Yield resolved flows in compartment order, then term order."""
        resolved = [attrs["flow"] for _, _, attrs in self.graph.edges(data=True)]
        yield from sorted(resolved, key=lambda f: f.order)

    def flows_of_kind(self, kind: FlowKind) -> list[ResolvedFlow]:
        return [f for f in self.flows() if f.kind is kind]


def is_external(node_id: str) -> bool:
    return node_id.startswith(SOURCE_PREFIX) or node_id.startswith(SINK_PREFIX)


# ─── Occurrence Graph ─────────────────────────────────────────────────────────


def parse_model_terms(model: Model) -> list[list[FlowTerm]]:
    """Parse all flow terms up front so malformed text fails before any matching."""
    return [comp.flow_terms() for comp in model.compartments]


def build_occurrence_graph(model: Model, terms: list[list[FlowTerm]] | None = None) -> nx.DiGraph:
    """Build the bipartite expression → compartment occurrence graph.

    Nodes are ``("term", expression)`` and ``("compartment", index)`` tuples so
    an expression can never collide with a compartment name. Each edge keeps
    the list of signs the expression carries in that compartment.
    """
    if terms is None:
        terms = parse_model_terms(model)

    g: nx.DiGraph = nx.DiGraph()
    for idx, comp in enumerate(model.compartments):
        g.add_node((COMPARTMENT, idx), name=comp.name)

    for idx, comp_terms in enumerate(terms):
        for term in comp_terms:
            term_node = (TERM, term.expression)
            if term_node not in g:
                g.add_node(term_node, expression=term.expression)
            comp_node = (COMPARTMENT, idx)
            if g.has_edge(term_node, comp_node):
                g.edges[term_node, comp_node]["signs"].append(term.sign)
            else:
                g.add_edge(term_node, comp_node, signs=[term.sign])
    return g


def matching_compartments(occurrences: nx.DiGraph, expression: str) -> list[int]:
    """Indices of all compartments whose terms contain ``expression``, ascending."""
    term_node = (TERM, expression)
    if term_node not in occurrences:
        return []
    return sorted(idx for _, idx in occurrences.successors(term_node))


def validate_occurrences(occurrences: nx.DiGraph, model: Model) -> None:
    """Reject expressions that cannot be drawn as a single two-endpoint arrow.

    Raises TopologyError on the first offending expression, in order of first
    appearance in the model.
    """
    for node in occurrences.nodes:
        if node[0] != TERM:
            continue
        expression = node[1]
        matches = matching_compartments(occurrences, expression)
        names = [model.compartments[i].name for i in matches]

        if occurrences.out_degree(node) > 2:
            raise TopologyError(expression, names, "branching flows are not supported")

        if len(matches) == 2:
            # Each side must list the expression exactly once.
            signs = [occurrences.edges[node, (COMPARTMENT, i)]["signs"] for i in matches]
            if sorted(signs) != [["+"], ["-"]]:
                raise TopologyError(
                    expression,
                    names,
                    "a shared flow must be subtracted in one compartment and added in the other",
                )


# ─── Flow Graph ───────────────────────────────────────────────────────────────


def is_growth_term(term: FlowTerm, compartment_name: str) -> bool:
    """Growth terms feed a compartment from itself: positive and referencing its name."""
    return term.is_positive and compartment_name in term.expression


def resolve_topology(model: Model) -> FlowTopology:
    """Classify every flow term of ``model`` and build the validated flow graph.

    Raises MalformedFlowTermError or TopologyError before any edge is produced.
    """
    terms = parse_model_terms(model)
    occurrences = build_occurrence_graph(model, terms)
    validate_occurrences(occurrences, model)

    graph: nx.MultiDiGraph = nx.MultiDiGraph()
    for idx, comp in enumerate(model.compartments):
        graph.add_node(comp.name, index=idx, label=comp.label)

    for idx, comp_terms in enumerate(terms):
        name = model.compartments[idx].name
        for term_idx, term in enumerate(comp_terms):
            order = (idx, term_idx)
            matches = matching_compartments(occurrences, term.expression)

            if len(matches) == 1:
                if is_growth_term(term, name):
                    flow = ResolvedFlow(FlowKind.GROWTH, term.expression, name, name, order)
                elif term.is_positive:
                    source = f"{SOURCE_PREFIX}{idx}_{term_idx}"
                    graph.add_node(source, external=True)
                    flow = ResolvedFlow(FlowKind.INFLOW, term.expression, source, name, order)
                else:
                    sink = f"{SINK_PREFIX}{idx}_{term_idx}"
                    graph.add_node(sink, external=True)
                    flow = ResolvedFlow(FlowKind.OUTFLOW, term.expression, name, sink, order)
            elif term.is_positive:
                # The subtracting side owns the transfer edge.
                continue
            else:
                other = next(j for j in matches if j != idx)
                target = model.compartments[other].name
                flow = ResolvedFlow(FlowKind.TRANSFER, term.expression, name, target, order)

            graph.add_edge(flow.source, flow.target, flow=flow)

    if graph.number_of_edges() == 0 and len(model) > 0:
        logger.warning("model %r has compartments but no drawable flows", model.title or "<untitled>")
    logger.debug(
        "resolved %d flows across %d compartments",
        graph.number_of_edges(),
        len(model),
    )
    return FlowTopology(graph=graph, occurrences=occurrences)
