"""Tests for topology.py — occurrence graph, validation and flow classification."""

from __future__ import annotations

import networkx as nx
import pytest

from compartment_flowchart.errors import MalformedFlowTermError, TopologyError
from compartment_flowchart.model import Compartment, FlowTerm, Model
from compartment_flowchart.topology import (
    COMPARTMENT,
    SINK_PREFIX,
    SOURCE_PREFIX,
    TERM,
    FlowKind,
    build_occurrence_graph,
    is_external,
    is_growth_term,
    matching_compartments,
    resolve_topology,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_model(*specs: tuple[str, list[str]]) -> Model:
    """Build a Model from (name, flow terms) pairs."""
    return Model(compartments=tuple(Compartment(name=name, flows=tuple(flows)) for name, flows in specs))


def sir_model() -> Model:
    return make_model(("S", ["-bSI"]), ("I", ["+bSI", "-gI"]), ("R", ["+gI"]))


# ─── Occurrence Graph Tests ───────────────────────────────────────────────────


class TestOccurrenceGraph:
    def test_bipartite_nodes(self):
        """One node per compartment and one per distinct expression."""
        g = build_occurrence_graph(sir_model())
        compartments = [n for n in g.nodes if n[0] == COMPARTMENT]
        terms = [n for n in g.nodes if n[0] == TERM]
        assert len(compartments) == 3
        assert sorted(n[1] for n in terms) == ["bSI", "gI"]

    def test_shared_expression_degree(self):
        """A transfer expression reaches exactly two compartments."""
        g = build_occurrence_graph(sir_model())
        assert g.out_degree((TERM, "bSI")) == 2
        assert matching_compartments(g, "bSI") == [0, 1]
        assert matching_compartments(g, "gI") == [1, 2]

    def test_signs_recorded_on_edges(self):
        g = build_occurrence_graph(sir_model())
        assert g.edges[(TERM, "bSI"), (COMPARTMENT, 0)]["signs"] == ["-"]
        assert g.edges[(TERM, "bSI"), (COMPARTMENT, 1)]["signs"] == ["+"]

    def test_expression_named_like_compartment_does_not_collide(self):
        """An expression spelled like a compartment name stays a separate node."""
        model = make_model(("S", ["-k"]), ("T", ["+S"]))
        g = build_occurrence_graph(model)
        assert (TERM, "S") in g
        assert matching_compartments(g, "S") == [1]

    def test_unknown_expression(self):
        g = build_occurrence_graph(sir_model())
        assert matching_compartments(g, "nope") == []


# ─── Validation Tests ─────────────────────────────────────────────────────────


class TestValidation:
    def test_branching_flow_rejected(self):
        """An expression in three compartments raises TopologyError with all names."""
        model = make_model(("A", ["-x"]), ("B", ["+x"]), ("C", ["+x"]))
        with pytest.raises(TopologyError) as exc_info:
            resolve_topology(model)
        assert exc_info.value.expression == "x"
        assert exc_info.value.compartments == ["A", "B", "C"]
        assert "x" in str(exc_info.value)

    def test_two_outflows_rejected(self):
        """A shared expression subtracted in both compartments is not a transfer."""
        model = make_model(("A", ["-x"]), ("B", ["-x"]))
        with pytest.raises(TopologyError) as exc_info:
            resolve_topology(model)
        assert exc_info.value.compartments == ["A", "B"]

    def test_two_inflows_rejected(self):
        model = make_model(("A", ["+x"]), ("B", ["+x"]))
        with pytest.raises(TopologyError):
            resolve_topology(model)

    def test_repeated_term_in_one_compartment_rejected(self):
        """Listing a shared term twice on one side would draw two connectors."""
        model = make_model(("S", ["-a", "-a"]), ("I", ["+a"]))
        with pytest.raises(TopologyError) as exc_info:
            resolve_topology(model)
        assert exc_info.value.expression == "a"
        assert exc_info.value.compartments == ["S", "I"]

    def test_both_signs_in_one_compartment_rejected(self):
        model = make_model(("S", ["-a", "+a"]), ("I", ["+a"]))
        with pytest.raises(TopologyError):
            resolve_topology(model)

    def test_malformed_term_fails_fast(self):
        """An unsigned term is an error, never silently treated as positive."""
        model = make_model(("A", ["-x"]), ("B", ["x"]))
        with pytest.raises(MalformedFlowTermError) as exc_info:
            resolve_topology(model)
        assert exc_info.value.compartment == "B"


# ─── Flow Graph Tests ─────────────────────────────────────────────────────────


class TestResolveTopology:
    def test_sir_transfers(self):
        """SIR resolves to two transfer edges and nothing else."""
        topo = resolve_topology(sir_model())
        flows = list(topo.flows())
        assert [(f.kind, f.source, f.target) for f in flows] == [
            (FlowKind.TRANSFER, "S", "I"),
            (FlowKind.TRANSFER, "I", "R"),
        ]
        assert isinstance(topo.graph, nx.MultiDiGraph)
        assert topo.graph.number_of_edges() == 2

    def test_compartment_node_attributes(self):
        topo = resolve_topology(sir_model())
        assert topo.graph.nodes["I"]["index"] == 1
        assert topo.graph.nodes["I"]["label"] == "I"

    def test_growth_is_self_loop(self):
        """Positive term referencing its own compartment becomes a self-loop edge."""
        topo = resolve_topology(make_model(("R", ["+rR*(1-R/K)"])))
        (flow,) = topo.flows()
        assert flow.kind is FlowKind.GROWTH
        assert topo.graph.has_edge("R", "R")

    def test_external_flows_use_sentinels(self):
        """Inflows start at a source sentinel, outflows end at a sink sentinel."""
        topo = resolve_topology(make_model(("S", ["+Lambda", "-mu*S"])))
        inflow, outflow = topo.flows()
        assert inflow.kind is FlowKind.INFLOW
        assert inflow.source.startswith(SOURCE_PREFIX)
        assert inflow.target == "S"
        assert outflow.kind is FlowKind.OUTFLOW
        assert outflow.target.startswith(SINK_PREFIX)
        assert is_external(inflow.source) and is_external(outflow.target)
        assert topo.graph.nodes[inflow.source]["external"] is True
        assert not is_external("S")

    def test_negative_self_reference_is_outflow(self):
        """Growth needs a positive sign; -g*I is a plain outflow."""
        topo = resolve_topology(make_model(("I", ["-g*I"])))
        assert [f.kind for f in topo.flows()] == [FlowKind.OUTFLOW]

    def test_transfer_owned_by_subtracting_side(self):
        """Listing the receiving compartment first still yields one transfer from the source."""
        topo = resolve_topology(make_model(("I", ["+bSI"]), ("S", ["-bSI"])))
        flows = list(topo.flows())
        assert len(flows) == 1
        assert (flows[0].source, flows[0].target) == ("S", "I")
        assert flows[0].order == (1, 0)

    def test_flows_ordered_by_compartment_then_term(self):
        topo = resolve_topology(make_model(("X", ["+alpha", "-beta"]), ("Y", ["+gamma"])))
        assert [f.order for f in topo.flows()] == [(0, 0), (0, 1), (1, 0)]
        assert [f.expression for f in topo.flows_of_kind(FlowKind.INFLOW)] == ["alpha", "gamma"]

    def test_no_flows(self):
        topo = resolve_topology(make_model(("A", []), ("B", [])))
        assert list(topo.flows()) == []
        assert topo.graph.number_of_nodes() == 2


class TestIsGrowthTerm:
    def test_positive_with_name(self):
        assert is_growth_term(FlowTerm("+", "rR*(1-R/K)"), "R")

    def test_negative_with_name(self):
        assert not is_growth_term(FlowTerm("-", "rR"), "R")

    def test_positive_without_name(self):
        assert not is_growth_term(FlowTerm("+", "Lambda"), "S")
