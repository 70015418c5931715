# tests/e2e/test_linear_chain.py
"""End-to-end: a planner payload through every engine."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cmdsynth.contracts import (
    CommandConstraintState,
    CommandNode,
    CommandSynthesisQuery,
    CommandUrgency,
    GraphEventType,
    parse_command_graph,
)
from cmdsynth.core.config import LedgerConfig
from cmdsynth.core.topology import build_topology
from cmdsynth.engine import (
    build_forecast,
    build_ledger,
    build_synthesis_plan,
    rewrite_graph,
    run_audit,
    to_synthesis_result,
    transition_node,
    with_planned_waves,
)
from cmdsynth.testing import create_sample_graph
from tests.helpers import make_chain

NOW = datetime(2024, 1, 1, 1, 0, tzinfo=UTC)


def test_four_node_chain(chain_graph) -> None:
    forecast = build_forecast(chain_graph)
    result = to_synthesis_result(chain_graph)

    assert forecast.wave_count == 4
    assert forecast.blockers == 0
    assert len(result.execution_order) == 4
    assert result.ready is True


@pytest.mark.asyncio
async def test_planner_payload_round_trip_through_engines() -> None:
    payload = make_chain(["A", "B", "C", "D"]).to_payload()
    graph = with_planned_waves(parse_command_graph(payload))

    assert run_audit(graph) == []

    async def resolve(node: CommandNode) -> CommandNode:
        return transition_node(node, CommandConstraintState.RESOLVED, reason="done")

    resolved = await rewrite_graph(graph, resolve)

    assert [event.event_type for event in resolved.events] == [GraphEventType.NODE_STATE_CHANGED] * 4
    assert build_forecast(resolved).readiness == 100
    assert to_synthesis_result(resolved).readiness_score == 100

    config = LedgerConfig(tenant="acme", operator="oncall", wave_window_minutes=60)
    entry = build_ledger(resolved, config, now=NOW).unwrap()

    assert entry.snapshot.wave_coverage == 100
    assert entry.snapshot.risk_score == 0
    assert entry.record.outcome.ready is True
    assert entry.window.since == "2024-01-01T00:00:00.000000Z"


def test_sample_graph_mixes_blockers() -> None:
    graph = create_sample_graph("acme", "run-0001", now=NOW)
    topology = build_topology(graph)

    assert graph.node_count == 4
    assert len(topology.layers) == 4
    assert graph.waves[0].commands[0].id == "acme:run-0001:graph:node:0:seed"
    # Seed node 0 is deferred, so the facade reports not ready
    assert to_synthesis_result(graph).ready is False
    assert build_forecast(graph).blockers == 2


def test_sample_edges_record_operator_and_size() -> None:
    default = create_sample_graph("acme", "run-0001", now=NOW)
    staffed = create_sample_graph("acme", "run-0002", operator="oncall", wave_count=6, now=NOW)

    assert {edge.payload["operator"] for edge in default.edges if edge.payload} == {"orchestrator"}
    assert default.metadata.requested_by == "system"
    assert [edge.payload for edge in staffed.edges] == [{"operator": "oncall", "version": 6}] * 5
    assert staffed.metadata.requested_by == "oncall"


def test_sample_graph_synthesis_plan() -> None:
    graph = create_sample_graph("acme", "run-0001", operator="oncall", now=NOW)

    plan = build_synthesis_plan(graph, CommandSynthesisQuery(urgency=CommandUrgency.HIGH), now=NOW)

    assert plan.plan_name == "acme:plan:run-0001"
    assert plan.wave_count == len(graph.waves) == 4
    assert plan.requested_by == "oncall"
    assert plan.snapshot.wave_coverage == 100
    assert plan.query.limit == 500
    assert plan.query.tenant == "acme"
