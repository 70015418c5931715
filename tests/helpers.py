# tests/helpers.py
"""Graph builders for tests.

Builders take short node ids ('A', 'B') and fill every other field with
fixed, valid defaults so each test only spells out what it is about.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from cmdsynth.contracts import (
    CommandConstraintState,
    CommandEdge,
    CommandGraph,
    CommandGraphId,
    CommandNode,
    CommandNodeId,
    CommandSeverity,
    CommandUrgency,
    CommandWave,
    GraphMetadata,
    GraphSource,
    NodeMetadata,
)

T0 = "2024-01-01T00:00:00.000000Z"
GRAPH_ID = CommandGraphId("acme:run-1:graph")


def make_node(node_id: str, **overrides: Any) -> CommandNode:
    fields: dict[str, Any] = {
        "id": CommandNodeId(node_id),
        "graph_id": GRAPH_ID,
        "name": node_id.lower(),
        "group": "core",
        "weight": 1,
        "severity": CommandSeverity.INFO,
        "urgency": CommandUrgency.LOW,
        "state": CommandConstraintState.PENDING,
        "created_at": T0,
        "updated_at": T0,
        "state_at": T0,
        "version": 1,
        "metadata": NodeMetadata(owner="oncall", region="us-east"),
    }
    fields.update(overrides)
    return CommandNode(**fields)


def make_edge(source: str, target: str, **overrides: Any) -> CommandEdge:
    fields: dict[str, Any] = {
        "source": CommandNodeId(source),
        "target": CommandNodeId(target),
        "order": 0,
        "latency_budget_ms": 100,
        "cost": 1,
        "confidence": 0.9,
    }
    fields.update(overrides)
    return CommandEdge(**fields)


def make_graph(
    nodes: Sequence[CommandNode],
    edges: Iterable[CommandEdge | tuple[str, str]],
    *,
    waves: Sequence[CommandWave] = (),
    **overrides: Any,
) -> CommandGraph:
    fields: dict[str, Any] = {
        "id": GRAPH_ID,
        "tenant": "acme",
        "run_id": "run-1",
        "root_plan_id": "acme:plan:1",
        "nodes": tuple(nodes),
        "edges": tuple(edge if isinstance(edge, CommandEdge) else make_edge(*edge) for edge in edges),
        "waves": tuple(waves),
        "created_at": T0,
        "updated_at": T0,
        "metadata": GraphMetadata(source=GraphSource.PLANNER, revision=1, requested_by="planner"),
    }
    fields.update(overrides)
    return CommandGraph(**fields)


def make_chain(ids: Sequence[str], **node_overrides: Any) -> CommandGraph:
    """Linear chain ids[0] → ids[1] → ... with identical node defaults."""
    nodes = [make_node(node_id, **node_overrides) for node_id in ids]
    edges = [(a, b) for a, b in zip(ids, ids[1:], strict=False)]
    return make_graph(nodes, edges)


def graph_payload(**overrides: Any) -> dict[str, Any]:
    """Planner-shaped (camelCase) payload for a two-node graph."""
    node = {
        "id": "acme:node:a",
        "graphId": "acme:run-1:graph",
        "name": "drain-traffic",
        "group": "network",
        "weight": 5,
        "severity": "critical",
        "urgency": "high",
        "state": "pending",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
        "stateAt": "2024-01-01T00:05:00Z",
        "version": 0,
        "metadata": {"owner": "oncall", "region": "us-east", "labels": ["core"], "tags": [], "tagsVersion": 0},
    }
    payload: dict[str, Any] = {
        "id": "acme:run-1:graph",
        "tenant": "acme",
        "runId": "run-1",
        "rootPlanId": "acme:plan:1",
        "nodes": [node, {**node, "id": "acme:node:b", "name": "failover-db", "severity": "info"}],
        "edges": [
            {"from": "acme:node:a", "to": "acme:node:b", "order": 0, "latencyBudgetMs": 250, "cost": 2, "confidence": 0.8},
        ],
        "waves": [],
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
        "metadata": {"source": "planner", "revision": 1, "requestedBy": "planner", "notes": []},
    }
    payload.update(overrides)
    return payload
