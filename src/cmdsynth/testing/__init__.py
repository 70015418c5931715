# src/cmdsynth/testing/__init__.py
"""Sample graph builders for tests, demos and the CLI ``sample`` command.

Seed nodes cycle through severity/urgency/state by index modulo 3, so a
sample graph always mixes blockers, active work and pending work.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from cmdsynth.contracts import (
    CommandConstraintState,
    CommandEdge,
    CommandGraph,
    CommandGraphId,
    CommandNode,
    CommandSeverity,
    CommandUrgency,
    GraphMetadata,
    GraphSource,
    NodeMetadata,
    ensure_graph_id,
    ensure_node_id,
)
from cmdsynth.contracts.timestamps import format_timestamp
from cmdsynth.core.topology import plan_waves

_SEVERITIES = (CommandSeverity.CRITICAL, CommandSeverity.WARNING, CommandSeverity.INFO)
_URGENCIES = (CommandUrgency.HIGH, CommandUrgency.MEDIUM, CommandUrgency.LOW)
_STATES = (CommandConstraintState.DEFERRED, CommandConstraintState.ACTIVE, CommandConstraintState.PENDING)

MIN_SAMPLE_NODES = 4


def build_seed_node(graph_id: CommandGraphId, index: int, timestamp: str) -> CommandNode:
    return CommandNode(
        id=ensure_node_id(graph_id, index, "seed"),
        graph_id=graph_id,
        name=f"seed-{index}",
        group=f"group-{index % 3}",
        weight=3 + index,
        severity=_SEVERITIES[index % 3],
        urgency=_URGENCIES[index % 3],
        state=_STATES[index % 3],
        created_at=timestamp,
        updated_at=timestamp,
        state_at=timestamp,
        version=index,
        metadata=NodeMetadata(
            owner="synthesizer",
            region="global",
            labels=("core" if index % 2 == 0 else "edge",),
            tags=("seed",),
            tags_version=index,
        ),
    )


def create_sample_graph(
    tenant: str,
    run_id: str,
    *,
    operator: str | None = None,
    wave_count: int | None = None,
    now: datetime | None = None,
) -> CommandGraph:
    """Build a linear chain of seed nodes with waves already planned.

    Args:
        tenant: Owning tenant
        run_id: Recovery run id
        operator: Requesting operator (defaults to 'system' on the graph and
            'orchestrator' in each edge payload)
        wave_count: Chain length, at least MIN_SAMPLE_NODES
        now: Timestamp for every created/updated field (defaults to now)
    """
    timestamp = format_timestamp(now if now is not None else datetime.now(UTC))
    graph_id = ensure_graph_id(tenant, run_id)
    size = max(MIN_SAMPLE_NODES, wave_count or MIN_SAMPLE_NODES)
    nodes = tuple(build_seed_node(graph_id, index, timestamp) for index in range(size))
    edges = tuple(
        CommandEdge(
            source=previous.id,
            target=node.id,
            order=index,
            latency_budget_ms=180 + index * 35,
            cost=node.weight + 1,
            confidence=0.2 + min(0.7, index / size),
            payload={"operator": operator or "orchestrator", "version": size},
        )
        for index, (previous, node) in enumerate(zip(nodes, nodes[1:], strict=False))
    )
    graph = CommandGraph(
        id=graph_id,
        tenant=tenant,
        run_id=run_id,
        root_plan_id=f"{tenant}:plan:{run_id}",
        nodes=nodes,
        edges=edges,
        created_at=timestamp,
        updated_at=timestamp,
        metadata=GraphMetadata(
            source=GraphSource.PLANNER,
            revision=1,
            requested_by=operator or "system",
            notes=("seeded graph",),
        ),
    )
    return replace(graph, waves=plan_waves(graph))

