# src/cmdsynth/engine/mutator.py
"""Graph mutator: per-node async rewrites and canonicalization.

Mutation follows a command/event pair per node:

    input graph (immutable)
      -> NodeUpdate(before, after) per node
      -> one node_state_changed event per update
      -> new graph carrying the updated nodes and the events

Waves are carried over untouched. Rewriting does not re-plan; callers that
change dependency-relevant fields re-run plan_waves() themselves.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from typing import TypeAlias, TypeVar

import structlog

from cmdsynth.contracts import (
    CommandConstraintState,
    CommandEventId,
    CommandGraph,
    CommandGraphEvent,
    CommandNode,
    GraphEventType,
    ensure_trace_id,
)
from cmdsynth.contracts.timestamps import advance_timestamp, parse_timestamp
from cmdsynth.core.logging import graph_log_context
from cmdsynth.core.topology import plan_waves

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NodeMapper: TypeAlias = Callable[[CommandNode], Awaitable[CommandNode]]


@dataclass(frozen=True, slots=True)
class NodeUpdate:
    """One per-node rewrite: the node before and after the mapper ran."""

    before: CommandNode
    after: CommandNode


def _state_changed_event(graph: CommandGraph, update: NodeUpdate, timestamp: str) -> CommandGraphEvent:
    node = update.after
    return CommandGraphEvent(
        id=CommandEventId(f"{graph.id}:event:{node.version}:{node.id}"),
        graph_id=graph.id,
        trace_id=ensure_trace_id(graph.id, str(node.version)),
        event_type=GraphEventType.NODE_STATE_CHANGED,
        timestamp=timestamp,
        payload={
            "nodeId": node.id,
            "state": node.state.value,
            "previousState": update.before.state.value,
            "version": node.version,
        },
    )


async def _gather_in_order(nodes: Sequence[CommandNode], mapper: Callable[[CommandNode], Awaitable[T]]) -> list[T]:
    """Map nodes concurrently, results in input order, fail fast.

    The first exception propagates unchanged, whether the mapper raised while
    its awaitable was being created or while it ran. Every task already
    started is cancelled and awaited before the exception leaves, so no
    partial batch survives and nothing is left pending.
    """
    tasks: list[asyncio.Future[T]] = []
    try:
        for node in nodes:
            tasks.append(asyncio.ensure_future(mapper(node)))
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def rewrite_graph(graph: CommandGraph, mapper: NodeMapper) -> CommandGraph:
    """Apply an async transform to every node concurrently.

    Args:
        graph: Graph to rewrite (left untouched)
        mapper: Async per-node transform

    Returns:
        New graph with mapped nodes (input order), the original waves, one
        node_state_changed event per node and an advanced updated_at.

    Raises:
        Exception: Whatever the mapper raised, for the first failing node
    """
    with graph_log_context(graph):
        logger.debug("graph_rewrite_started", nodes=graph.node_count)
        try:
            nodes = await _gather_in_order(graph.nodes, mapper)
        except Exception as exc:
            logger.error("graph_rewrite_failed", error=str(exc), error_type=type(exc).__name__)
            raise

        updates = [NodeUpdate(before=before, after=after) for before, after in zip(graph.nodes, nodes, strict=True)]
        updated_at = advance_timestamp(graph.updated_at)
        events = tuple(_state_changed_event(graph, update, updated_at) for update in updates)

        logger.debug("graph_rewrite_finished", events=len(events))
    return replace(
        graph,
        nodes=tuple(update.after for update in updates),
        waves=graph.waves,
        events=events,
        updated_at=updated_at,
    )


def normalize_command_graph(graph: CommandGraph) -> CommandGraph:
    """Sort nodes by name and edges by (order, latency budget).

    Idempotent on node/edge ordering; ``updated_at`` always advances.
    Both sorts are stable.
    """
    return replace(
        graph,
        updated_at=advance_timestamp(graph.updated_at),
        nodes=tuple(sorted(graph.nodes, key=lambda node: node.name)),
        edges=tuple(sorted(graph.edges, key=lambda edge: (edge.order, edge.latency_budget_ms))),
    )


def with_planned_waves(graph: CommandGraph) -> CommandGraph:
    """Return the graph with waves recomputed from its current topology."""
    return replace(graph, waves=plan_waves(graph), updated_at=advance_timestamp(graph.updated_at))


def transition_node(
    node: CommandNode,
    state: CommandConstraintState,
    *,
    at: str | None = None,
    reason: str | None = None,
) -> CommandNode:
    """Return a copy of ``node`` moved to ``state``.

    Bumps ``version``, sets ``state_at``/``updated_at`` and keeps them
    monotonic: an explicit ``at`` earlier than the node's current state_at
    is replaced by a strictly later timestamp.
    """
    moment = advance_timestamp(node.state_at) if at is None else at
    if parse_timestamp(moment) <= parse_timestamp(node.state_at):
        moment = advance_timestamp(node.state_at)
    return replace(
        node,
        state=state,
        state_at=moment,
        updated_at=moment,
        state_reason=reason,
        version=node.version + 1,
    )


async def fold_nodes(
    nodes: Sequence[CommandNode],
    reducer: Callable[[T, CommandNode, int], Awaitable[T]],
    seed: T,
) -> T:
    """Sequential async reduction over nodes, in order."""
    accumulator = seed
    for index, node in enumerate(nodes):
        accumulator = await reducer(accumulator, node, index)
    return accumulator


async def extract_pipeline(nodes: Sequence[CommandNode], mapper: Callable[[CommandNode], Awaitable[T]]) -> list[T]:
    """Concurrent async map over nodes; results follow input order."""
    return await _gather_in_order(nodes, mapper)
