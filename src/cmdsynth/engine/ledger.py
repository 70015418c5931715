# src/cmdsynth/engine/ledger.py
"""Snapshot ledger: windowed, validated synthesis snapshots.

The read path (snapshot, window derivation, validation, merge) never
mutates its inputs.
``build_ledger`` assembles everything a persistence collaborator appends:
window, snapshot, one snapshot event, one synthesis record and the caller's
execution samples. Window failures come back as ``Result`` values, never
as exceptions.

The readiness and risk signals here are coarser than the forecast
engine's and the synthesis facade's. They describe periodic health, not
execution planning.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import structlog

from cmdsynth.contracts import (
    DEFAULT_QUERY_LIMIT,
    DEFAULT_WINDOW_MINUTES,
    MAX_WINDOW_LIMIT,
    CommandConstraintState,
    CommandEventId,
    CommandExecutionSample,
    CommandGraph,
    CommandGraphEvent,
    CommandGraphId,
    CommandRecordId,
    CommandSeverity,
    CommandSynthesisCursor,
    CommandSynthesisPlan,
    CommandSynthesisQuery,
    CommandSynthesisRecord,
    CommandSynthesisSnapshot,
    GraphEventType,
    LedgerRecord,
    Result,
    SynthesisRequest,
    SynthesisWindow,
    WindowFailure,
    ensure_trace_id,
    summarize_by_severity,
)
from cmdsynth.contracts.timestamps import format_timestamp, utc_now
from cmdsynth.core.canonical import compute_topology_hash
from cmdsynth.core.config import LedgerConfig
from cmdsynth.core.logging import graph_log_context
from cmdsynth.core.topology import plan_waves
from cmdsynth.engine.forecast import round_half_up
from cmdsynth.engine.synthesis import to_synthesis_result

logger = structlog.get_logger(__name__)

# Samples allotted per minute of window
SAMPLES_PER_MINUTE = 10


def snapshot_risk_score(graph: CommandGraph) -> int:
    """Count-based health risk: critical and blocked weigh most, resolved work offsets."""
    severity = summarize_by_severity(graph.nodes)
    blocked = sum(1 for node in graph.nodes if node.state == CommandConstraintState.BLOCKED)
    resolved = sum(1 for node in graph.nodes if node.state == CommandConstraintState.RESOLVED)
    score = 3 * severity[CommandSeverity.CRITICAL] + 2 * severity[CommandSeverity.WARNING] + 4 * blocked - resolved
    return max(0, score)


def build_synthesis_snapshot(graph: CommandGraph, *, now: datetime | None = None) -> CommandSynthesisSnapshot:
    """Read-only projection of a graph's current health, stamped at ``now``."""
    total = graph.node_count
    blocked = sum(1 for node in graph.nodes if node.state == CommandConstraintState.BLOCKED)
    planned = sum(len(wave.commands) for wave in graph.waves)

    return CommandSynthesisSnapshot(
        cursor=CommandSynthesisCursor(
            graph_id=graph.id,
            index=total,
            window_start=graph.created_at,
            window_end=graph.updated_at,
        ),
        generated_at=format_timestamp(now) if now is not None else utc_now(),
        total_nodes=total,
        blocked_nodes=blocked,
        risk_score=snapshot_risk_score(graph),
        critical_path_length=max(1, len(graph.waves)),
        wave_coverage=round_half_up(planned / max(1, total) * 100),
    )


def _window_minutes(minutes: float) -> float:
    if not math.isfinite(minutes) or minutes <= 0:
        return DEFAULT_WINDOW_MINUTES
    return minutes


def to_window(graph_id: CommandGraphId, minutes: float, *, now: datetime | None = None) -> SynthesisWindow:
    """Derive the window ending now and spanning ``minutes``.

    Non-positive or non-finite durations fall back to the default window.
    Durations reaching past year 1 start the window at ``datetime.min``.
    The sample limit grows with the duration and is capped.
    """
    span = _window_minutes(minutes)
    until = now if now is not None else datetime.now(UTC)
    try:
        since = until - timedelta(minutes=span)
    except OverflowError:
        since = datetime.min.replace(tzinfo=UTC)
    return SynthesisWindow(
        graph_id=graph_id,
        since=format_timestamp(since),
        until=format_timestamp(until),
        limit=min(MAX_WINDOW_LIMIT, math.ceil(span) * SAMPLES_PER_MINUTE),
    )


def validate_window(window: SynthesisWindow) -> Result[SynthesisWindow]:
    """Check a window is usable.

    ``until < since`` is a plain string comparison, valid for timestamps in
    the same ISO-8601 format and timezone.
    """
    if window.limit <= 0:
        return Result.failure(WindowFailure.LIMIT_NON_POSITIVE)
    if window.until < window.since:
        return Result.failure(WindowFailure.UNTIL_BEFORE_SINCE)
    return Result.success(window)


def merge_windows(first: SynthesisWindow, second: SynthesisWindow) -> SynthesisWindow:
    """Union of two windows: earliest since, latest until, summed limit clamped to [1, MAX]."""
    return SynthesisWindow(
        graph_id=first.graph_id,
        since=min(first.since, second.since),
        until=max(first.until, second.until),
        limit=min(MAX_WINDOW_LIMIT, max(1, first.limit + second.limit)),
    )


def clamp_query(query: CommandSynthesisQuery) -> tuple[int, CommandSynthesisQuery]:
    """Normalize a query's page size.

    A missing limit becomes DEFAULT_QUERY_LIMIT; any other value is clamped
    to [1, MAX_WINDOW_LIMIT] like a window limit.

    Returns:
        The effective limit and a copy of the query carrying it
    """
    limit = DEFAULT_QUERY_LIMIT if query.limit is None else min(MAX_WINDOW_LIMIT, max(1, query.limit))
    return limit, replace(query, limit=limit)


def build_synthesis_plan(
    graph: CommandGraph,
    query: CommandSynthesisQuery | None = None,
    *,
    requested_by: str | None = None,
    now: datetime | None = None,
) -> CommandSynthesisPlan:
    """Bind a query to a graph under the graph's root plan.

    The stored query is clamped and scoped to this graph: a missing
    ``graph_id`` or ``tenant`` is filled in from the graph.

    Raises:
        ValueError: If the query names a different graph or tenant
    """
    query = query if query is not None else CommandSynthesisQuery()
    if query.graph_id is not None and query.graph_id != graph.id:
        raise ValueError(f"query targets graph '{query.graph_id}', not '{graph.id}'")
    if query.tenant is not None and query.tenant != graph.tenant:
        raise ValueError(f"query targets tenant '{query.tenant}', not '{graph.tenant}'")

    _, scoped = clamp_query(replace(query, graph_id=graph.id, tenant=graph.tenant))
    return CommandSynthesisPlan(
        graph_id=graph.id,
        plan_name=graph.root_plan_id,
        run_id=graph.run_id,
        wave_count=len(plan_waves(graph)),
        requested_by=requested_by or graph.metadata.requested_by,
        tenant=graph.tenant,
        snapshot=build_synthesis_snapshot(graph, now=now),
        query=scoped,
    )


def _snapshot_event(graph: CommandGraph, snapshot: CommandSynthesisSnapshot) -> CommandGraphEvent:
    return CommandGraphEvent(
        id=CommandEventId(f"{graph.id}:event:snapshot:{snapshot.generated_at}"),
        graph_id=graph.id,
        trace_id=ensure_trace_id(graph.id, graph.run_id),
        event_type=GraphEventType.SNAPSHOT,
        timestamp=snapshot.generated_at,
        payload=snapshot.to_payload(),
    )


def _build_record(
    graph: CommandGraph,
    config: LedgerConfig,
    window: SynthesisWindow,
    snapshot: CommandSynthesisSnapshot,
) -> CommandSynthesisRecord:
    critical = summarize_by_severity(graph.nodes)[CommandSeverity.CRITICAL]
    outcome = replace(to_synthesis_result(graph), ready=critical == 0 and snapshot.blocked_nodes == 0)
    return CommandSynthesisRecord(
        id=CommandRecordId(f"{graph.id}:record:{snapshot.generated_at}"),
        graph_id=graph.id,
        plan_id=graph.root_plan_id,
        run_id=graph.run_id,
        outcome=outcome,
        request=SynthesisRequest(
            tenant=config.tenant,
            operator=config.operator,
            reason=f"window:{window.since}/{window.until}@{config.sample_rate_ms}ms",
        ),
        created_at=snapshot.generated_at,
        topology_hash=compute_topology_hash(graph),
    )


def build_ledger(
    graph: CommandGraph,
    config: LedgerConfig,
    samples: Sequence[CommandExecutionSample] = (),
    *,
    now: datetime | None = None,
) -> Result[LedgerRecord]:
    """Assemble one ledger append for a graph.

    Args:
        graph: Graph to snapshot
        config: Tenant, operator, window length and sample rate
        samples: Execution samples, echoed back unchanged
        now: End of the window (defaults to the current time)

    Returns:
        Success with the LedgerRecord, or failure with the window error code
    """
    with graph_log_context(graph):
        window_result = validate_window(to_window(graph.id, config.wave_window_minutes, now=now))
        if not window_result.is_success:
            logger.warning("ledger_window_rejected", reason=window_result.error)
            return Result.failure(window_result.error or WindowFailure.LIMIT_NON_POSITIVE)
        window = window_result.unwrap()

        snapshot = build_synthesis_snapshot(graph, now=now)
        record = _build_record(graph, config, window, snapshot)

        logger.info(
            "ledger_record_built",
            operator=config.operator,
            ready=record.outcome.ready,
            samples=len(samples),
        )
    return Result.success(
        LedgerRecord(
            window=window,
            snapshot=snapshot,
            event=_snapshot_event(graph, snapshot),
            record=record,
            samples=tuple(samples),
        )
    )
