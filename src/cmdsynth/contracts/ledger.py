"""Snapshot ledger types: windows, cursors, snapshots and records.

Snapshots and records are created fresh per request and never mutated
(append-only ledger semantics). Records and events are the only values
expected to cross a persistence boundary; both export JSON-compatible dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cmdsynth.contracts.enums import CommandExecutionState, CommandUrgency
from cmdsynth.contracts.events import CommandGraphEvent
from cmdsynth.contracts.results import CommandSynthesisResult
from cmdsynth.contracts.types import CommandGraphId, CommandNodeId, CommandRecordId

# Upper bound on samples a single window may request
MAX_WINDOW_LIMIT = 2000

# Window length used when the requested duration is unusable
DEFAULT_WINDOW_MINUTES = 15

# Page size for a query that names none
DEFAULT_QUERY_LIMIT = 500


@dataclass(frozen=True, slots=True)
class SynthesisWindow:
    """A time window over which ledger samples are collected.

    ``since`` and ``until`` are compared as strings. That is only
    chronologically correct for timestamps in the same format and timezone,
    which holds for everything cmdsynth produces (see contracts.timestamps).
    """

    graph_id: CommandGraphId
    since: str
    until: str
    limit: int

    def to_payload(self) -> dict[str, Any]:
        return {"graphId": self.graph_id, "since": self.since, "until": self.until, "limit": self.limit}


@dataclass(frozen=True, slots=True)
class CommandSynthesisCursor:
    graph_id: CommandGraphId
    index: int
    window_start: str
    window_end: str


@dataclass(frozen=True, slots=True)
class CommandSynthesisSnapshot:
    """Point-in-time health projection of a graph.

    ``risk_score`` here is a coarse count-based signal and is not
    the forecast engine's risk vector.
    """

    cursor: CommandSynthesisCursor
    generated_at: str
    total_nodes: int
    blocked_nodes: int
    risk_score: int
    critical_path_length: int
    wave_coverage: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "cursor": {
                "graphId": self.cursor.graph_id,
                "index": self.cursor.index,
                "windowStart": self.cursor.window_start,
                "windowEnd": self.cursor.window_end,
            },
            "generatedAt": self.generated_at,
            "totalNodes": self.total_nodes,
            "blockedNodes": self.blocked_nodes,
            "riskScore": self.risk_score,
            "criticalPathLength": self.critical_path_length,
            "waveCoverage": self.wave_coverage,
        }


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    tenant: str
    operator: str
    reason: str


@dataclass(frozen=True, slots=True)
class CommandSynthesisRecord:
    """Durable ledger entry wrapping a synthesis outcome.

    ``outcome.ready`` follows the ledger's own readiness rule (no critical
    nodes and no blocked nodes), which is simpler than the facade's.
    """

    id: CommandRecordId
    graph_id: CommandGraphId
    plan_id: str
    run_id: str
    outcome: CommandSynthesisResult
    request: SynthesisRequest
    created_at: str
    topology_hash: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "graphId": self.graph_id,
            "planId": self.plan_id,
            "runId": self.run_id,
            "outcome": self.outcome.to_payload(),
            "request": {
                "tenant": self.request.tenant,
                "operator": self.request.operator,
                "reason": self.request.reason,
            },
            "createdAt": self.created_at,
            "topologyHash": self.topology_hash,
        }


@dataclass(frozen=True, slots=True)
class CommandExecutionSample:
    """An observed execution state of one command, supplied by the caller."""

    run_id: str
    graph_id: CommandGraphId
    node_id: CommandNodeId
    observed_state: CommandExecutionState
    at: str
    latency_ms: float
    error: str | None = None


@dataclass(frozen=True, slots=True)
class LedgerRecord:
    """Everything a persistence collaborator needs for one ledger append."""

    window: SynthesisWindow
    snapshot: CommandSynthesisSnapshot
    event: CommandGraphEvent
    record: CommandSynthesisRecord
    samples: tuple[CommandExecutionSample, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "window": self.window.to_payload(),
            "snapshot": self.snapshot.to_payload(),
            "event": self.event.to_payload(),
            "record": self.record.to_payload(),
            "samples": [
                {
                    "runId": sample.run_id,
                    "graphId": sample.graph_id,
                    "nodeId": sample.node_id,
                    "observedState": sample.observed_state.value,
                    "at": sample.at,
                    "latencyMs": sample.latency_ms,
                    **({"error": sample.error} if sample.error is not None else {}),
                }
                for sample in self.samples
            ],
        }


@dataclass(frozen=True, slots=True)
class CommandSynthesisQuery:
    """Filter and paging arguments for listing synthesis results.

    Every filter is optional. ``limit`` is normalized by
    ``engine.ledger.clamp_query`` before a query is stored on a plan.
    """

    tenant: str | None = None
    graph_id: CommandGraphId | None = None
    readiness_state: CommandExecutionState | None = None
    min_weight: float | None = None
    since: str | None = None
    urgency: CommandUrgency | None = None
    cursor: str | None = None
    limit: int | None = None

    def to_payload(self) -> dict[str, Any]:
        """Export set fields only, camelCase keys."""
        fields: dict[str, Any] = {
            "tenant": self.tenant,
            "graphId": self.graph_id,
            "readinessState": self.readiness_state.value if self.readiness_state is not None else None,
            "minWeight": self.min_weight,
            "since": self.since,
            "urgency": self.urgency.value if self.urgency is not None else None,
            "cursor": self.cursor,
            "limit": self.limit,
        }
        return {key: value for key, value in fields.items() if value is not None}


@dataclass(frozen=True, slots=True)
class CommandSynthesisPlan:
    """A named synthesis request bound to one graph, its snapshot and query."""

    graph_id: CommandGraphId
    plan_name: str
    run_id: str
    wave_count: int
    requested_by: str
    tenant: str
    snapshot: CommandSynthesisSnapshot
    query: CommandSynthesisQuery

    def to_payload(self) -> dict[str, Any]:
        return {
            "graphId": self.graph_id,
            "planName": self.plan_name,
            "runId": self.run_id,
            "waveCount": self.wave_count,
            "requestedBy": self.requested_by,
            "tenant": self.tenant,
            "snapshot": self.snapshot.to_payload(),
            "query": self.query.to_payload(),
        }
