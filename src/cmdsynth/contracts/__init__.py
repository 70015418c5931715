"""Shared contracts for cmdsynth.

Leaf package: imports nothing from core or engine. Every data type that
crosses a subsystem boundary is defined here.
"""

from cmdsynth.contracts.enums import (
    SEVERITY_RANK,
    URGENCY_RANK,
    CommandConstraintState,
    CommandExecutionState,
    CommandSeverity,
    CommandUrgency,
    GraphEventType,
    GraphSource,
)
from cmdsynth.contracts.errors import LedgerWindowError, WindowFailure
from cmdsynth.contracts.events import CommandGraphEvent
from cmdsynth.contracts.graph import (
    CommandEdge,
    CommandGraph,
    CommandNode,
    CommandWave,
    EdgePayloadValue,
    GraphContractError,
    GraphMetadata,
    NodeMetadata,
    NodeStateWindow,
    build_graph_fingerprint,
    build_node_fingerprint,
    order_by_group,
    summarize_by_severity,
)
from cmdsynth.contracts.ledger import (
    DEFAULT_QUERY_LIMIT,
    DEFAULT_WINDOW_MINUTES,
    MAX_WINDOW_LIMIT,
    CommandExecutionSample,
    CommandSynthesisCursor,
    CommandSynthesisPlan,
    CommandSynthesisQuery,
    CommandSynthesisRecord,
    CommandSynthesisSnapshot,
    LedgerRecord,
    SynthesisRequest,
    SynthesisWindow,
)
from cmdsynth.contracts.results import (
    CommandGraphAudit,
    CommandGraphForecast,
    CommandGraphTopology,
    CommandSynthesisResult,
    Result,
)
from cmdsynth.contracts.schema import parse_command_graph
from cmdsynth.contracts.types import (
    CommandEventId,
    CommandGraphId,
    CommandNodeId,
    CommandRecordId,
    CommandTraceId,
    CommandWaveId,
    ensure_graph_id,
    ensure_node_id,
    ensure_trace_id,
    ensure_wave_id,
)

__all__ = [
    "DEFAULT_QUERY_LIMIT",
    "DEFAULT_WINDOW_MINUTES",
    "MAX_WINDOW_LIMIT",
    "SEVERITY_RANK",
    "URGENCY_RANK",
    "CommandConstraintState",
    "CommandEdge",
    "CommandEventId",
    "CommandExecutionSample",
    "CommandExecutionState",
    "CommandGraph",
    "CommandGraphAudit",
    "CommandGraphEvent",
    "CommandGraphForecast",
    "CommandGraphId",
    "CommandGraphTopology",
    "CommandNode",
    "CommandNodeId",
    "CommandRecordId",
    "CommandSeverity",
    "CommandSynthesisCursor",
    "CommandSynthesisPlan",
    "CommandSynthesisQuery",
    "CommandSynthesisRecord",
    "CommandSynthesisResult",
    "CommandSynthesisSnapshot",
    "CommandTraceId",
    "CommandUrgency",
    "CommandWave",
    "CommandWaveId",
    "EdgePayloadValue",
    "GraphContractError",
    "GraphEventType",
    "GraphMetadata",
    "GraphSource",
    "LedgerRecord",
    "LedgerWindowError",
    "NodeMetadata",
    "NodeStateWindow",
    "Result",
    "SynthesisRequest",
    "SynthesisWindow",
    "WindowFailure",
    "build_graph_fingerprint",
    "build_node_fingerprint",
    "ensure_graph_id",
    "ensure_node_id",
    "ensure_trace_id",
    "ensure_wave_id",
    "order_by_group",
    "parse_command_graph",
    "summarize_by_severity",
]
