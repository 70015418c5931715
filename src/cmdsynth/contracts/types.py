"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

CommandNodeId = NewType("CommandNodeId", str)
"""Node identifier, unique within its graph (e.g., 'acme:run-1:graph:node:0:seed')"""

CommandGraphId = NewType("CommandGraphId", str)
"""Graph identifier (e.g., 'acme:run-1:graph')"""

CommandWaveId = NewType("CommandWaveId", str)
"""Wave identifier derived from graph id and layer index (e.g., 'acme:run-1:graph:wave:0')"""

CommandTraceId = NewType("CommandTraceId", str)
"""Trace identifier correlating events emitted for the same run or version"""

CommandEventId = NewType("CommandEventId", str)
"""Graph event identifier"""

CommandRecordId = NewType("CommandRecordId", str)
"""Synthesis ledger record identifier"""


def ensure_graph_id(tenant: str, run_id: str) -> CommandGraphId:
    """Build the canonical graph id for a tenant's run."""
    return CommandGraphId(f"{tenant}:{run_id}:graph")


def ensure_node_id(graph_id: str, index: int, suffix: str) -> CommandNodeId:
    """Build a node id scoped to its graph."""
    return CommandNodeId(f"{graph_id}:node:{index}:{suffix}")


def ensure_trace_id(graph_id: str, run_id: str) -> CommandTraceId:
    """Build the trace id shared by events of one graph run."""
    return CommandTraceId(f"{graph_id}:trace:{run_id}")


def ensure_wave_id(graph_id: str, index: int) -> CommandWaveId:
    return CommandWaveId(f"{graph_id}:wave:{index}")
