# src/cmdsynth/engine/__init__.py
"""Analysis engines: forecast, audit, synthesis, mutation and ledger."""

from cmdsynth.engine.audit import run_audit, summarize_findings
from cmdsynth.engine.forecast import (
    build_critical_path,
    build_forecast,
    estimate_cost,
    estimate_latency,
    estimate_readiness,
    risk_vector,
)
from cmdsynth.engine.ledger import (
    build_ledger,
    build_synthesis_plan,
    build_synthesis_snapshot,
    clamp_query,
    merge_windows,
    to_window,
    validate_window,
)
from cmdsynth.engine.mutator import (
    NodeUpdate,
    extract_pipeline,
    fold_nodes,
    normalize_command_graph,
    rewrite_graph,
    transition_node,
    with_planned_waves,
)
from cmdsynth.engine.synthesis import to_synthesis_result

__all__ = [
    "NodeUpdate",
    "build_critical_path",
    "build_forecast",
    "build_ledger",
    "build_synthesis_plan",
    "build_synthesis_snapshot",
    "clamp_query",
    "estimate_cost",
    "estimate_latency",
    "estimate_readiness",
    "extract_pipeline",
    "fold_nodes",
    "merge_windows",
    "normalize_command_graph",
    "rewrite_graph",
    "risk_vector",
    "run_audit",
    "summarize_findings",
    "to_synthesis_result",
    "to_window",
    "transition_node",
    "validate_window",
]
