# src/cmdsynth/core/__init__.py
"""Core infrastructure: Topology, Canonical, Configuration, Logging."""

from cmdsynth.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    compute_topology_hash,
    stable_hash,
)
from cmdsynth.core.config import (
    LedgerConfig,
    LoggingSettings,
    SynthesisSettings,
    load_settings,
)
from cmdsynth.core.logging import (
    configure_logging,
    get_logger,
    graph_log_context,
)
from cmdsynth.core.topology import (
    build_adjacency,
    build_layers,
    build_reverse,
    build_topology,
    compute_indegree,
    detect_cycles,
    plan_waves,
    to_nx_graph,
    topological_order,
)

__all__ = [
    "CANONICAL_VERSION",
    "LedgerConfig",
    "LoggingSettings",
    "SynthesisSettings",
    "build_adjacency",
    "build_layers",
    "build_reverse",
    "build_topology",
    "canonical_json",
    "compute_indegree",
    "compute_topology_hash",
    "configure_logging",
    "detect_cycles",
    "get_logger",
    "graph_log_context",
    "load_settings",
    "plan_waves",
    "stable_hash",
    "to_nx_graph",
    "topological_order",
]
