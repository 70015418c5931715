# src/cmdsynth/engine/audit.py
"""Audit engine: advisory structural checks over a command graph.

Findings never block callers and never mutate the graph. Severity is a
hint for the synthesis facade and governance consumers.
"""

from __future__ import annotations

import structlog

from cmdsynth.contracts import CommandGraph, CommandGraphAudit, CommandSeverity
from cmdsynth.core.topology import detect_cycles

logger = structlog.get_logger(__name__)

# Edges beyond this multiple of the node count are flagged as dense
EDGE_DENSITY_FACTOR = 2


def run_audit(graph: CommandGraph) -> list[CommandGraphAudit]:
    """Run all structural checks.

    Order of findings: emptiness, wave planning, cycles (one per grey
    revisit, duplicates kept), edge density.
    """
    issues: list[CommandGraphAudit] = []

    if graph.node_count == 0:
        issues.append(CommandGraphAudit(graph_id=graph.id, issue="graph-empty", severity=CommandSeverity.CRITICAL))

    if not graph.waves:
        issues.append(CommandGraphAudit(graph_id=graph.id, issue="no-wave-planned", severity=CommandSeverity.WARNING))

    issues.extend(detect_cycles(graph))

    if graph.edge_count > graph.node_count * EDGE_DENSITY_FACTOR:
        issues.append(
            CommandGraphAudit(
                graph_id=graph.id,
                issue=f"edge-density:{graph.edge_count}",
                severity=CommandSeverity.INFO,
            )
        )

    if issues:
        logger.debug("graph_audit_findings", graph_id=graph.id, findings=len(issues))
    return issues


def summarize_findings(findings: list[CommandGraphAudit]) -> dict[CommandSeverity, int]:
    """Count findings per severity for user-facing summaries."""
    counts = dict.fromkeys(CommandSeverity, 0)
    for finding in findings:
        counts[finding.severity] += 1
    return counts
