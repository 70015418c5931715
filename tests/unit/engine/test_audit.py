# tests/unit/engine/test_audit.py
"""Tests for the audit engine."""

from __future__ import annotations

from cmdsynth.contracts import CommandSeverity
from cmdsynth.engine.audit import run_audit, summarize_findings
from cmdsynth.engine.mutator import with_planned_waves
from tests.helpers import make_chain, make_graph, make_node


def _issues(graph) -> list[tuple[str, CommandSeverity]]:
    return [(finding.issue, finding.severity) for finding in run_audit(graph)]


class TestRunAudit:
    def test_empty_graph(self, empty_graph) -> None:
        assert _issues(empty_graph) == [
            ("graph-empty", CommandSeverity.CRITICAL),
            ("no-wave-planned", CommandSeverity.WARNING),
        ]

    def test_planned_chain_is_clean(self, chain_graph) -> None:
        assert run_audit(with_planned_waves(chain_graph)) == []

    def test_unplanned_chain_warns(self, chain_graph) -> None:
        assert _issues(chain_graph) == [("no-wave-planned", CommandSeverity.WARNING)]

    def test_cycle_reported_after_wave_check(self) -> None:
        graph = make_graph([make_node("A"), make_node("B")], [("A", "B"), ("B", "A")])

        findings = run_audit(graph)

        assert [finding.issue for finding in findings] == ["no-wave-planned", "cycle-detected:A>B>A"]
        assert findings[1].severity == CommandSeverity.CRITICAL
        assert findings[1].graph_id == graph.id

    def test_planning_a_pure_cycle_still_warns(self) -> None:
        graph = with_planned_waves(make_graph([make_node("A"), make_node("B")], [("A", "B"), ("B", "A")]))

        assert graph.waves == ()
        assert [finding.issue for finding in run_audit(graph)][0] == "no-wave-planned"

    def test_edge_density_over_twice_node_count(self) -> None:
        graph = make_graph([make_node("A"), make_node("B")], [("A", "B")] * 5)

        assert _issues(graph)[-1] == ("edge-density:5", CommandSeverity.INFO)

    def test_edge_density_at_threshold_not_flagged(self) -> None:
        graph = make_graph([make_node("A"), make_node("B")], [("A", "B")] * 4)

        assert all(not finding.issue.startswith("edge-density") for finding in run_audit(graph))

    def test_does_not_touch_graph(self, chain_graph) -> None:
        before = chain_graph.to_payload()
        run_audit(chain_graph)
        assert chain_graph.to_payload() == before


class TestSummarizeFindings:
    def test_counts_every_severity(self) -> None:
        graph = make_chain([])
        assert summarize_findings(run_audit(graph)) == {
            CommandSeverity.INFO: 0,
            CommandSeverity.WARNING: 1,
            CommandSeverity.CRITICAL: 1,
        }
