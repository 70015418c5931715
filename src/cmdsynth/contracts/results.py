"""Operation outcomes and results.

These types answer: "What did an analysis produce?"

IMPORTANT:
- Result.status uses Literal["success", "error"], NOT an enum
- Result is for recoverable failures that callers branch on; it never wraps
  programming errors
- CommandSynthesisResult.conflicts holds finding identifiers only; callers
  needing severity re-run the audit engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from cmdsynth.contracts.enums import CommandSeverity
from cmdsynth.contracts.errors import LedgerWindowError
from cmdsynth.contracts.types import CommandGraphId, CommandNodeId

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Tagged success/failure value.

    Use the factory methods to create instances. Check ``is_success`` before
    reading ``value``.
    """

    status: Literal["success", "error"]
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(status="success", value=value)

    @classmethod
    def failure(cls, error: str) -> Result[T]:
        return cls(status="error", error=error)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def unwrap(self) -> T:
        """Return the value or raise LedgerWindowError with the failure reason."""
        if self.status == "error":
            raise LedgerWindowError(self.error or "unknown")
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class CommandGraphAudit:
    """A structural finding about a graph. Advisory only."""

    graph_id: CommandGraphId
    issue: str
    severity: CommandSeverity
    node_id: CommandNodeId | None = None


@dataclass(frozen=True, slots=True)
class CommandGraphTopology:
    """Topology analyzer output.

    Attributes:
        ordered: Kahn order; cycle members are absent
        layers: Node ids per wave; an empty graph yields one empty layer, a
            graph whose every node sits on or behind a cycle yields none
        indegree: Incoming edge count per node (duplicates counted)
        adjacency: Successor ids per node in edge order (duplicates kept)
        reverse: Predecessor ids per node in edge order (duplicates kept)
    """

    ordered: tuple[CommandNodeId, ...]
    layers: tuple[tuple[CommandNodeId, ...], ...]
    indegree: dict[str, int] = field(default_factory=dict)
    adjacency: dict[str, list[CommandNodeId]] = field(default_factory=dict)
    reverse: dict[str, list[CommandNodeId]] = field(default_factory=dict)

    @property
    def layer_of(self) -> dict[CommandNodeId, int]:
        """Wave index per node id, for nodes that landed in a layer."""
        return {node_id: index for index, layer in enumerate(self.layers) for node_id in layer}


@dataclass(frozen=True, slots=True)
class CommandGraphForecast:
    graph_id: CommandGraphId
    ready_in_ms: float
    wave_count: int
    blockers: int
    critical_path_length: int
    risk_score: int
    conflict_count: int
    cost: float = 0.0
    readiness: int = 0


@dataclass(frozen=True, slots=True)
class CommandSynthesisResult:
    """Go/no-go summary of a graph for external planners."""

    graph_id: CommandGraphId
    ready: bool
    conflicts: tuple[str, ...]
    critical_paths: tuple[CommandNodeId, ...]
    readiness_score: int
    execution_order: tuple[CommandNodeId, ...]
    forecast_minutes: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "graphId": self.graph_id,
            "ready": self.ready,
            "conflicts": list(self.conflicts),
            "criticalPaths": list(self.critical_paths),
            "readinessScore": self.readiness_score,
            "executionOrder": list(self.execution_order),
            "forecastMinutes": self.forecast_minutes,
        }
