"""All status codes, levels, and kinds used across subsystem boundaries.

Values are the exact strings external planners emit and that cross the
persistence boundary in ledger records and graph events.
"""

from enum import StrEnum


class CommandSeverity(StrEnum):
    """Severity classification of a command node or audit finding."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class CommandUrgency(StrEnum):
    """Urgency classification of a command node."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CommandConstraintState(StrEnum):
    """Lifecycle state of a command node.

    BLOCKED and DEFERRED nodes count as forecast blockers.
    """

    PENDING = "pending"
    ACTIVE = "active"
    DEFERRED = "deferred"
    BLOCKED = "blocked"
    RESOLVED = "resolved"


class CommandExecutionState(StrEnum):
    """Execution state of a wave or an observed command sample."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    RETRY = "retry"


class GraphEventType(StrEnum):
    """Kind of fact recorded in a CommandGraphEvent."""

    NODE_ADDED = "node_added"
    EDGE_ADDED = "edge_added"
    NODE_STATE_CHANGED = "node_state_changed"
    NODE_REMOVED = "node_removed"
    SNAPSHOT = "snapshot"


class GraphSource(StrEnum):
    """Planner generation that produced a graph."""

    PLANNER = "planner"
    PLANNER_V2 = "planner-v2"


# Rank tables used by risk heuristics. Unknown members are impossible:
# every enum member has an entry.
SEVERITY_RANK: dict[CommandSeverity, int] = {
    CommandSeverity.CRITICAL: 3,
    CommandSeverity.WARNING: 2,
    CommandSeverity.INFO: 1,
}

URGENCY_RANK: dict[CommandUrgency, int] = {
    CommandUrgency.HIGH: 3,
    CommandUrgency.MEDIUM: 2,
    CommandUrgency.LOW: 1,
}
