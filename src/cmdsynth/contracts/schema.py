"""Planner input schema for command graphs.

Validates the camelCase payload external planners emit and converts it to
the frozen Graph Model. Field-level constraints only: edges that reference
unknown node ids are accepted as-is, because referential validation belongs
to the planner's own validation layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cmdsynth.contracts.enums import (
    CommandConstraintState,
    CommandExecutionState,
    CommandSeverity,
    CommandUrgency,
    GraphSource,
)
from cmdsynth.contracts.graph import (
    CommandEdge,
    CommandGraph,
    CommandNode,
    CommandWave,
    EdgePayloadValue,
    GraphMetadata,
    NodeMetadata,
    NodeStateWindow,
)
from cmdsynth.contracts.timestamps import format_timestamp
from cmdsynth.contracts.types import CommandGraphId, CommandNodeId, CommandWaveId


class _PlannerModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NodeMetadataSchema(_PlannerModel):
    owner: str = Field(min_length=1)
    region: str = Field(min_length=2)
    labels: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    tags_version: int = Field(default=0, ge=0)


class NodeStateWindowSchema(_PlannerModel):
    start: datetime = Field(alias="from")
    end: datetime = Field(alias="to")

    def to_window(self) -> NodeStateWindow:
        return NodeStateWindow(start=format_timestamp(self.start), end=format_timestamp(self.end))


class CommandNodeSchema(_PlannerModel):
    id: str = Field(min_length=3)
    graph_id: str = Field(min_length=3)
    name: str = Field(min_length=1)
    group: str = Field(min_length=1)
    weight: float = Field(ge=0, le=1_000)
    severity: CommandSeverity
    urgency: CommandUrgency
    state: CommandConstraintState
    created_at: datetime
    updated_at: datetime
    state_at: datetime
    state_reason: str | None = None
    state_window: NodeStateWindowSchema | None = None
    version: int = Field(ge=0)
    metadata: NodeMetadataSchema

    def to_node(self) -> CommandNode:
        return CommandNode(
            id=CommandNodeId(self.id),
            graph_id=CommandGraphId(self.graph_id),
            name=self.name,
            group=self.group,
            weight=self.weight,
            severity=self.severity,
            urgency=self.urgency,
            state=self.state,
            created_at=format_timestamp(self.created_at),
            updated_at=format_timestamp(self.updated_at),
            state_at=format_timestamp(self.state_at),
            state_reason=self.state_reason,
            state_window=self.state_window.to_window() if self.state_window is not None else None,
            version=self.version,
            metadata=NodeMetadata(
                owner=self.metadata.owner,
                region=self.metadata.region,
                labels=tuple(self.metadata.labels),
                tags=tuple(self.metadata.tags),
                tags_version=self.metadata.tags_version,
            ),
        )


class CommandEdgeSchema(_PlannerModel):
    source: str = Field(alias="from", min_length=3)
    target: str = Field(alias="to", min_length=3)
    order: int = Field(ge=0, le=1_000)
    latency_budget_ms: float = Field(ge=1, le=120_000)
    cost: float = Field(ge=0, le=1_000)
    confidence: float = Field(ge=0, le=1)
    payload: dict[str, EdgePayloadValue] | None = None

    def to_edge(self) -> CommandEdge:
        return CommandEdge(
            source=CommandNodeId(self.source),
            target=CommandNodeId(self.target),
            order=self.order,
            latency_budget_ms=self.latency_budget_ms,
            cost=self.cost,
            confidence=self.confidence,
            payload=self.payload,
        )


class CommandWaveSchema(_PlannerModel):
    id: str = Field(min_length=3)
    graph_id: str = Field(min_length=3)
    title: str = Field(min_length=1)
    index: int = Field(ge=0)
    commands: list[CommandNodeSchema] = Field(default_factory=list)
    depends_on: list[str] = Field(default_factory=list)
    execution_state: CommandExecutionState = CommandExecutionState.QUEUED

    def to_wave(self) -> CommandWave:
        return CommandWave(
            id=CommandWaveId(self.id),
            graph_id=CommandGraphId(self.graph_id),
            title=self.title,
            index=self.index,
            commands=tuple(node.to_node() for node in self.commands),
            depends_on=tuple(CommandWaveId(wave_id) for wave_id in self.depends_on),
            execution_state=self.execution_state,
        )


class GraphMetadataSchema(_PlannerModel):
    source: GraphSource
    revision: int = Field(ge=0)
    requested_by: str = Field(min_length=1)
    notes: list[str] = Field(default_factory=list)


class CommandGraphSchema(_PlannerModel):
    id: str = Field(min_length=1)
    tenant: str = Field(min_length=2)
    run_id: str = Field(min_length=3)
    root_plan_id: str = Field(min_length=3)
    nodes: list[CommandNodeSchema]
    edges: list[CommandEdgeSchema]
    waves: list[CommandWaveSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    metadata: GraphMetadataSchema

    def to_graph(self) -> CommandGraph:
        return CommandGraph(
            id=CommandGraphId(self.id),
            tenant=self.tenant,
            run_id=self.run_id,
            root_plan_id=self.root_plan_id,
            nodes=tuple(node.to_node() for node in self.nodes),
            edges=tuple(edge.to_edge() for edge in self.edges),
            waves=tuple(wave.to_wave() for wave in self.waves),
            created_at=format_timestamp(self.created_at),
            updated_at=format_timestamp(self.updated_at),
            metadata=GraphMetadata(
                source=self.metadata.source,
                revision=self.metadata.revision,
                requested_by=self.metadata.requested_by,
                notes=tuple(self.metadata.notes),
            ),
        )


def parse_command_graph(raw: Mapping[str, Any]) -> CommandGraph:
    """Validate a planner payload and build a CommandGraph.

    Timestamps are normalized to the canonical UTC format.

    Raises:
        pydantic.ValidationError: If a field is missing or out of range
        GraphContractError: If a node's state_at precedes its created_at, or a
            state window ends before it starts
    """
    return CommandGraphSchema.model_validate(raw).to_graph()
