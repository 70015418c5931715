# src/cmdsynth/core/canonical.py
"""
Canonical JSON serialization for deterministic hashing.

Two-phase approach:
1. Normalize: Convert tuples, enums and datetimes to JSON-safe primitives (our code)
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

IMPORTANT: NaN and Infinity are strictly REJECTED, not silently converted.
Ledger records are fingerprinted with these hashes, so a value that cannot
round-trip is an error rather than something to paper over.
"""

from __future__ import annotations

import hashlib
import math
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

import rfc8785

from cmdsynth.contracts.timestamps import format_timestamp
from cmdsynth.core.topology import to_nx_graph

if TYPE_CHECKING:
    from cmdsynth.contracts import CommandGraph

# Version string stored alongside hashes for verification
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    Raises:
        ValueError: If value is a non-finite float
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(f"Cannot canonicalize non-finite float: {obj}. Use None for missing values, not NaN.")
        return obj

    # StrEnum members are str subclasses; unwrap them before the primitive check
    if isinstance(obj, Enum):
        return obj.value

    if obj is None or isinstance(obj, str | int | bool):
        return obj

    if isinstance(obj, datetime):
        return format_timestamp(obj)

    return obj


def _normalize_for_canonical(data: Any) -> Any:
    """Recursively normalize a data structure for canonical JSON."""
    if isinstance(data, dict):
        return {str(k): _normalize_for_canonical(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize_for_canonical(v) for v in data]
    return _normalize_value(data)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Args:
        obj: Data structure to serialize

    Returns:
        Canonical JSON string (no whitespace, sorted keys)

    Raises:
        ValueError: If data contains NaN, Infinity, or other non-finite values
        TypeError: If data contains types that cannot be serialized
    """
    normalized = _normalize_for_canonical(obj)
    result: bytes = rfc8785.dumps(normalized)
    return result.decode("utf-8")


def stable_hash(obj: Any, version: str = CANONICAL_VERSION) -> str:
    """Compute stable hash of object.

    Args:
        obj: Data structure to hash
        version: Hash algorithm version (stored with records for verification)

    Returns:
        SHA-256 hex digest of canonical JSON
    """
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_topology_hash(graph: CommandGraph) -> str:
    """Hash the dependency structure of a graph.

    Covers node ids and every edge (parallel edges included) with its
    scheduling attributes. Insensitive to node/edge ordering, node state
    and timestamps, so normalizing or rewriting a graph keeps its hash.

    Returns:
        SHA-256 hash of the canonical topology representation.
    """
    nx_graph = to_nx_graph(graph)

    topology_data = {
        "nodes": sorted(str(node_id) for node_id in nx_graph.nodes()),
        "edges": sorted(
            (
                [u, v, data["order"], data["latency_budget_ms"], data["cost"]]
                for u, v, data in nx_graph.edges(data=True)
            ),
            key=canonical_json,
        ),
    }

    return stable_hash(topology_data)
