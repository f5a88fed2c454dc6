"""
Tree Source Adapter

Builds a TreeModel from JSON-shaped records as exported by the planning
canvas. Two record shapes are accepted:

    {"id", "type", "childIds", "parentId", "data": {...}}
    {"id", "type", "data": {"id", "type", "childIds", "parentId", "data": {...}}}

Arc nodes and any other type outside outline/act/chapter/scene are skipped.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import json

from ..contracts.base import Error, ErrorCode, TreeValidationError
from ..contracts.narrative import (
    NarrativeNode, NodeKind,
    OutlinePayload, ActPayload, ChapterPayload, ScenePayload, NodePayload,
)
from .model import TreeModel


_KINDS = {kind.value: kind for kind in NodeKind}


def _unwrap(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Strip the canvas wrapper around a narrative node, if present."""
    inner = record.get("data")
    if "childIds" not in record and isinstance(inner, Mapping) and "type" in inner:
        return inner
    return record


def _strings(value: Any) -> tuple:
    if not value:
        return ()
    return tuple(str(v) for v in value)


def _payload(kind: NodeKind, data: Mapping[str, Any]) -> NodePayload:
    common = dict(
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        goal=str(data.get("goal") or ""),
        timeline_event_ids=_strings(data.get("timelineEventIds")),
    )
    if kind is NodeKind.OUTLINE:
        return OutlinePayload(**common)
    if kind is NodeKind.ACT:
        return ActPayload(**common)
    if kind is NodeKind.CHAPTER:
        return ChapterPayload(**common)
    return ScenePayload(
        pov_character_id=data.get("povCharacterId"),
        character_ids=_strings(data.get("characters")),
        location_ids=_strings(data.get("locations") or data.get("worlds")),
        object_ids=_strings(data.get("objects")),
        lore_ids=_strings(data.get("lore")),
        **common
    )


def node_from_record(record: Mapping[str, Any]) -> Optional[NarrativeNode]:
    """Convert one record. Returns None for node types this engine ignores."""
    record = _unwrap(record)
    kind = _KINDS.get(record.get("type"))
    if kind is None:
        return None

    node_id = record.get("id")
    if not node_id:
        raise TreeValidationError(Error(
            code=ErrorCode.MALFORMED_RECORD,
            message="Narrative record without an id",
            context=(("type", str(record.get("type"))),),
        ))

    data = record.get("data") or {}
    if not isinstance(data, Mapping):
        raise TreeValidationError(Error(
            code=ErrorCode.MALFORMED_RECORD,
            message=f"Record '{node_id}' has non-object data",
        ))

    return NarrativeNode(
        node_id=str(node_id),
        kind=kind,
        child_ids=_strings(record.get("childIds")),
        parent_id=record.get("parentId"),
        payload=_payload(kind, data),
    )


def load_tree(
    records: Iterable[Mapping[str, Any]],
    root_ids: Optional[Sequence[str]] = None
) -> TreeModel:
    """Build a TreeModel from canvas records."""
    nodes: List[NarrativeNode] = []
    for record in records:
        node = node_from_record(record)
        if node is not None:
            nodes.append(node)
    return TreeModel(nodes, root_ids=root_ids)


def load_manuscript(
    path: Union[str, Path]
) -> Tuple[TreeModel, Optional[List[Mapping[str, Any]]]]:
    """
    Load a manuscript export.

    The file holds either a list of node records or an object with a
    "nodes" list, optional "rootIds" and optional "entities" records.
    Returns the tree and the entity records (None when absent).
    """
    with open(path, 'r', encoding='utf-8') as f:
        document = json.load(f)

    if isinstance(document, Mapping):
        tree = load_tree(document.get("nodes", []), root_ids=document.get("rootIds"))
        return tree, document.get("entities") or None
    return load_tree(document), None


def load_tree_file(path: Union[str, Path]) -> TreeModel:
    """Load only the narrative tree of a manuscript export."""
    tree, _ = load_manuscript(path)
    return tree
