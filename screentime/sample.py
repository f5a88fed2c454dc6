"""
Sample Manuscript

A small, fixed manuscript used by the demo CLI and as the server's
fallback when no SCREENTIME_MANUSCRIPT export is configured.

STRUCTURE:
==========
Outline
  Act I    -> Chapter 1 (3 scenes), Chapter 2 (2 scenes)
  Act II   -> Chapter 3 (2 scenes), Chapter 4 (3 scenes)
  Act III  -> Chapter 5 (2 scenes)
"""

from __future__ import annotations
from typing import Any, Dict, List, Tuple

from .contracts.narrative import Entity, EntityKind
from .entities import EntityRegistry
from .tree import TreeModel, load_tree


# (scene id, title, pov, characters, locations, objects, lore, description)
_SCENES: Dict[str, List[Tuple]] = {
    "ch-1": [
        ("sc-1", "Scene 1: The Lighthouse", "char-mara", ("char-mara", "char-tobin"),
         ("loc-harbor",), ("obj-lens",), ("lore-tides",),
         "Mara finds the cracked lens while Tobin keeps watch. Elias is spoken of in whispers."),
        ("sc-2", "Scene 2: Harbor Market", "char-tobin", ("char-tobin", "char-ines"),
         ("loc-harbor", "loc-market"), (), (),
         "Tobin bargains with Ines for passage north."),
        ("sc-3", "Scene 3: Night Watch", "char-mara", ("char-mara",),
         ("loc-harbor",), ("obj-lens",), ("lore-tides",),
         "Alone on the gallery, Mara counts the dark ships."),
    ],
    "ch-2": [
        ("sc-4", "Scene 4: The Summons", "char-elias", ("char-elias", "char-mara", "char-quill"),
         ("loc-citadel",), ("obj-seal",), ("lore-order",),
         "Elias delivers the Order's summons; Quill records every word."),
        ("sc-5", "Departure", "char-mara", ("char-mara", "char-tobin"),
         ("loc-harbor",), ("obj-lens",), (),
         "The lighthouse goes dark behind them."),
    ],
    "ch-3": [
        ("sc-6", "Scene 6: Salt Road", "char-tobin", ("char-tobin", "char-mara", "char-vesna"),
         ("loc-saltroad",), (), ("lore-tides",),
         "Vesna ambushes the caravan and then offers a bargain."),
        ("sc-7", "Scene 7: Archive", "char-quill", ("char-quill", "char-oren"),
         ("loc-citadel",), ("obj-ledger",), ("lore-order",),
         "Quill and Oren uncover the missing ledger pages. Mara's name is on one."),
    ],
    "ch-4": [
        ("sc-8", "Scene 8: The Tribunal", "char-elias", ("char-elias", "char-oren", "char-saba"),
         ("loc-citadel",), ("obj-seal", "obj-ledger"), ("lore-order",),
         "Saba presides as Oren testifies against Elias."),
        ("sc-9", "Scene 9: Flight", "char-mara", ("char-mara", "char-vesna"),
         ("loc-saltroad",), ("obj-lens",), (),
         "Mara and Vesna escape across the flats."),
        ("sc-10", "Interlude - Letters", "char-ines", ("char-ines",),
         ("loc-market",), (), (),
         "Ines writes to Tobin and burns every draft."),
    ],
    "ch-5": [
        ("sc-11", "Scene 11: Return of the Light", "char-mara",
         ("char-mara", "char-tobin", "char-elias", "char-vesna"),
         ("loc-harbor",), ("obj-lens", "obj-seal"), ("lore-tides", "lore-order"),
         "The lens is restored. Saba watches from the breakwater."),
        ("sc-12", "Scene 12: Ledger Closed", "char-quill", ("char-quill", "char-saba"),
         ("loc-citadel",), ("obj-ledger",), ("lore-order",),
         "Quill seals the final entry."),
    ],
}

_CHAPTERS: Dict[str, List[Tuple[str, str, str]]] = {
    "act-1": [
        ("ch-1", "Chapter 1: Embers", "Establish the lighthouse and its keeper"),
        ("ch-2", "Chapter 2: The Call", "Pull Mara out of the harbor"),
    ],
    "act-2": [
        ("ch-3", "Chapter 3: Roads", "Widen the world"),
        ("ch-4", "Chapter 4: Judgement", "Break the alliance"),
    ],
    "act-3": [
        ("ch-5", "Chapter 5: Return", "Resolve the lens and the ledger"),
    ],
}

_ACTS: List[Tuple[str, str]] = [
    ("act-1", "Act I: Departure"),
    ("act-2", "Act II: Trials"),
    ("act-3", "Act III: Homecoming"),
]

OUTLINE_ID = "outline-glass-meridian"


def _record(node_id: str, kind: str, child_ids, parent_id, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": node_id,
        "type": kind,
        "childIds": list(child_ids),
        "parentId": parent_id,
        "data": data,
    }


def sample_records() -> List[Dict[str, Any]]:
    """Canvas-shaped records for the sample manuscript."""
    records = [_record(
        OUTLINE_ID, "outline", [a for a, _ in _ACTS], None,
        {"title": "The Glass Meridian", "description": "A keeper, a lens and a debt."},
    )]

    for act_id, act_title in _ACTS:
        chapters = _CHAPTERS[act_id]
        records.append(_record(
            act_id, "act", [c[0] for c in chapters], OUTLINE_ID,
            {"title": act_title},
        ))
        for chapter_id, chapter_title, goal in chapters:
            scenes = _SCENES[chapter_id]
            records.append(_record(
                chapter_id, "chapter", [s[0] for s in scenes], act_id,
                {"title": chapter_title, "goal": goal},
            ))
            for scene_id, title, pov, characters, locations, objects, lore, description in scenes:
                records.append(_record(
                    scene_id, "scene", [], chapter_id,
                    {
                        "title": title,
                        "description": description,
                        "povCharacterId": pov,
                        "characters": list(characters),
                        "locations": list(locations),
                        "objects": list(objects),
                        "lore": list(lore),
                    },
                ))
    return records


def sample_tree() -> TreeModel:
    return load_tree(sample_records())


_ENTITIES: Tuple[Entity, ...] = (
    Entity("char-mara", "Mara", "amber", "Primary", EntityKind.CHARACTER, ("protagonist", "keeper")),
    Entity("char-tobin", "Tobin", "teal", "Primary", EntityKind.CHARACTER, ("smuggler",)),
    Entity("char-elias", "Elias", "crimson", "Primary", EntityKind.CHARACTER, ("antagonist", "envoy")),
    Entity("char-quill", "Quill", "slate", "Secondary", EntityKind.CHARACTER, ("archivist",)),
    Entity("char-vesna", "Vesna", "violet", "Secondary", EntityKind.CHARACTER, ("raider",)),
    Entity("char-oren", "Oren", "olive", "Secondary", EntityKind.CHARACTER, ("clerk",)),
    Entity("char-ines", "Ines", "rose", "Tertiary", EntityKind.CHARACTER, ("merchant",)),
    Entity("char-saba", "Saba", "indigo", "Tertiary", EntityKind.CHARACTER, ("magistrate",)),
    Entity("char-wren", "Wren", "sand", "Tertiary", EntityKind.CHARACTER, ("child", "rumour")),
    Entity("loc-harbor", "Greywater Harbor", "blue", "Primary", EntityKind.LOCATION, ("coast",)),
    Entity("loc-citadel", "Meridian Citadel", "gold", "Primary", EntityKind.LOCATION, ("capital",)),
    Entity("loc-market", "Lantern Market", "orange", "Secondary", EntityKind.LOCATION, ("harbor district",)),
    Entity("loc-saltroad", "Salt Road", "stone", "Secondary", EntityKind.LOCATION, ("flats",)),
    Entity("obj-lens", "Fresnel Lens", "cyan", "Primary", EntityKind.OBJECT, ("artifact",)),
    Entity("obj-seal", "Order Seal", "gold", "Secondary", EntityKind.OBJECT, ("insignia",)),
    Entity("obj-ledger", "Debt Ledger", "brown", "Secondary", EntityKind.OBJECT, ("document",)),
    Entity("lore-tides", "The Dark Tides", "navy", "Primary", EntityKind.LORE, ("legend",)),
    Entity("lore-order", "The Meridian Order", "purple", "Secondary", EntityKind.LORE, ("faction",)),
)


def sample_registry(kind: EntityKind = EntityKind.CHARACTER) -> EntityRegistry:
    """Sample entity rows of one kind."""
    return EntityRegistry(e for e in _ENTITIES if e.kind is kind)
