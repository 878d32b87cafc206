"""
Follow-up writes required after an accepted edit.

The engine never persists anything. These planners return the writes a
caller must perform as patch records:

    {"memberId": "m1", "field": "spouseId", "oldValue": "m2", "newValue": None}

``invert_patches`` turns a batch into its compensation batch so a caller can
roll back after a partial failure, mirroring a transaction undo.
"""

import logging
from typing import Any

from family_utils import find_member, get_spouses_of
from members import Member

logger = logging.getLogger("familytree.link_planner")

# Patch fields use the camelCase wire names
LINK_FIELDS = {
    "parentId": "parent_id",
    "secondParentId": "second_parent_id",
    "spouseId": "spouse_id",
}


def _patch(member_id: str, field: str, old_value: str | None, new_value: str | None) -> dict[str, Any]:
    return {"memberId": member_id, "field": field, "oldValue": old_value, "newValue": new_value}


# ============================================================================
# Planners
# ============================================================================

def plan_spouse_change(member_id: str, new_spouse_id: str | None, members: list[Member]) -> list[dict[str, Any]]:
    """
    Plan the writes that keep explicit spouse links bidirectional.

    Includes the member's own ``spouseId`` write, followed by:
    - clearing the old spouse's back-reference if it still points at the member
    - clearing the back-reference of whoever the new spouse was linked to
    - pointing the new spouse back at the member

    Naming the member as their own spouse plans nothing.
    """
    member = find_member(member_id, members)
    if not member or new_spouse_id == member_id:
        return []

    old_spouse_id = member.spouse_id
    if old_spouse_id == new_spouse_id:
        return []

    patches = [_patch(member_id, "spouseId", old_spouse_id, new_spouse_id)]

    if old_spouse_id:
        old_spouse = find_member(old_spouse_id, members)
        if old_spouse and old_spouse.spouse_id == member_id:
            patches.append(_patch(old_spouse_id, "spouseId", member_id, None))

    if new_spouse_id:
        new_spouse = find_member(new_spouse_id, members)
        if new_spouse and new_spouse.spouse_id != member_id:
            if new_spouse.spouse_id and new_spouse.spouse_id != member_id:
                their_old_spouse = find_member(new_spouse.spouse_id, members)
                if their_old_spouse and their_old_spouse.spouse_id == new_spouse_id:
                    patches.append(_patch(their_old_spouse.id, "spouseId", new_spouse_id, None))
            patches.append(_patch(new_spouse_id, "spouseId", new_spouse.spouse_id, member_id))

    return patches


def plan_ancestor_link(new_member_id: str, related_to_id: str, members: list[Member]) -> dict[str, Any]:
    """
    Plan attaching a newly added ancestor as a parent of ``related_to_id``.

    The first empty parent slot is filled. When both slots are taken nothing
    is written and a warning is returned instead.

    Returns:
        dict with 'patches' and 'warnings'
    """
    related = find_member(related_to_id, members)
    if not related:
        return {"patches": [], "warnings": []}

    if not related.parent_id:
        return {"patches": [_patch(related_to_id, "parentId", None, new_member_id)], "warnings": []}
    if not related.second_parent_id:
        return {"patches": [_patch(related_to_id, "secondParentId", None, new_member_id)], "warnings": []}

    return {"patches": [], "warnings": [f"{related.first_name} already has two parents."]}


def plan_member_removal(member_id: str, members: list[Member]) -> list[dict[str, Any]]:
    """Plan clearing every parent and spouse link that points at a removed member."""
    patches = []
    for m in members:
        if m.id == member_id:
            continue
        for field, attr in LINK_FIELDS.items():
            if getattr(m, attr) == member_id:
                patches.append(_patch(m.id, field, member_id, None))
    return patches


def suggest_parents(
    member_type: str | None,
    related_to_id: str | None,
    members: list[Member],
    is_half_sibling: bool = False,
) -> dict[str, str | None]:
    """
    Pre-fill parent slots for a member being added next to ``related_to_id``.

    A descendant takes the related member as first parent, plus their partner
    when they have exactly one. A sibling shares the related member's parents;
    a half-sibling only the first of them.
    """
    suggestion: dict[str, str | None] = {"parentId": None, "secondParentId": None}
    related = find_member(related_to_id, members)
    if not related:
        return suggestion

    if member_type == "descendant":
        suggestion["parentId"] = related.id
        spouses = get_spouses_of(related.id, members)
        if len(spouses) == 1:
            suggestion["secondParentId"] = spouses[0].id
    elif member_type == "sibling":
        parent_ids = [pid for pid in related.parent_ids if find_member(pid, members)]
        if parent_ids:
            suggestion["parentId"] = parent_ids[0]
        if len(parent_ids) > 1 and not is_half_sibling:
            suggestion["secondParentId"] = parent_ids[1]

    return suggestion


# ============================================================================
# Applying & Undo
# ============================================================================

def apply_patches(members: list[Member], patches: list[dict[str, Any]]) -> list[Member]:
    """
    Apply patches to a copy of the member list. Inputs are left untouched.

    Patches naming unknown members or fields are skipped with a warning.
    """
    by_id = {m.id: m for m in members}
    for patch in patches:
        member_id = patch["memberId"]
        attr = LINK_FIELDS.get(patch["field"])
        if member_id not in by_id or attr is None:
            logger.warning("Skipping patch for unknown member/field: %s.%s", member_id, patch["field"])
            continue
        by_id[member_id] = by_id[member_id].model_copy(update={attr: patch["newValue"]})

    return [by_id[m.id] for m in members]


def invert_patches(patches: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Compensation patches, reversed in LIFO order (last write undone first)."""
    return [
        _patch(p["memberId"], p["field"], p["newValue"], p["oldValue"])
        for p in reversed(patches)
    ]
