"""Family relationship derivation over a flat list of member records.

Every function here is pure: it reads the supplied ``members`` snapshot and
returns new lists or sets. Unknown ids yield empty results, never exceptions.
"""

import logging
from typing import Any, Iterable

from members import Member, member_summary

logger = logging.getLogger("familytree.family_utils")

VIRTUAL_ROOT_ID = "root"


# ============================================================================
# Lookup Helpers
# ============================================================================

def find_member(member_id: str | None, members: list[Member]) -> Member | None:
    """Find a member by id. The virtual tree root never resolves."""
    if not member_id or member_id == VIRTUAL_ROOT_ID:
        return None
    for member in members:
        if member.id == member_id:
            return member
    return None


def _index(members: list[Member]) -> dict[str, Member]:
    return {m.id: m for m in members}


def _unique_by_id(people: Iterable[Member]) -> list[Member]:
    """Collapse repeats reached through several paths, keeping first occurrence."""
    unique: dict[str, Member] = {}
    for person in people:
        unique.setdefault(person.id, person)
    return list(unique.values())


# ============================================================================
# Primitive Relationships
# ============================================================================

def get_children_of(member_id: str, members: list[Member]) -> list[Member]:
    """Get all members that list ``member_id`` in either parent slot."""
    return [m for m in members if m.parent_id == member_id or m.second_parent_id == member_id]


def get_parents_of(member: Member, members: list[Member]) -> list[Member]:
    """Get 0-2 parents of a member, first slot first. Dangling links are skipped."""
    by_id = _index(members)
    return [by_id[pid] for pid in member.parent_ids if pid in by_id]


def are_spouses(member1_id: str, member2_id: str, members: list[Member]) -> bool:
    """Check whether two members share at least one child."""
    return any(
        (m.parent_id == member1_id and m.second_parent_id == member2_id)
        or (m.parent_id == member2_id and m.second_parent_id == member1_id)
        for m in members
    )


def get_spouses_of(member_id: str, members: list[Member]) -> list[Member]:
    """
    Get all spouses/partners of a member.

    Union of the explicit ``spouseId`` link (in both directions) and partners
    inferred from shared children. De-duplicated by id; explicit links first.
    """
    member = find_member(member_id, members)
    if not member:
        return []

    spouse_ids: list[str] = []
    if member.spouse_id:
        spouse_ids.append(member.spouse_id)
    spouse_ids.extend(m.id for m in members if m.spouse_id == member_id)

    for m in members:
        if m.parent_id == member_id and m.second_parent_id:
            spouse_ids.append(m.second_parent_id)
        if m.second_parent_id == member_id and m.parent_id:
            spouse_ids.append(m.parent_id)

    by_id = _index(members)
    spouses = []
    seen = {member_id}
    for sid in spouse_ids:
        if sid in seen or sid not in by_id:
            continue
        seen.add(sid)
        spouses.append(by_id[sid])
    return spouses


def get_siblings_of(member_id: str, members: list[Member]) -> tuple[list[Member], list[Member]]:
    """
    Get siblings of a member split into (full_siblings, half_siblings).

    Full siblings share both of the member's parents (only possible when the
    member has both slots filled); half siblings share exactly one.
    """
    member = find_member(member_id, members)
    if not member:
        return [], []

    full_siblings: list[Member] = []
    half_siblings: list[Member] = []

    for m in members:
        if m.id == member_id:
            continue

        other_parents = {m.parent_id, m.second_parent_id} - {None}
        shares_first = bool(member.parent_id) and member.parent_id in other_parents
        # The same id in both slots is one parent, not two
        shares_second = (
            bool(member.second_parent_id)
            and member.second_parent_id != member.parent_id
            and member.second_parent_id in other_parents
        )

        if shares_first and shares_second:
            full_siblings.append(m)
        elif shares_first or shares_second:
            half_siblings.append(m)

    return full_siblings, half_siblings


def get_all_ancestors(member_id: str, members: list[Member]) -> set[str]:
    """
    Get ids of every ancestor reachable through parent slots.

    Walks with an explicit stack and visited set so existing cycles in the
    data stop the walk instead of looping. The starting member is excluded.
    """
    by_id = _index(members)
    if member_id not in by_id:
        return set()

    visited: set[str] = set()
    stack = [member_id]
    while stack:
        current = by_id[stack.pop()]
        for pid in current.parent_ids:
            if pid in by_id and pid not in visited:
                visited.add(pid)
                stack.append(pid)

    visited.discard(member_id)
    return visited


def get_all_descendants(member_id: str, members: list[Member]) -> set[str]:
    """Get ids of every descendant reachable through children. Starting member excluded."""
    if find_member(member_id, members) is None:
        return set()

    children_by_parent: dict[str, list[str]] = {}
    for m in members:
        for pid in m.parent_ids:
            children_by_parent.setdefault(pid, []).append(m.id)

    visited: set[str] = set()
    stack = [member_id]
    while stack:
        for child_id in children_by_parent.get(stack.pop(), []):
            if child_id not in visited:
                visited.add(child_id)
                stack.append(child_id)

    visited.discard(member_id)
    return visited


# ============================================================================
# Higher-Order Relationships
# ============================================================================

def get_grandparents(member_id: str, members: list[Member]) -> list[Member]:
    """Get grandparents of a member (parents of their parents)."""
    member = find_member(member_id, members)
    if not member:
        return []
    return _unique_by_id(
        gp for parent in get_parents_of(member, members) for gp in get_parents_of(parent, members)
    )


def get_great_grandparents(member_id: str, members: list[Member]) -> list[Member]:
    """Get great-grandparents of a member."""
    return _unique_by_id(
        ggp for gp in get_grandparents(member_id, members) for ggp in get_parents_of(gp, members)
    )


def get_grandchildren(member_id: str, members: list[Member]) -> list[Member]:
    """Get grandchildren of a member (children of their children)."""
    return _unique_by_id(
        gc for child in get_children_of(member_id, members) for gc in get_children_of(child.id, members)
    )


def get_great_grandchildren(member_id: str, members: list[Member]) -> list[Member]:
    """Get great-grandchildren of a member."""
    return _unique_by_id(
        ggc for gc in get_grandchildren(member_id, members) for ggc in get_children_of(gc.id, members)
    )


def get_aunts_uncles(member_id: str, members: list[Member]) -> list[Member]:
    """Get aunts and uncles of a member (full and half siblings of their parents)."""
    member = find_member(member_id, members)
    if not member:
        return []

    aunts_uncles = []
    for parent in get_parents_of(member, members):
        full, half = get_siblings_of(parent.id, members)
        aunts_uncles.extend(full)
        aunts_uncles.extend(half)
    return _unique_by_id(aunts_uncles)


def get_cousins(member_id: str, members: list[Member]) -> list[Member]:
    """Get cousins of a member (children of their aunts and uncles)."""
    return _unique_by_id(
        child for au in get_aunts_uncles(member_id, members) for child in get_children_of(au.id, members)
    )


def get_nephews_nieces(member_id: str, members: list[Member]) -> list[Member]:
    """Get nephews and nieces of a member (children of their siblings)."""
    full, half = get_siblings_of(member_id, members)
    return _unique_by_id(
        child for sibling in full + half for child in get_children_of(sibling.id, members)
    )


def get_relatives(member_id: str, members: list[Member]) -> dict[str, list[Member]]:
    """Get every derived relationship category for a member, keyed for display."""
    member = find_member(member_id, members)
    if not member:
        return {}

    full_siblings, half_siblings = get_siblings_of(member_id, members)
    relatives = {
        "greatGrandparents": get_great_grandparents(member_id, members),
        "grandparents": get_grandparents(member_id, members),
        "parents": get_parents_of(member, members),
        "auntsUncles": get_aunts_uncles(member_id, members),
        "spouses": get_spouses_of(member_id, members),
        "fullSiblings": full_siblings,
        "halfSiblings": half_siblings,
        "cousins": get_cousins(member_id, members),
        "children": get_children_of(member_id, members),
        "nephewsNieces": get_nephews_nieces(member_id, members),
        "grandchildren": get_grandchildren(member_id, members),
        "greatGrandchildren": get_great_grandchildren(member_id, members),
    }
    logger.debug(
        "Derived relatives for %s: %s",
        member_id,
        {key: len(value) for key, value in relatives.items()},
    )
    return relatives


# ============================================================================
# Sibling Classification & Display
# ============================================================================

def is_half_sibling_relationship(
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
    reference_member_id: str,
) -> bool:
    """
    Determine whether proposed parents make a new member a half-sibling of
    the reference member: at least one parent shared, but not both.
    """
    reference = find_member(reference_member_id, members)
    if not reference or not parent_id:
        return False

    ref_parents = {reference.parent_id, reference.second_parent_id} - {None}
    proposed = {parent_id, second_parent_id} - {None}

    shares_any = bool(ref_parents & proposed)
    shares_both = len(ref_parents) == 2 and ref_parents == proposed
    return shares_any and not shares_both


def get_member_display_info(member: Member, members: list[Member]) -> str:
    """Format a member's name with child count and partner names, for pickers."""
    children = get_children_of(member.id, members)
    spouses = get_spouses_of(member.id, members)

    details = []
    if children:
        details.append(f"{len(children)} child{'ren' if len(children) > 1 else ''}")
    if spouses:
        details.append(f"partner: {', '.join(s.first_name for s in spouses)}")

    info = f"{member.first_name} {member.last_name}"
    if details:
        info += f" ({', '.join(details)})"
    return info


def summarize(people: list[Member]) -> list[dict[str, Any]]:
    """Convert members to display dicts."""
    return [member_summary(p) for p in people]
