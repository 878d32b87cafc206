"""
Render-ready structures built from a flat member list.

build_family_tree returns a D3-compatible hierarchy (name / attributes /
children), build_family_graph a flat node+edge list for layout engines, and
build_timeline members grouped by birth year.
"""

import logging
from datetime import datetime
from typing import Any

from family_utils import VIRTUAL_ROOT_ID, get_children_of, get_spouses_of
from members import HALF_SIBLING_RELATIONSHIPS, Member, member_summary

logger = logging.getLogger("familytree.family_tree")


def _spouse_summary(spouse: Member, appears_elsewhere: bool) -> dict[str, Any]:
    return {
        "id": spouse.id,
        "name": spouse.full_name,
        "birthYear": spouse.birth_year,
        "gender": spouse.gender,
        "photoUrl": spouse.photo_url,
        "appearsElsewhere": appears_elsewhere,
    }


def _member_node(member: Member, generation: int, spouses: list[dict[str, Any]]) -> dict[str, Any]:
    """Convert a member to a tree node without children."""
    return {
        "name": member.full_name,
        "attributes": {
            "id": member.id,
            "birthYear": member.birth_year,
            "deathYear": member.death_year,
            "gender": member.gender,
            "photoUrl": member.photo_url,
            "occupation": member.occupation,
            "relationship": member.relationship,
            "generation": generation,
            "spouses": spouses,
        },
    }


def _virtual_root(children: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "name": "Family",
        "attributes": {"id": VIRTUAL_ROOT_ID, "generation": -1, "isVirtual": True},
        "children": children,
    }


def build_family_tree(members: list[Member], merge_spouses: bool = True) -> dict[str, Any] | None:
    """
    Build a single hierarchical tree from a flat member list.

    Roots are members with no parent inside the set. With ``merge_spouses``
    a parentless spouse is folded into their partner's node (listed under
    ``attributes.spouses``) instead of becoming a separate root; partners
    that have their own parents are listed but flagged ``appearsElsewhere``.
    Several top-level lineages are wrapped in a virtual root.

    Args:
        members: Member snapshot
        merge_spouses: Fold parentless spouses into their partner's node

    Returns:
        Root node, or None when ``members`` is empty
    """
    if not members:
        return None

    member_ids = {m.id for m in members}

    def has_parent_in_tree(member: Member) -> bool:
        return any(pid in member_ids for pid in member.parent_ids)

    processed: set[str] = set()

    def build_node(start: Member, start_generation: int) -> dict[str, Any]:
        """Build a node with descendants as children, depth-first with an explicit stack."""
        built: list[dict[str, Any]] = []
        stack: list[tuple[Member, int, dict[str, Any] | None]] = [(start, start_generation, None)]

        while stack:
            member, generation, parent_node = stack.pop()
            # Re-checked on pop: an earlier sibling subtree may have claimed it
            if member.id in processed:
                continue
            processed.add(member.id)

            household = [member]
            spouse_summaries = []
            for spouse in get_spouses_of(member.id, members):
                merged = merge_spouses and spouse.id not in processed and not has_parent_in_tree(spouse)
                if merged:
                    processed.add(spouse.id)
                    household.append(spouse)
                spouse_summaries.append(_spouse_summary(spouse, appears_elsewhere=not merged))

            node = _member_node(member, generation, spouse_summaries)
            node["children"] = []
            built.append(node)
            if parent_node is not None:
                parent_node["children"].append(node)

            children: list[Member] = []
            seen_children: set[str] = set()
            for parent in household:
                for child in get_children_of(parent.id, members):
                    if child.id in seen_children or child.id in processed:
                        continue
                    seen_children.add(child.id)
                    children.append(child)

            # Reversed so the first child is built first
            for child in reversed(children):
                stack.append((child, generation + 1, node))

        # Remove empty children array for leaf nodes
        for node in built:
            if not node["children"]:
                del node["children"]

        return built[0]

    root_candidates = [m for m in members if not has_parent_in_tree(m)]
    top_level: list[dict[str, Any]] = []

    if not root_candidates:
        logger.warning(
            "No root candidates among %d members (cyclic parent links); starting from %s",
            len(members), members[0].id,
        )
        top_level.append(build_node(members[0], 0))
    else:
        roots = root_candidates
        if merge_spouses:
            roots = [
                r for r in root_candidates
                if not any(has_parent_in_tree(s) for s in get_spouses_of(r.id, members))
            ]
            if not roots:
                logger.debug("Spouse filter removed every root candidate; using unfiltered set")
                roots = root_candidates

        for root in roots:
            if root.id in processed:
                continue
            top_level.append(build_node(root, 0))

    remaining = [m for m in members if m.id not in processed]
    if remaining:
        logger.debug("Emitting %d unvisited member(s) as extra roots", len(remaining))
    for member in remaining:
        if member.id not in processed:
            top_level.append(build_node(member, 0))

    if len(top_level) == 1:
        return top_level[0]
    return _virtual_root(top_level)


def _walk(node: dict[str, Any]):
    """Yield (member_id, generation) in visit order, including merged spouses."""
    stack = [node]
    while stack:
        current = stack.pop()
        attributes = current.get("attributes", {})
        if not attributes.get("isVirtual"):
            generation = attributes.get("generation", 0)
            yield attributes["id"], generation
            for spouse in attributes.get("spouses", []):
                if not spouse["appearsElsewhere"]:
                    yield spouse["id"], generation
        stack.extend(reversed(current.get("children", [])))


def collect_tree_member_ids(node: dict[str, Any] | None) -> list[str]:
    """Ids placed in a built tree, in visit order. The virtual root is skipped."""
    if node is None:
        return []
    return [member_id for member_id, _ in _walk(node)]


def compute_display_generations(members: list[Member]) -> dict[str, int]:
    """
    Recompute display generations from actual parent links.

    Stored ``generation`` values can go stale after edits; this takes the
    depth each member lands at in the built tree. Merged spouses share their
    partner's generation.
    """
    tree = build_family_tree(members)
    if tree is None:
        return {}
    generations: dict[str, int] = {}
    for member_id, generation in _walk(tree):
        generations.setdefault(member_id, generation)
    return generations


# ============================================================================
# Flat Exports
# ============================================================================

def build_family_graph(members: list[Member]) -> dict[str, list[dict[str, Any]]]:
    """
    Build a flat node/edge graph for layout engines.

    Parent edges are added for every in-set parent slot, except the second
    parent of half-siblings so only the shared parent is drawn. Spouse edges
    are added once per unordered pair.
    """
    member_ids = {m.id for m in members}

    nodes = [
        {
            "data": {
                "id": m.id,
                "label": m.full_name,
                "gender": m.gender,
                "birthYear": m.birth_year,
                "generation": m.generation,
            }
        }
        for m in members
    ]

    edges = []
    spouse_pairs: dict[tuple[str, str], None] = {}

    for m in members:
        half_sibling = m.relationship in HALF_SIBLING_RELATIONSHIPS

        parent_slots = [m.parent_id]
        if not half_sibling:
            parent_slots.append(m.second_parent_id)
        for pid in parent_slots:
            if pid and pid in member_ids:
                edges.append({
                    "data": {"id": f"parent-{pid}-{m.id}", "source": pid, "target": m.id, "type": "parent"}
                })

        if (
            not half_sibling
            and m.parent_id in member_ids
            and m.second_parent_id in member_ids
        ):
            spouse_pairs.setdefault(tuple(sorted((m.parent_id, m.second_parent_id))), None)

        if m.spouse_id in member_ids and m.spouse_id != m.id:
            spouse_pairs.setdefault(tuple(sorted((m.id, m.spouse_id))), None)

    for first, second in spouse_pairs:
        edges.append({
            "data": {"id": f"spouse-{first}-{second}", "source": first, "target": second, "type": "spouse"}
        })

    logger.debug("Built graph with %d nodes and %d edges", len(nodes), len(edges))
    return {"nodes": nodes, "edges": edges}


def build_timeline(members: list[Member]) -> dict[str, Any]:
    """Group members by birth year and report the year range."""
    years = [m.birth_year for m in members]
    current_year = datetime.now().year
    min_year = min(years) if years else current_year
    max_year = max(years) if years else current_year

    members_by_year: dict[int, list[dict[str, Any]]] = {}
    for member in sorted(members, key=lambda m: m.birth_year):
        members_by_year.setdefault(member.birth_year, []).append(member_summary(member))

    return {
        "minYear": min_year,
        "maxYear": max_year,
        "yearCount": max_year - min_year + 1,
        "maxMembersInYear": max([1] + [len(group) for group in members_by_year.values()]),
        "membersByYear": members_by_year,
    }
