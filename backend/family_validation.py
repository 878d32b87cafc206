"""Validation of proposed parent/child/spouse edits against genealogical rules.

Errors block submission, warnings are advisory. All checks run against the
caller's current member snapshot and never modify it.
"""

import logging
import os
from dataclasses import dataclass, field

from family_utils import (
    are_spouses,
    find_member,
    get_all_descendants,
    get_spouses_of,
)
from members import Member

logger = logging.getLogger("familytree.family_validation")

DEFAULT_MIN_PARENT_AGE = 12


def get_min_parent_age() -> int:
    """Minimum parent age in years, overridable with FAMILY_TREE_MIN_PARENT_AGE."""
    raw = os.getenv("FAMILY_TREE_MIN_PARENT_AGE")
    if not raw:
        return DEFAULT_MIN_PARENT_AGE
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid FAMILY_TREE_MIN_PARENT_AGE=%r", raw)
        return DEFAULT_MIN_PARENT_AGE


@dataclass
class ValidationResult:
    """Outcome of a single check."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def fail(self, message: str) -> "ValidationResult":
        self.is_valid = False
        self.errors.append(message)
        return self

    def warn(self, message: str) -> "ValidationResult":
        self.warnings.append(message)
        return self


def _name(member: Member | None, fallback: str) -> str:
    return member.first_name if member else fallback


# ============================================================================
# Structural Checks
# ============================================================================

def validate_not_self_parent(
    member_id: str | None,
    parent_id: str | None,
    second_parent_id: str | None,
) -> ValidationResult:
    """A person cannot be their own parent."""
    result = ValidationResult()
    if member_id and member_id in (parent_id, second_parent_id):
        result.fail("A person cannot be their own parent.")
    return result


def validate_different_parents(parent_id: str | None, second_parent_id: str | None) -> ValidationResult:
    """Both parent slots cannot point at the same person."""
    result = ValidationResult()
    if parent_id and second_parent_id and parent_id == second_parent_id:
        result.fail("First and second parent cannot be the same person.")
    return result


def validate_no_circular_relationship(
    member_id: str | None,
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
) -> ValidationResult:
    """A proposed parent cannot already be a descendant of the member."""
    result = ValidationResult()
    if not member_id:
        return result

    descendants = get_all_descendants(member_id, members)
    for pid in (parent_id, second_parent_id):
        if pid and pid in descendants:
            parent = find_member(pid, members)
            result.fail(
                f"Cannot set {_name(parent, 'this person')} as parent - they are a descendant "
                f"of this person (circular relationship)."
            )
    return result


# ============================================================================
# Generation Checks (advisory)
# ============================================================================

def validate_generation_consistency(
    member_generation: int,
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
) -> ValidationResult:
    """Parents should come from an earlier generation. Warning only: generation is advisory."""
    result = ValidationResult()
    for pid in (parent_id, second_parent_id):
        parent = find_member(pid, members)
        if parent and parent.generation >= member_generation:
            result.warn(
                f"Warning: {parent.first_name} (generation {parent.generation}) should be from an "
                f"earlier generation than the child (generation {member_generation})."
            )
    return result


def validate_parents_same_generation(
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
) -> ValidationResult:
    """Flag (but allow) parents recorded in different generations."""
    result = ValidationResult()
    if not parent_id or not second_parent_id:
        return result

    parent1 = find_member(parent_id, members)
    parent2 = find_member(second_parent_id, members)
    if parent1 and parent2 and parent1.generation != parent2.generation:
        result.warn(
            f"Note: {parent1.first_name} (generation {parent1.generation}) and "
            f"{parent2.first_name} (generation {parent2.generation}) are from different generations."
        )
    return result


# ============================================================================
# Partnership Checks
# ============================================================================

def validate_half_sibling_relationship(
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
    is_half_sibling: bool = False,
) -> ValidationResult:
    """A half-sibling cannot have two parents who already have children together."""
    result = ValidationResult()
    if not parent_id or not second_parent_id or not is_half_sibling:
        return result

    if are_spouses(parent_id, second_parent_id, members):
        parent1 = find_member(parent_id, members)
        parent2 = find_member(second_parent_id, members)
        result.fail(
            f"{_name(parent1, 'First parent')} and {_name(parent2, 'second parent')} already have "
            f"children together. A half-sibling cannot have the same two parents - that would make "
            f"them a full sibling."
        )
    return result


def check_new_parental_relationship(
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
) -> ValidationResult:
    """Inform when two parents who never had children together are paired for the first time."""
    result = ValidationResult()
    if not parent_id or not second_parent_id or parent_id == second_parent_id:
        return result
    if are_spouses(parent_id, second_parent_id, members):
        return result

    parent1 = find_member(parent_id, members)
    parent2 = find_member(second_parent_id, members)
    if not parent1 or not parent2:
        return result

    others1 = [s for s in get_spouses_of(parent_id, members) if s.id != second_parent_id]
    others2 = [s for s in get_spouses_of(second_parent_id, members) if s.id != parent_id]

    if others1 and others2:
        result.warn(
            f"This will create a new parental relationship between {parent1.first_name} and "
            f"{parent2.first_name}. Both already have other partners in the tree."
        )
    elif others1:
        result.warn(
            f"{parent1.first_name} already has children with "
            f"{', '.join(s.first_name for s in others1)}. This creates a new relationship with "
            f"{parent2.first_name}."
        )
    elif others2:
        result.warn(
            f"{parent2.first_name} already has children with "
            f"{', '.join(s.first_name for s in others2)}. This creates a new relationship with "
            f"{parent1.first_name}."
        )
    return result


# ============================================================================
# Age Checks
# ============================================================================

def validate_birth_year_consistency(
    child_birth_year: int | None,
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
    min_parent_age: int | None = None,
) -> ValidationResult:
    """A child cannot be born before a parent, nor before the parent reaches the minimum age."""
    result = ValidationResult()
    if child_birth_year is None:
        return result

    min_age = get_min_parent_age() if min_parent_age is None else min_parent_age
    for pid in (parent_id, second_parent_id):
        parent = find_member(pid, members)
        if not parent:
            continue

        age_diff = child_birth_year - parent.birth_year
        if age_diff < 0:
            result.fail(
                f"{parent.first_name} was born in {parent.birth_year}. A child cannot be born "
                f"before their parent ({child_birth_year})."
            )
        elif age_diff < min_age:
            result.fail(
                f"{parent.first_name} was born in {parent.birth_year}. They would have been only "
                f"{age_diff} years old when the child was born ({child_birth_year}). "
                f"Minimum parent age is {min_age}."
            )
    return result


def validate_ancestor_age(
    ancestor_birth_year: int | None,
    descendant_id: str | None,
    members: list[Member],
    generation_diff: int = 1,
    min_parent_age: int | None = None,
) -> ValidationResult:
    """An ancestor must be older than the descendant by the minimum age per generation."""
    result = ValidationResult()
    if ancestor_birth_year is None or not descendant_id:
        return result

    descendant = find_member(descendant_id, members)
    if not descendant:
        return result

    min_age = get_min_parent_age() if min_parent_age is None else min_parent_age
    min_age_diff = min_age * generation_diff
    actual_age_diff = descendant.birth_year - ancestor_birth_year

    if actual_age_diff < 0:
        result.fail(
            f"An ancestor cannot be younger than their descendant. {descendant.first_name} was "
            f"born in {descendant.birth_year}."
        )
    elif actual_age_diff < min_age_diff:
        result.fail(
            f"The ancestor would have been only {actual_age_diff} years old when "
            f"{descendant.first_name} was born ({descendant.birth_year}). For {generation_diff} "
            f"generation(s) difference, minimum is {min_age_diff} years."
        )
    return result


# ============================================================================
# Combined Validation
# ============================================================================

def run_all_validations(
    member_id: str | None,
    parent_id: str | None,
    second_parent_id: str | None,
    member_generation: int,
    members: list[Member],
    is_half_sibling: bool = False,
    birth_year: int | None = None,
    member_type: str | None = None,
    related_to_id: str | None = None,
    generation_diff: int = 1,
    min_parent_age: int | None = None,
) -> dict[str, list[str]]:
    """
    Run every check for a proposed edit.

    None of the checks short-circuits another; all messages are collected.

    Args:
        member_id: Id of the member being edited, or None for a new member
        parent_id: Proposed first parent
        second_parent_id: Proposed second parent
        member_generation: Proposed (advisory) generation of the member
        members: Current member snapshot
        is_half_sibling: The edit adds a half-sibling
        birth_year: Proposed birth year of the member
        member_type: 'ancestor', 'descendant', 'sibling', 'spouse' or None when editing
        related_to_id: Member the new one is being added relative to
        generation_diff: Generations between an added ancestor and related_to_id
        min_parent_age: Overrides the configured minimum parent age

    Returns:
        dict with 'errors' (blocking) and 'warnings' (advisory) lists
    """
    checks = [
        validate_not_self_parent(member_id, parent_id, second_parent_id),
        validate_different_parents(parent_id, second_parent_id),
        validate_no_circular_relationship(member_id, parent_id, second_parent_id, members),
        validate_generation_consistency(member_generation, parent_id, second_parent_id, members),
        validate_parents_same_generation(parent_id, second_parent_id, members),
        validate_half_sibling_relationship(parent_id, second_parent_id, members, is_half_sibling),
        check_new_parental_relationship(parent_id, second_parent_id, members),
    ]

    has_parent = bool(parent_id or second_parent_id)
    if birth_year is not None and (
        member_type in ("descendant", "sibling") or (member_type is None and has_parent)
    ):
        checks.append(validate_birth_year_consistency(
            birth_year, parent_id, second_parent_id, members, min_parent_age
        ))

    if birth_year is not None and member_type == "ancestor" and related_to_id:
        checks.append(validate_ancestor_age(
            birth_year, related_to_id, members, generation_diff, min_parent_age
        ))

    errors = [e for check in checks for e in check.errors]
    warnings = [w for check in checks for w in check.warnings]

    if errors:
        logger.debug("Edit for %s rejected with %d error(s)", member_id or "<new member>", len(errors))
    return {"errors": errors, "warnings": warnings}


# ============================================================================
# Option Filters
# ============================================================================

def get_valid_parent_options(
    member_id: str | None,
    members: list[Member],
    exclude_id: str | None = None,
) -> list[Member]:
    """Members that may be picked as a parent without creating a self-link or a cycle."""
    if not member_id or find_member(member_id, members) is None:
        return list(members)

    descendants = get_all_descendants(member_id, members)
    return [
        m for m in members
        if m.id != member_id and m.id not in descendants and m.id != exclude_id
    ]


def get_second_parent_options(
    parent_id: str | None,
    options: list[Member],
    members: list[Member],
    is_half_sibling: bool = False,
) -> list[Member]:
    """
    Candidates for the second parent slot once the first is chosen.

    Half-siblings exclude the first parent's existing partners, since sharing
    both parents would make a full sibling. Same-generation candidates sort
    first, then existing partners.
    """
    if not parent_id:
        return []

    candidates = [m for m in options if m.id != parent_id]
    if is_half_sibling:
        partner_ids = {s.id for s in get_spouses_of(parent_id, members)}
        candidates = [m for m in candidates if m.id not in partner_ids]

    first_parent = find_member(parent_id, members)
    if first_parent:
        candidates.sort(key=lambda m: (
            m.generation != first_parent.generation,
            not are_spouses(parent_id, m.id, members),
        ))
    return candidates


def get_potential_spouses(
    member_id: str,
    parent_id: str | None,
    second_parent_id: str | None,
    members: list[Member],
) -> list[Member]:
    """Members that may be picked as spouse: not self, not a proposed parent, not a child."""
    excluded = {member_id, parent_id, second_parent_id} - {None}
    return [
        m for m in members
        if m.id not in excluded and member_id not in (m.parent_id, m.second_parent_id)
    ]
