"""Kinship labels for newly added members."""

from members import Member

# generation distance -> (masculine, feminine); distances past 4 reuse the last entry
ANCESTOR_LABELS = {
    1: ("father", "mother"),
    2: ("grandfather", "grandmother"),
    3: ("great-grandfather", "great-grandmother"),
    4: ("great-great-grandfather", "great-great-grandmother"),
}

DESCENDANT_LABELS = {
    1: ("son", "daughter"),
    2: ("grandson", "granddaughter"),
    3: ("great-grandson", "great-granddaughter"),
    4: ("great-great-grandson", "great-great-granddaughter"),
}

SIBLING_LABELS = ("brother", "sister")
HALF_SIBLING_LABELS = ("half-brother", "half-sister")

MAX_LABELLED_DISTANCE = max(ANCESTOR_LABELS)


def _pick(labels: tuple[str, str], gender: str | None) -> str:
    # Only an explicit "female" selects the feminine label; unknown and "other" fall back to masculine.
    return labels[1] if gender == "female" else labels[0]


def calculate_relationship(
    member_type: str,
    gender: str | None,
    generation_diff: int = 1,
    is_half_sibling: bool = False,
) -> str:
    """
    Map a coarse member type to a specific kinship label.

    Args:
        member_type: 'ancestor', 'descendant', 'sibling' or 'spouse'
        gender: 'male', 'female', 'other' or None
        generation_diff: 1 = parent/child, 2 = grand-, 3 = great-, 4+ = great-great-
        is_half_sibling: Only used for siblings

    Returns:
        A label from the relationship vocabulary, or 'other' for unknown member types.
    """
    if generation_diff < 1:
        raise ValueError(f"generation_diff must be at least 1, got {generation_diff}")

    distance = min(generation_diff, MAX_LABELLED_DISTANCE)

    if member_type == "ancestor":
        return _pick(ANCESTOR_LABELS[distance], gender)
    if member_type == "descendant":
        return _pick(DESCENDANT_LABELS[distance], gender)
    if member_type == "sibling":
        return _pick(HALF_SIBLING_LABELS if is_half_sibling else SIBLING_LABELS, gender)
    if member_type == "spouse":
        return "spouse"
    return "other"


def suggest_generation(
    member_type: str | None,
    related_member: Member | None,
    member_count: int,
) -> int | None:
    """
    Suggest a generation number for a member being added next to ``related_member``.

    Returns None when there is nothing to base a suggestion on, meaning the
    caller should keep whatever the user entered.
    """
    if related_member is None:
        return 0 if member_count == 0 else None

    if member_type == "ancestor":
        return related_member.generation - 1
    if member_type == "descendant":
        return related_member.generation + 1
    if member_type in ("sibling", "spouse"):
        return related_member.generation
    return None
