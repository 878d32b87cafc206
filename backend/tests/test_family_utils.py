"""Tests for relationship derivation.

Uses the sample-family.json file. George (p1) has children with Mary (p2)
and, through Henry (p7), with Elizabeth (p8).
"""

import os
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from family_utils import (
    # Lookup
    find_member,
    # Primitive relationships
    get_children_of,
    get_parents_of,
    are_spouses,
    get_spouses_of,
    get_siblings_of,
    get_all_ancestors,
    get_all_descendants,
    # Higher-order relationships
    get_grandparents,
    get_great_grandparents,
    get_grandchildren,
    get_great_grandchildren,
    get_aunts_uncles,
    get_cousins,
    get_nephews_nieces,
    get_relatives,
    # Classification & display
    is_half_sibling_relationship,
    get_member_display_info,
    summarize,
)


def ids(people):
    return [p.id for p in people]


# ============================================================================
# Lookup Tests
# ============================================================================

class TestLookup:
    """Tests for member lookup."""

    def test_find_existing(self, family):
        assert find_member("p3", family).first_name == "Edward"

    def test_find_missing(self, family):
        assert find_member("nope", family) is None

    def test_virtual_root_never_resolves(self, family, make_member):
        members = family + [make_member("root")]
        assert find_member("root", members) is None

    def test_empty_id(self, family):
        assert find_member(None, family) is None
        assert find_member("", family) is None


# ============================================================================
# Primitive Relationship Tests
# ============================================================================

class TestPrimitiveRelationships:
    """Tests for parents, children, spouses and siblings."""

    def test_children_from_either_slot(self, family):
        assert ids(get_children_of("p1", family)) == ["p3", "p5", "p7"]
        assert ids(get_children_of("p8", family)) == ["p7"]

    def test_children_of_unknown(self, family):
        assert get_children_of("nope", family) == []

    def test_parents_first_slot_first(self, family):
        edward = find_member("p3", family)
        assert ids(get_parents_of(edward, family)) == ["p1", "p2"]

    def test_parents_skip_dangling(self, make_member):
        child = make_member("c", parent_id="gone", second_parent_id="b")
        members = [make_member("b", 1920), child]
        assert ids(get_parents_of(child, members)) == ["b"]

    def test_are_spouses_order_insensitive(self, family):
        assert are_spouses("p1", "p2", family)
        assert are_spouses("p2", "p1", family)
        assert are_spouses("p6", "p5", family)

    def test_explicit_link_alone_is_not_shared_children(self, make_member):
        members = [make_member("a", spouse_id="b"), make_member("b", spouse_id="a")]
        assert not are_spouses("a", "b", members)

    def test_spouses_explicit_and_inferred(self, family):
        # Explicit link to Mary first, then Elizabeth through Henry
        assert ids(get_spouses_of("p1", family)) == ["p2", "p8"]

    def test_spouses_inferred_only(self, family):
        assert ids(get_spouses_of("p6", family)) == ["p5"]
        assert ids(get_spouses_of("p5", family)) == ["p6"]

    def test_spouses_reverse_explicit_link(self, make_member):
        members = [make_member("a", spouse_id="b"), make_member("b")]
        assert ids(get_spouses_of("b", members)) == ["a"]

    def test_spouses_skip_unresolvable(self, make_member):
        members = [make_member("a", spouse_id="ghost")]
        assert get_spouses_of("a", members) == []

    def test_spouses_symmetric_under_shared_children(self, family):
        for member in family:
            for spouse in get_spouses_of(member.id, family):
                if are_spouses(member.id, spouse.id, family):
                    assert member.id in ids(get_spouses_of(spouse.id, family))

    def test_siblings_full_and_half(self, family):
        full, half = get_siblings_of("p3", family)
        assert ids(full) == ["p5"]
        assert ids(half) == ["p7"]

    def test_half_sibling_view(self, family):
        full, half = get_siblings_of("p7", family)
        assert full == []
        assert ids(half) == ["p3", "p5"]

    def test_siblings_partition_is_disjoint(self, family):
        for member in family:
            full, half = get_siblings_of(member.id, family)
            assert not set(ids(full)) & set(ids(half))
            assert member.id not in ids(full) + ids(half)

    def test_same_parent_in_both_slots_is_one_parent(self, make_member):
        members = [
            make_member("p", 1920),
            make_member("a", parent_id="p", second_parent_id="p"),
            make_member("b", parent_id="p"),
        ]
        full, half = get_siblings_of("a", members)
        assert full == []
        assert ids(half) == ["b"]

    def test_single_parent_only_half_siblings(self, family):
        full, half = get_siblings_of("p12", family)
        assert full == [] and half == []

    def test_siblings_unknown(self, family):
        assert get_siblings_of("nope", family) == ([], [])


# ============================================================================
# Ancestry Walk Tests
# ============================================================================

class TestAncestryWalks:
    """Tests for transitive ancestor/descendant sets."""

    def test_all_ancestors(self, family):
        assert get_all_ancestors("p12", family) == {"p9", "p3", "p4", "p1", "p2"}

    def test_all_descendants(self, family):
        assert get_all_descendants("p1", family) == {"p3", "p5", "p7", "p9", "p10", "p11", "p12"}

    def test_leaf_has_no_descendants(self, family):
        assert get_all_descendants("p12", family) == set()

    def test_unknown_member(self, family):
        assert get_all_ancestors("nope", family) == set()
        assert get_all_descendants("nope", family) == set()

    def test_no_member_is_own_descendant(self, family):
        for member in family:
            assert member.id not in get_all_descendants(member.id, family)

    def test_existing_cycle_terminates(self, make_member):
        members = [make_member("a", parent_id="b"), make_member("b", parent_id="a")]
        assert get_all_ancestors("a", members) == {"b"}
        assert get_all_descendants("a", members) == {"b"}


# ============================================================================
# Higher-Order Relationship Tests
# ============================================================================

class TestHigherOrderRelationships:
    """Tests for grandparents, cousins and other derived sets."""

    def test_grandparents(self, family):
        assert ids(get_grandparents("p9", family)) == ["p1", "p2"]

    def test_grandparents_deduplicated(self, make_member):
        # Both parents are children of the same couple
        members = [
            make_member("g1", 1900), make_member("g2", 1900),
            make_member("a", 1925, parent_id="g1", second_parent_id="g2"),
            make_member("b", 1927, parent_id="g1", second_parent_id="g2"),
            make_member("c", 1950, parent_id="a", second_parent_id="b"),
        ]
        assert ids(get_grandparents("c", members)) == ["g1", "g2"]

    def test_great_grandparents(self, family):
        assert ids(get_great_grandparents("p12", family)) == ["p1", "p2"]

    def test_grandchildren(self, family):
        assert ids(get_grandchildren("p1", family)) == ["p9", "p10", "p11"]

    def test_great_grandchildren(self, family):
        assert ids(get_great_grandchildren("p1", family)) == ["p12"]

    def test_aunts_uncles_include_half(self, family):
        assert ids(get_aunts_uncles("p9", family)) == ["p5", "p7"]

    def test_cousins(self, family):
        assert ids(get_cousins("p9", family)) == ["p11"]
        assert ids(get_cousins("p11", family)) == ["p9", "p10"]

    def test_nephews_nieces(self, family):
        assert ids(get_nephews_nieces("p5", family)) == ["p9", "p10"]
        assert ids(get_nephews_nieces("p7", family)) == ["p9", "p10", "p11"]

    def test_relatives_categories(self, family):
        relatives = get_relatives("p3", family)
        assert list(relatives) == [
            "greatGrandparents", "grandparents", "parents", "auntsUncles", "spouses",
            "fullSiblings", "halfSiblings", "cousins", "children", "nephewsNieces",
            "grandchildren", "greatGrandchildren",
        ]
        assert ids(relatives["parents"]) == ["p1", "p2"]
        assert ids(relatives["spouses"]) == ["p4"]
        assert ids(relatives["children"]) == ["p9", "p10"]
        assert ids(relatives["nephewsNieces"]) == ["p11"]
        assert ids(relatives["grandchildren"]) == ["p12"]

    def test_relatives_unknown(self, family):
        assert get_relatives("nope", family) == {}


# ============================================================================
# Classification & Display Tests
# ============================================================================

class TestClassificationAndDisplay:
    """Tests for half-sibling detection and picker labels."""

    @pytest.mark.parametrize("parent_id,second_parent_id,expected", [
        ("p1", "p2", False),
        ("p2", "p1", False),
        ("p1", None, True),
        ("p1", "p8", True),
        ("p8", None, False),
        (None, None, False),
    ])
    def test_is_half_sibling(self, family, parent_id, second_parent_id, expected):
        assert is_half_sibling_relationship(parent_id, second_parent_id, family, "p3") is expected

    def test_half_sibling_of_single_parent_member(self, family):
        # Sophie only has William recorded; sharing him is never "both"
        assert is_half_sibling_relationship("p9", "p4", family, "p12") is True

    def test_half_sibling_unknown_reference(self, family):
        assert is_half_sibling_relationship("p1", None, family, "nope") is False

    def test_display_info(self, family):
        george = find_member("p1", family)
        assert get_member_display_info(george, family) == "George Harrison (3 children, partner: Mary, Elizabeth)"

    def test_display_info_single_child(self, family):
        william = find_member("p9", family)
        assert get_member_display_info(william, family) == "William Harrison (1 child)"

    def test_display_info_no_details(self, family):
        sophie = find_member("p12", family)
        assert get_member_display_info(sophie, family) == "Sophie Harrison"

    def test_summarize(self, family):
        summaries = summarize(get_children_of("p3", family))
        assert [s["fullName"] for s in summaries] == ["William Harrison", "Charlotte Harrison"]
