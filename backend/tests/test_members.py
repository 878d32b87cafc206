"""Tests for member records and input schemas."""

import os
import sys
from datetime import datetime

import pytest
from pydantic import ValidationError

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from members import Member, MemberCreate, MemberUpdate, load_members, member_summary


class TestMember:
    """Tests for the Member record."""

    def test_load_camel_case_records(self, family):
        """Records from the persistence layer use camelCase keys."""
        assert len(family) == 12
        edward = next(m for m in family if m.id == "p3")
        assert edward.first_name == "Edward"
        assert edward.parent_id == "p1"
        assert edward.second_parent_id == "p2"
        assert edward.spouse_id == "p4"

    def test_snake_case_keys_accepted(self):
        member = Member(id="a", first_name="Ann", birth_year=1950)
        assert member.last_name == ""
        assert member.generation == 0
        assert member.relationship == "other"

    def test_full_name(self, family):
        assert family[0].full_name == "George Harrison"
        assert Member(id="x", first_name="Solo", birth_year=1900).full_name == "Solo"

    def test_parent_ids_skips_empty_slots(self, family):
        by_id = {m.id: m for m in family}
        assert by_id["p3"].parent_ids == ("p1", "p2")
        assert by_id["p12"].parent_ids == ("p9",)
        assert by_id["p1"].parent_ids == ()

    def test_member_is_immutable(self, family):
        with pytest.raises(ValidationError):
            family[0].first_name = "Changed"

    def test_dump_by_alias(self, family):
        data = family[0].model_dump(by_alias=True)
        assert data["firstName"] == "George"
        assert data["spouseId"] == "p2"

    def test_member_summary(self, family):
        summary = member_summary(family[0])
        assert summary["fullName"] == "George Harrison"
        assert summary["birthYear"] == 1900
        assert summary["deathYear"] == 1970
        assert summary["birthPlace"] == "Leeds"

    def test_load_members_rejects_missing_birth_year(self):
        with pytest.raises(ValidationError):
            load_members([{"id": "a", "firstName": "Ann"}])


class TestMemberCreate:
    """Tests for new-member input validation."""

    def test_valid_create(self):
        data = MemberCreate(firstName="Ann", lastName="Lee", birthYear=1950, relationship="daughter")
        assert data.first_name == "Ann"
        assert data.relationship == "daughter"

    def test_name_required(self):
        with pytest.raises(ValidationError):
            MemberCreate(firstName="", lastName="Lee", birthYear=1950)

    def test_name_too_long(self):
        with pytest.raises(ValidationError):
            MemberCreate(firstName="A" * 51, lastName="Lee", birthYear=1950)

    def test_unknown_relationship_rejected(self):
        with pytest.raises(ValidationError):
            MemberCreate(firstName="Ann", lastName="Lee", birthYear=1950, relationship="godmother")

    def test_birth_year_lower_bound(self):
        with pytest.raises(ValidationError, match="at least 1000"):
            MemberCreate(firstName="Ann", lastName="Lee", birthYear=999)

    def test_birth_year_in_future(self):
        with pytest.raises(ValidationError, match="future"):
            MemberCreate(firstName="Ann", lastName="Lee", birthYear=datetime.now().year + 1)

    def test_death_before_birth(self):
        with pytest.raises(ValidationError, match="before birth year"):
            MemberCreate(firstName="Ann", lastName="Lee", birthYear=1950, deathYear=1940)


class TestMemberUpdate:
    """Tests for partial updates."""

    def test_apply_only_set_fields(self, family):
        update = MemberUpdate(occupation="Joiner")
        updated = update.apply_to(family[0])
        assert updated.occupation == "Joiner"
        assert updated.first_name == "George"
        assert family[0].occupation == "Carpenter"

    def test_explicit_null_clears_link(self, family):
        update = MemberUpdate.model_validate({"spouseId": None})
        updated = update.apply_to(family[0])
        assert updated.spouse_id is None

    def test_update_year_checks(self):
        with pytest.raises(ValidationError):
            MemberUpdate(birthYear=1990, deathYear=1980)
