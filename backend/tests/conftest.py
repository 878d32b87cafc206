"""Shared fixtures.

Uses the sample-family.json file (four generations of the Harrison family,
including a second marriage and two married-in partners).
"""

import json
import os
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from members import Member, load_members


@pytest.fixture
def sample_family_path():
    """Path to the sample family file."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample-family.json")


@pytest.fixture
def family_records(sample_family_path):
    """Raw member dicts, as the persistence layer would supply them."""
    with open(sample_family_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def family(family_records):
    """Sample family as Member objects."""
    return load_members(family_records)


@pytest.fixture
def make_member():
    """Factory for small ad-hoc member sets."""
    def _make(member_id: str, birth_year: int = 1950, **fields) -> Member:
        fields.setdefault("first_name", member_id.upper())
        return Member(id=member_id, birth_year=birth_year, **fields)
    return _make
