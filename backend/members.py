"""Family member records and input schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


Gender = Literal["male", "female", "other"]

RelationshipType = Literal[
    # Great-great-grandparents
    "great-great-grandfather",
    "great-great-grandmother",
    # Great-grandparents
    "great-grandfather",
    "great-grandmother",
    # Grandparents
    "grandfather",
    "grandmother",
    # Parents
    "father",
    "mother",
    # Siblings
    "brother",
    "sister",
    "half-brother",
    "half-sister",
    # Spouse
    "spouse",
    # Children
    "son",
    "daughter",
    "stepson",
    "stepdaughter",
    # Grandchildren
    "grandson",
    "granddaughter",
    # Great-grandchildren
    "great-grandson",
    "great-granddaughter",
    # Great-great-grandchildren
    "great-great-grandson",
    "great-great-granddaughter",
    # Extended family
    "uncle",
    "aunt",
    "nephew",
    "niece",
    "cousin",
    "other",
]

HALF_SIBLING_RELATIONSHIPS = ("half-brother", "half-sister")

MIN_RECORD_YEAR = 1000


class Member(BaseModel):
    """A family member as supplied by the persistence layer.

    Relationships are never stored here beyond the raw parent/spouse slots;
    everything else is derived on demand by ``family_utils``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    first_name: str
    last_name: str = ""
    birth_year: int
    death_year: int | None = None
    gender: Gender | None = None
    generation: int = 0
    parent_id: str | None = None
    second_parent_id: str | None = None
    spouse_id: str | None = None
    photo_url: str | None = None
    occupation: str | None = None
    biography: str | None = None
    birth_place: str | None = None
    death_place: str | None = None
    relationship: str | None = "other"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def parent_ids(self) -> tuple[str, ...]:
        """Populated parent slots, first slot first."""
        return tuple(pid for pid in (self.parent_id, self.second_parent_id) if pid)


def _check_years(birth_year: int | None, death_year: int | None) -> None:
    current_year = datetime.now().year
    for label, year in (("Birth year", birth_year), ("Death year", death_year)):
        if year is None:
            continue
        if year < MIN_RECORD_YEAR:
            raise ValueError(f"{label} must be at least {MIN_RECORD_YEAR}")
        if year > current_year:
            raise ValueError(f"{label} cannot be in the future")
    if birth_year is not None and death_year is not None and death_year < birth_year:
        raise ValueError(f"Death year ({death_year}) is before birth year ({birth_year})")


class MemberCreate(BaseModel):
    """Input accepted when a new member is added through the UI form."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    birth_year: int
    death_year: int | None = None
    birth_place: str | None = Field(default=None, max_length=200)
    death_place: str | None = Field(default=None, max_length=200)
    photo_url: str | None = None
    biography: str | None = Field(default=None, max_length=5000)
    occupation: str | None = Field(default=None, max_length=100)
    relationship: RelationshipType = "other"
    gender: Gender | None = None
    generation: int = 0
    parent_id: str | None = None
    second_parent_id: str | None = None
    spouse_id: str | None = None

    @model_validator(mode="after")
    def check_years(self):
        _check_years(self.birth_year, self.death_year)
        return self


class MemberUpdate(BaseModel):
    """Partial update; every field is optional and explicit nulls clear a value."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    birth_year: int | None = None
    death_year: int | None = None
    birth_place: str | None = Field(default=None, max_length=200)
    death_place: str | None = Field(default=None, max_length=200)
    photo_url: str | None = None
    biography: str | None = Field(default=None, max_length=5000)
    occupation: str | None = Field(default=None, max_length=100)
    relationship: RelationshipType | None = None
    gender: Gender | None = None
    generation: int | None = None
    parent_id: str | None = None
    second_parent_id: str | None = None
    spouse_id: str | None = None

    @model_validator(mode="after")
    def check_years(self):
        _check_years(self.birth_year, self.death_year)
        return self

    def apply_to(self, member: Member) -> Member:
        """Return a copy of ``member`` with the fields explicitly set on this update."""
        changes = self.model_dump(exclude_unset=True)
        return member.model_copy(update=changes)


def load_members(records: list[dict[str, Any]]) -> list[Member]:
    """Build Member objects from plain dicts (camelCase or snake_case keys)."""
    return [Member.model_validate(record) for record in records]


def member_summary(member: Member) -> dict[str, Any]:
    """Extract display data from a member."""
    return {
        "id": member.id,
        "firstName": member.first_name,
        "lastName": member.last_name,
        "fullName": member.full_name,
        "gender": member.gender,
        "birthYear": member.birth_year,
        "deathYear": member.death_year,
        "birthPlace": member.birth_place,
        "photoUrl": member.photo_url,
    }
