"""Client records and search requests."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientRecord(BaseModel):
    """A client as read by the resolution engine.

    Records are created and mutated elsewhere; the engine only reads them.
    """

    id: UUID
    name: str | None = None
    firstname: str | None = None
    phone: str = Field(..., pattern=r"^\+?\d*$")
    campaign_ids: frozenset[UUID] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, str | None]:
        """Client fields exposed to API callers."""
        return {
            "id": str(self.id),
            "name": self.name,
            "firstname": self.firstname,
            "phone": self.phone,
        }


class SearchRequest(BaseModel):
    """A validated client search, already scoped to a resolved campaign."""

    campaign_id: UUID
    name: str | None = None
    first_name: str | None = None
    phone_fragment_start: str | None = None
    phone_fragment_end: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator(
        "name", "first_name", "phone_fragment_start", "phone_fragment_end"
    )
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def has_criteria(self) -> bool:
        """Whether any identifying field was supplied."""
        return any(
            (
                self.name,
                self.first_name,
                self.phone_fragment_start,
                self.phone_fragment_end,
            )
        )
