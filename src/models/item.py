"""Item models for the example `items` resource."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NewItem(BaseModel):
    """Create payload. Extra fields are kept and stored as-is."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    description: str = ""


class ItemUpdate(BaseModel):
    """
    Partial update payload.

    Only the fields the caller actually sent form the merge mask, so an
    omitted `description` leaves the stored one alone. Omitting a field and
    sending it as null are different: null is rejected.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # Defaults are not validated, so this only sees fields that were sent.
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict:
        """Fields explicitly present in the payload, minus the immutable ones."""
        return self.model_dump(exclude_unset=True, exclude={"id", "createdOn"})
