"""VocabCard: one vocabulary entry as stored in the card collection."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class VocabCard(BaseModel):
    """A word, its meaning and an optional usage example."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque unique token assigned at creation.")
    word: str = Field(..., min_length=1)
    meaning: str = Field(..., min_length=1)
    example: str = ""

    @field_validator("word", "meaning", "example", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


# Schema used to encode and decode the whole collection in one payload.
CardCollection = TypeAdapter(list[VocabCard])


__all__ = ["VocabCard", "CardCollection"]
