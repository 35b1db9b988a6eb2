from pydantic import ConfigDict, field_validator

from shared.dal.models import RecipeDraft

REQUIRED_FIELDS = ("title", "ingredients", "instructions")


class RecipeInput(RecipeDraft):
    """Recipe fields as submitted by a client for create or full replacement."""

    # Clients echo back read-only fields such as id or author; they are ignored.
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    @field_validator("prep_time", "cook_time", "servings", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v
