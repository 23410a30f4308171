"""Translation and language resolution settings."""

from typing import List

from pydantic import BaseModel, Field


class TranslationSettings(BaseModel):
    """Settings for translation joins.

    ``default_language_id`` is the last step of the language resolution
    precedence (explicit ``language_id``, then ``language_code``, then this).
    """

    default_language_id: int = Field(
        default=1,
        ge=1,
        description="Language id used when neither language_id nor language_code is supplied"
    )

    untranslated_lookups: List[str] = Field(
        default=["languages", "currencies"],
        description="Lookup tables that have no translation join (their code is the display text)",
    )
