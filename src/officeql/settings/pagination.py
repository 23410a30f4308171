"""Pagination configuration settings."""

from pydantic import BaseModel, Field, model_validator


class PaginationSettings(BaseModel):
    """Page size limits applied by the pagination clause builder.

    A missing, zero or unparseable ``per_page`` falls back to
    ``default_page_size``; the result is always clamped to
    ``[1, max_page_size]``.
    """

    default_page_size: int = Field(
        default=20,
        ge=1,
        description="Page size used when the caller does not supply per_page"
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        description="Upper bound for per_page"
    )

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "PaginationSettings":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) "
                f"must be <= max_page_size ({self.max_page_size})"
            )
        return self
