import logging
from typing import Optional

from pydantic import Field

from .audit import AuditSettings
from .base import OfficeQLBaseSettings
from .pagination import PaginationSettings
from .translation import TranslationSettings


class _Settings(OfficeQLBaseSettings):
    """All officeql settings. Environment and ``.env`` handling is inherited."""

    pagination: PaginationSettings = Field(
        default_factory=PaginationSettings,
        description="Page size defaults and limits"
    )
    translation: TranslationSettings = Field(
        default_factory=TranslationSettings,
        description="Translation join and language resolution configuration"
    )
    audit: AuditSettings = Field(
        default_factory=AuditSettings,
        description="Old/new audit update protocol configuration"
    )

    def model_post_init(self, __context) -> None:
        super().model_post_init(__context)
        logging.getLogger(__name__).debug(
            "Settings loaded",
            extra={
                "app_env": self.app_env,
                "audit_update_policy": self.audit.update_policy.value,
                "max_page_size": self.pagination.max_page_size,
            },
        )


_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Return the process-wide settings, loading them on first use.

    Values come from ``OFFICEQL_*`` environment variables and an optional
    ``.env`` file. Nested sections use ``__``, e.g.
    ``OFFICEQL_PAGINATION__MAX_PAGE_SIZE=50``.

    Args:
        force_reload: Build a fresh instance from the current environment

    Example:
        >>> get_settings() is get_settings()
        True
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Discard the cached settings and load them again (tests)."""
    global _settings
    _settings = None
    return get_settings(force_reload=True)
