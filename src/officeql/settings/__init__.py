"""Settings module providing configuration management for officeql.

Built on Pydantic Settings. Each domain section lives in its own file and is
aggregated by ``_Settings`` in main.py.

Architecture:
    1. Base Layer (base.py):
       - OfficeQLBaseSettings: env prefix, log level, dialect, debug flag

    2. Domain Settings:
       - pagination.py: default and maximum page size
       - translation.py: default language and untranslated lookup tables
       - audit.py: old/new audit update policy (trust or verify)

    3. Main Aggregator (main.py):
       - _Settings: aggregates all domain settings
       - get_settings(): Singleton factory function
       - _reload_settings(): Force reload from environment

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. .env file
    3. Default Values in code (lowest priority)

Environment Variable Naming:
    - Format: OFFICEQL_SETTING_NAME
    - Nested: Use double underscore __ (e.g., OFFICEQL_AUDIT__UPDATE_POLICY=verify)

Quick Start:
    >>> from officeql.settings import get_settings
    >>> settings = get_settings()
    >>> settings.pagination.max_page_size
    100
"""

from .main import _Settings, get_settings, _reload_settings

from .base import OfficeQLBaseSettings
from .pagination import PaginationSettings
from .translation import TranslationSettings
from .audit import AuditSettings

__all__ = [
    "get_settings",
    "OfficeQLBaseSettings",
    "PaginationSettings",
    "TranslationSettings",
    "AuditSettings",
]
