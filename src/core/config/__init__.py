# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for SkillUp.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.database.url)
"""

from src.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    MailSettings,
    Settings,
    clear_settings_cache,
    get_settings,
    parse_secrets_blob,
)

__all__ = [
    "APISettings",
    "CORSSettings",
    "DatabaseSettings",
    "JWTSettings",
    "MailSettings",
    "Settings",
    "clear_settings_cache",
    "get_settings",
    "parse_secrets_blob",
]
