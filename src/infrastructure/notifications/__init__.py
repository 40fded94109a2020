# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Outgoing notifications.

Only email is delivered today, through the SES SMTP relay.

Usage:
    from src.infrastructure.notifications import get_email_sender

    background_tasks.add_task(
        get_email_sender().send_welcome_email, user.email, user.name
    )
"""

from src.infrastructure.notifications.email import (
    DeliveryStatus,
    EmailSender,
    get_email_sender,
)

__all__ = [
    "DeliveryStatus",
    "EmailSender",
    "get_email_sender",
]
