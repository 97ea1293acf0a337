"""Notification channels for order status changes."""

from __future__ import annotations

from .channels import (
    MailChannel,
    MessagingChannel,
    PushChannel,
    default_channels,
    status_message,
)
from .senders import LoggingSender, MailSender, PushSender, TextSender

__all__ = [
    "LoggingSender",
    "MailChannel",
    "MailSender",
    "MessagingChannel",
    "PushChannel",
    "PushSender",
    "TextSender",
    "default_channels",
    "status_message",
]
