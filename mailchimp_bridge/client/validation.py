"""Email helpers shared by the client: member hashing and pre-submit validation."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from mailchimp_bridge.config.settings import DEFAULT_BLOCKED_TLDS

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class EmailValidation:
    valid: bool
    error: str | None = None


def subscriber_hash(email: str) -> str:
    """Member path segment: MD5 hex digest of the lowercased address."""
    return hashlib.md5(email.lower().encode("utf-8")).hexdigest()


def is_valid_email(email: str) -> bool:
    return _EMAIL_PATTERN.fullmatch(email) is not None


def is_domain_blocked(email: str, blocked_tlds: Iterable[str] = DEFAULT_BLOCKED_TLDS) -> bool:
    address = email.lower()
    return any(address.endswith(tld.lower()) for tld in blocked_tlds)


def validate_email(
    email: str | None,
    blocked_tlds: Iterable[str] = DEFAULT_BLOCKED_TLDS,
) -> EmailValidation:
    """Check an address before submitting it for subscription."""
    if not email:
        return EmailValidation(False, "Email address is required")

    if not is_valid_email(email):
        return EmailValidation(False, "Please enter a valid email address")

    if is_domain_blocked(email, blocked_tlds):
        return EmailValidation(False, "Sorry, this domain is not part of our target audience.")

    return EmailValidation(True)


def format_merge_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Upper-case merge field names (``fname`` -> ``FNAME``)."""
    return {str(key).upper(): value for key, value in data.items()}
