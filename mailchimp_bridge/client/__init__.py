"""Client-side helper for the bridge's proxy endpoint."""

from mailchimp_bridge.client.builders import RequestBuilder
from mailchimp_bridge.client.helper import HelperRequestError, MailchimpHelper
from mailchimp_bridge.client.validation import (
    EmailValidation,
    format_merge_fields,
    is_domain_blocked,
    is_valid_email,
    subscriber_hash,
    validate_email,
)

__all__ = [
    "EmailValidation",
    "HelperRequestError",
    "MailchimpHelper",
    "RequestBuilder",
    "format_merge_fields",
    "is_domain_blocked",
    "is_valid_email",
    "subscriber_hash",
    "validate_email",
]
