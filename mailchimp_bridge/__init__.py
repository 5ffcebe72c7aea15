"""Mailchimp bridge service: API proxy gateway, webhook relay and client helper."""

__version__ = "1.0.0"
