"""Request builders for common audience operations.

Every builder returns a ProxyRequest; nothing here performs I/O. Members are
addressed by the MD5 hash of their lowercased address.
"""

from __future__ import annotations

import json
from typing import Any

from mailchimp_bridge.client.validation import subscriber_hash
from mailchimp_bridge.models.requests import ProxyRequest


def _require(value: object, message: str) -> None:
    if not value:
        raise ValueError(message)


class RequestBuilder:
    """Builds ``(method, endpoint, params)`` triples for one default audience.

    Args:
        list_id: Default audience identifier for list-scoped operations.
    """

    def __init__(self, list_id: str | None = None) -> None:
        self.list_id = list_id

    def _list(self, list_id: str | None = None) -> str:
        resolved = list_id or self.list_id
        _require(resolved, "List ID is required")
        return str(resolved)

    def _member_path(self, email: str, suffix: str = "") -> str:
        _require(email, "Email address is required")
        return f"/lists/{self._list()}/members/{subscriber_hash(email)}{suffix}"

    # -- Lists --------------------------------------------------------------

    def get_lists(self) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint="/lists")

    def get_list(self, list_id: str | None = None) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint=f"/lists/{self._list(list_id)}")

    def get_members(self, params: dict[str, Any] | None = None) -> ProxyRequest:
        return ProxyRequest(
            method="GET",
            endpoint=f"/lists/{self._list()}/members",
            params=dict(params or {}),
        )

    # -- Members ------------------------------------------------------------

    def check_subscription(self, email: str) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint=self._member_path(email))

    def add_or_update_member(self, email: str, data: dict[str, Any] | None = None) -> ProxyRequest:
        """Upsert a member; ``data`` overrides the default ``subscribed`` status."""
        endpoint = self._member_path(email)
        body: dict[str, Any] = {"email_address": email, "status": "subscribed"}
        body.update(data or {})
        return ProxyRequest(method="PUT", endpoint=endpoint, params=body)

    def subscribe_member(
        self, email: str, merge_fields: dict[str, Any] | None = None
    ) -> ProxyRequest:
        data: dict[str, Any] = {"status": "subscribed"}
        if merge_fields:
            data["merge_fields"] = dict(merge_fields)
        return self.add_or_update_member(email, data)

    def unsubscribe_member(self, email: str) -> ProxyRequest:
        return self.add_or_update_member(email, {"status": "unsubscribed"})

    def update_member_interests(self, email: str, interests: dict[str, bool]) -> ProxyRequest:
        return ProxyRequest(
            method="PATCH",
            endpoint=self._member_path(email),
            params={"interests": interests},
        )

    def archive_member(self, email: str) -> ProxyRequest:
        return ProxyRequest(method="DELETE", endpoint=self._member_path(email))

    def permanently_delete_member(self, email: str) -> ProxyRequest:
        return ProxyRequest(
            method="POST",
            endpoint=self._member_path(email, "/actions/delete-permanent"),
        )

    def get_member_activity(self, email: str) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint=self._member_path(email, "/activity"))

    def get_member_events(self, email: str, params: dict[str, Any] | None = None) -> ProxyRequest:
        return ProxyRequest(
            method="GET",
            endpoint=self._member_path(email, "/events"),
            params=dict(params or {}),
        )

    # -- Batches ------------------------------------------------------------

    def batch_subscribe(self, emails: list[str], options: dict[str, Any] | None = None) -> ProxyRequest:
        """One ``PUT`` upsert per address, submitted as a single batch."""
        _require(isinstance(emails, list) and emails, "Emails must be a non-empty list")
        operations = [
            {
                "method": "PUT",
                "path": self._member_path(email),
                "body": json.dumps(
                    {"email_address": email, "status": "subscribed", **(options or {})}
                ),
            }
            for email in emails
        ]
        return ProxyRequest(method="POST", endpoint="/batches", params={"operations": operations})

    def batch_unsubscribe(self, emails: list[str]) -> ProxyRequest:
        _require(isinstance(emails, list) and emails, "Emails must be a non-empty list")
        operations = [
            {
                "method": "PATCH",
                "path": self._member_path(email),
                "body": json.dumps({"status": "unsubscribed"}),
            }
            for email in emails
        ]
        return ProxyRequest(method="POST", endpoint="/batches", params={"operations": operations})

    # -- Tags ---------------------------------------------------------------

    def _tags(self, email: str, tags: list[str], status: str) -> ProxyRequest:
        _require(email, "Email address is required")
        _require(isinstance(tags, list) and tags, "Tags must be a non-empty list")
        return ProxyRequest(
            method="POST",
            endpoint=self._member_path(email, "/tags"),
            params={"tags": [{"name": tag, "status": status} for tag in tags]},
        )

    def add_tags(self, email: str, tags: list[str]) -> ProxyRequest:
        return self._tags(email, tags, "active")

    def remove_tags(self, email: str, tags: list[str]) -> ProxyRequest:
        return self._tags(email, tags, "inactive")

    def get_tags(self, email: str) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint=self._member_path(email, "/tags"))

    # -- Segments and interests ---------------------------------------------

    def add_to_segment(self, email: str, segment_id: str) -> ProxyRequest:
        _require(email and segment_id, "Email and segment ID are required")
        return ProxyRequest(
            method="POST",
            endpoint=f"/lists/{self._list()}/segments/{segment_id}/members",
            params={"email_address": email},
        )

    def get_segments(self, params: dict[str, Any] | None = None) -> ProxyRequest:
        return ProxyRequest(
            method="GET",
            endpoint=f"/lists/{self._list()}/segments",
            params=dict(params or {}),
        )

    def get_interest_categories(self) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint=f"/lists/{self._list()}/interest-categories")

    # -- Campaigns and automations ------------------------------------------

    def get_campaigns(self, params: dict[str, Any] | None = None) -> ProxyRequest:
        return ProxyRequest(method="GET", endpoint="/campaigns", params=dict(params or {}))

    def get_campaign_content(self, campaign_id: str) -> ProxyRequest:
        _require(campaign_id, "Campaign ID is required")
        return ProxyRequest(method="GET", endpoint=f"/campaigns/{campaign_id}/content")

    def trigger_automation(self, workflow_id: str, email: str) -> ProxyRequest:
        _require(workflow_id and email, "Workflow ID and email are required")
        return ProxyRequest(
            method="POST",
            endpoint=f"/automations/{workflow_id}/emails/queue",
            params={"email_address": email},
        )

    def pause_automation(self, workflow_id: str, email: str) -> ProxyRequest:
        _require(workflow_id and email, "Workflow ID and email are required")
        return ProxyRequest(
            method="POST",
            endpoint=f"/automations/{workflow_id}/removed-subscribers",
            params={"email_address": email},
        )

    # -- Search -------------------------------------------------------------

    def search_members(self, query: str, options: dict[str, Any] | None = None) -> ProxyRequest:
        _require(query, "Search query is required")
        return ProxyRequest(
            method="GET",
            endpoint="/search-members",
            params={"query": query, **(options or {})},
        )
