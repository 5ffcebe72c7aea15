"""Unit tests for the upstream MailchimpApi client."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mailchimp_bridge.integration.mailchimp_api import MailchimpApi

BASE_URL = "https://us6.api.mailchimp.com/3.0/"


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", BASE_URL), **kwargs)


@pytest.fixture
def api() -> MailchimpApi:
    return MailchimpApi(
        api_key="abc123-us6",
        base_url=BASE_URL,
        timeout_seconds=120,
        signup_url="https://example.com/signup",
    )


class TestRequest:
    """Tests for MailchimpApi.request()."""

    @pytest.mark.asyncio
    async def test_success_wraps_data_and_status(self, api: MailchimpApi) -> None:
        mock_response = _response(200, json={"id": "list123", "name": "Newsletter"})

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            result = await api.request("GET", "/lists/list123")

        assert result.to_dict() == {
            "success": True,
            "data": {"id": "list123", "name": "Newsletter"},
            "status": 200,
        }

    @pytest.mark.asyncio
    async def test_get_params_become_query(self, api: MailchimpApi) -> None:
        mock_response = _response(200, json={"members": []})

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response
        ) as mock_request:
            await api.request("GET", "/lists/abc/members", {"count": 10})

        args, kwargs = mock_request.call_args
        assert args == ("GET", "lists/abc/members")
        assert kwargs["params"] == {"count": 10}
        assert "content" not in kwargs
        assert kwargs["auth"] == ("anystring", "abc123-us6")

    @pytest.mark.asyncio
    async def test_body_params_become_json(self, api: MailchimpApi) -> None:
        mock_response = _response(200, json={"id": "m1"})
        body = {"email_address": "a@example.com", "status": "subscribed"}

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response
        ) as mock_request:
            await api.request("put", "lists/abc/members/hash", body)

        args, kwargs = mock_request.call_args
        assert args == ("PUT", "lists/abc/members/hash")
        assert json.loads(kwargs["content"]) == body
        assert "params" not in kwargs
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_empty_params_send_nothing(self, api: MailchimpApi) -> None:
        mock_response = _response(204)

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response
        ) as mock_request:
            result = await api.request("DELETE", "/lists/abc/members/hash")

        _, kwargs = mock_request.call_args
        assert "params" not in kwargs
        assert "content" not in kwargs
        assert result.success is True
        assert result.data is None
        assert result.status == 204

    @pytest.mark.asyncio
    async def test_client_error_passes_body_through(self, api: MailchimpApi) -> None:
        error_body = {"title": "Resource Not Found", "status": 404, "detail": "No such member"}
        mock_response = _response(404, json=error_body)

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            result = await api.request("GET", "/lists/abc/members/missing")

        assert result.to_dict() == {"success": False, "error": error_body, "code": 404}

    @pytest.mark.asyncio
    async def test_client_error_with_text_body(self, api: MailchimpApi) -> None:
        mock_response = _response(400, text="Bad Request")

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            result = await api.request("POST", "/lists", {"name": ""})

        assert result.success is False
        assert result.code == 400
        assert result.error == {"detail": "Bad Request"}

    @pytest.mark.asyncio
    async def test_server_error_maps_to_500(self, api: MailchimpApi) -> None:
        mock_response = _response(503, text="Service Unavailable")

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            result = await api.request("GET", "/lists")

        assert result.success is False
        assert result.code == 500
        assert "503" in result.error

    @pytest.mark.asyncio
    async def test_timeout_maps_to_500(self, api: MailchimpApi) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ReadTimeout("timed out"),
        ):
            result = await api.request("GET", "/lists")

        assert result.to_dict() == {"success": False, "error": "timed out", "code": 500}

    @pytest.mark.asyncio
    async def test_connect_error_maps_to_500(self, api: MailchimpApi) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Name or service not known"),
        ):
            result = await api.request("GET", "/lists")

        assert result.code == 500
        assert result.error == "Name or service not known"

    @pytest.mark.asyncio
    async def test_invalid_json_success_maps_to_500(self, api: MailchimpApi) -> None:
        mock_response = _response(200, text="<html>oops</html>")

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            result = await api.request("GET", "/lists")

        assert result.success is False
        assert result.code == 500

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        api = MailchimpApi(api_key=None, base_url=BASE_URL)

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            result = await api.request("GET", "/lists")

        mock_request.assert_not_called()
        assert result.to_dict() == {
            "success": False,
            "error": "Mailchimp API key not configured",
            "code": 500,
        }
        assert api.is_configured is False

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, api: MailchimpApi) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("down"),
        ) as mock_request:
            await api.request("GET", "/lists")

        assert mock_request.call_count == 1


class TestShortcuts:
    @pytest.mark.asyncio
    async def test_verb_shortcuts(self, api: MailchimpApi) -> None:
        mock_response = _response(200, json={})

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response
        ) as mock_request:
            await api.get("lists")
            await api.post("lists", {"name": "x"})
            await api.patch("lists/a", {"name": "y"})
            await api.put("lists/a/members/h", {"status": "subscribed"})
            await api.delete("lists/a")

        verbs = [call.args[0] for call in mock_request.call_args_list]
        assert verbs == ["GET", "POST", "PATCH", "PUT", "DELETE"]

    def test_base_url_gets_trailing_slash(self) -> None:
        api = MailchimpApi(api_key="k", base_url="https://us1.api.mailchimp.com/3.0")
        assert api.base_url == "https://us1.api.mailchimp.com/3.0/"


class TestSignupUrl:
    @pytest.mark.asyncio
    async def test_returns_list_url(self, api: MailchimpApi) -> None:
        mock_response = _response(200, json={"subscribe_url_long": "https://list-manage.com/x"})

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            url = await api.get_list_signup_url("abc")

        assert url == "https://list-manage.com/x"

    @pytest.mark.asyncio
    async def test_falls_back_to_configured_url(self, api: MailchimpApi) -> None:
        mock_response = _response(404, json={"detail": "not found"})

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock, return_value=mock_response):
            url = await api.get_list_signup_url("missing")

        assert url == "https://example.com/signup"
