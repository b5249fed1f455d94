"""Tests for the completion service and endpoint."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notecanvas.api.completion import get_completion_service
from notecanvas.exceptions import UpstreamError, ValidationError
from notecanvas.main import app
from notecanvas.services.completion import NO_RESPONSE, CompletionService
from notecanvas.services.llm import LLMService, strip_code_fences


@pytest.fixture
def mock_llm():
    llm = MagicMock(spec=LLMService)
    llm.generate = AsyncMock(return_value="A reply")
    llm.generate_json = AsyncMock(return_value={})
    return llm


@pytest.fixture
def service(mock_llm):
    return CompletionService(llm_service=mock_llm)


class TestCompletionService:
    """Action dispatch."""

    @pytest.mark.asyncio
    async def test_analyze_text(self, service, mock_llm):
        mock_llm.generate_json.return_value = {
            "summary": "Notes about cells",
            "keyPoints": ["mitochondria"],
            "actionItems": [],
            "tags": ["biology"],
        }

        result = await service.run("analyzeText", {"text": "cells cells cells"})

        assert result == {
            "summary": "Notes about cells",
            "keyPoints": ["mitochondria"],
            "actionItems": [],
            "tags": ["biology"],
        }
        prompt = mock_llm.generate_json.call_args.kwargs["prompt"]
        assert "cells cells cells" in prompt

    @pytest.mark.asyncio
    async def test_analyze_text_missing_action_items(self, service, mock_llm):
        mock_llm.generate_json.return_value = {"summary": "S", "keyPoints": [], "tags": []}
        result = await service.run("analyzeText", {"text": "x"})
        assert result["actionItems"] == []

    @pytest.mark.asyncio
    async def test_analyze_image(self, service, mock_llm):
        mock_llm.generate.return_value = "A whiteboard with a diagram"

        result = await service.run(
            "analyzeImage",
            {"base64Data": "aGVsbG8=", "mimeType": "image/png", "prompt": "What is this?"},
        )

        assert result == {"text": "A whiteboard with a diagram"}
        kwargs = mock_llm.generate.call_args.kwargs
        assert kwargs["images"] == ["aGVsbG8="]
        assert kwargs["prompt"] == "What is this?"

    @pytest.mark.asyncio
    async def test_chart_recommendation(self, service, mock_llm):
        mock_llm.generate_json.return_value = {
            "type": "line",
            "title": "Growth",
            "data": [{"name": "Q1", "value": 10}],
            "xAxisKey": "name",
            "dataKey": "value",
        }

        result = await service.run("chartRecommendation", {"datasetDescription": "quarterly revenue"})

        assert result["type"] == "line"
        assert result["data"] == [{"name": "Q1", "value": 10.0}]
        assert "quarterly revenue" in mock_llm.generate_json.call_args.kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_chat_maps_roles(self, service, mock_llm):
        result = await service.run(
            "chat",
            {
                "history": [
                    {"role": "user", "content": "hi"},
                    {"role": "model", "content": "hello"},
                ],
                "newMessage": "what now?",
                "context": "Note (Plan): ship it",
            },
        )

        assert result == {"text": "A reply"}
        kwargs = mock_llm.generate.call_args.kwargs
        assert kwargs["history"] == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
        assert kwargs["prompt"] == "what now?"
        assert "ship it" in kwargs["system_prompt"]

    @pytest.mark.asyncio
    async def test_chat_empty_reply(self, service, mock_llm):
        mock_llm.generate.return_value = ""
        result = await service.run("chat", {"newMessage": "hello"})
        assert result == {"text": NO_RESPONSE}

    @pytest.mark.asyncio
    async def test_unknown_action(self, service):
        with pytest.raises(ValidationError):
            await service.run("generateImage", {})

    @pytest.mark.asyncio
    async def test_invalid_payload(self, service):
        with pytest.raises(ValidationError):
            await service.run("analyzeText", {})

    @pytest.mark.asyncio
    async def test_provider_http_error(self, service, mock_llm):
        mock_llm.generate.side_effect = httpx.ConnectError("refused")
        with pytest.raises(UpstreamError):
            await service.run("chat", {"newMessage": "hello"})

    @pytest.mark.asyncio
    async def test_provider_bad_json(self, service, mock_llm):
        mock_llm.generate_json.side_effect = json.JSONDecodeError("bad", "doc", 0)
        with pytest.raises(UpstreamError):
            await service.run("analyzeText", {"text": "x"})

    @pytest.mark.asyncio
    async def test_provider_wrong_shape(self, service, mock_llm):
        mock_llm.generate_json.return_value = {"title": "no type"}
        with pytest.raises(UpstreamError):
            await service.run("chartRecommendation", {})


class TestLLMService:
    """Provider request shape."""

    @pytest.mark.asyncio
    async def test_generate_posts_chat_request(self):
        mock_response = MagicMock()
        mock_response.json.return_value = {"message": {"content": "hi there"}}
        mock_response.raise_for_status = MagicMock()

        with patch("notecanvas.services.llm.httpx.AsyncClient") as mock_client_cls:
            mock_client = AsyncMock()
            mock_client.post.return_value = mock_response
            mock_client_cls.return_value.__aenter__.return_value = mock_client

            llm = LLMService(api_key="sk-user")
            result = await llm.generate("hello", system_prompt="be brief", images=["abc"])

        assert result == "hi there"
        url = mock_client.post.call_args.args[0]
        body = mock_client.post.call_args.kwargs["json"]
        headers = mock_client.post.call_args.kwargs["headers"]
        assert url.endswith("/api/chat")
        assert body["messages"][0] == {"role": "system", "content": "be brief"}
        assert body["messages"][-1] == {"role": "user", "content": "hello", "images": ["abc"]}
        assert headers == {"Authorization": "Bearer sk-user"}

    @pytest.mark.asyncio
    async def test_generate_json_strips_fences(self):
        llm = LLMService()
        with patch.object(llm, "generate", AsyncMock(return_value='```json\n{"a": 1}\n```')):
            assert await llm.generate_json("x") == {"a": 1}

    def test_strip_code_fences(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'


class TestCompletionEndpoint:
    """POST /api/completion."""

    @pytest.fixture
    def override_service(self, service):
        app.dependency_overrides[get_completion_service] = lambda: service
        yield
        app.dependency_overrides.pop(get_completion_service, None)

    def test_chat(self, client, auth_headers, override_service):
        response = client.post(
            "/api/completion",
            headers=auth_headers,
            json={"action": "chat", "payload": {"newMessage": "hi"}},
        )
        assert response.status_code == 200
        assert response.json() == {"text": "A reply"}

    def test_unknown_action(self, client, auth_headers, override_service):
        response = client.post(
            "/api/completion",
            headers=auth_headers,
            json={"action": "explode", "payload": {}},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_upstream_failure_is_500(self, client, auth_headers, override_service, mock_llm):
        mock_llm.generate.side_effect = httpx.ReadTimeout("slow")
        response = client.post(
            "/api/completion",
            headers=auth_headers,
            json={"action": "chat", "payload": {"newMessage": "hi"}},
        )
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Completion service failure"}

    def test_requires_auth(self, client):
        response = client.post("/api/completion", json={"action": "chat", "payload": {}})
        assert response.status_code == 401

    def test_uses_users_stored_key(self, client, auth_headers):
        client.post("/api/settings/api-key", headers=auth_headers, json={"apiKey": "sk-mine-123456"})

        with patch("notecanvas.api.completion.CompletionService") as mock_service_cls:
            mock_service_cls.return_value.run = AsyncMock(return_value={"text": "ok"})
            response = client.post(
                "/api/completion",
                headers=auth_headers,
                json={"action": "chat", "payload": {"newMessage": "hi"}},
            )

        assert response.status_code == 200
        llm = mock_service_cls.call_args.args[0]
        assert llm.api_key == "sk-mine-123456"
