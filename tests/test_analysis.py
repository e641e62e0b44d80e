import json
from typing import Any

import pytest
import requests

from solverpack.analysis import (
    AnalysisError,
    MissingApiKeyError,
    analyze_log,
    resolve_api_key,
)
from solverpack.compress import CompressionConfig

RAW_LOG = "Optimize a model\n1 0.5\n2 0.4\n===JSON_BEGIN===\n{\"status\": \"OPTIMAL\"}\n===JSON_END===\n"


class _FakeResponse:
    def __init__(self, payload: Any) -> None:
        self.text = payload if isinstance(payload, str) else json.dumps(payload)


class _RecordingPost:
    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.calls: list[dict[str, Any]] = []

    def __call__(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return _FakeResponse(self.payload)


def test_fake_provider_reports_offline() -> None:
    result = analyze_log(RAW_LOG, provider="fake")

    assert result.report.startswith("# Solver Report")
    assert f"Prompt length: {len(result.prompt)} characters." in result.report
    assert result.provider == "fake"
    assert result.model == "fake-report"
    assert result.digest.json_parsed


def test_google_request_shape_and_report_extraction() -> None:
    post = _RecordingPost({"candidates": [{"content": {"parts": [{"text": "# Report\nfine"}]}}]})

    result = analyze_log(RAW_LOG, focus_text="gap", api_key="secret-key", request_post=post)

    assert result.report == "# Report\nfine"
    assert result.model == "gemini-2.5-flash"
    call = post.calls[0]
    assert call["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    )
    assert call["params"] == {"key": "secret-key"}
    assert call["json"] == {"contents": [{"parts": [{"text": result.prompt}]}]}
    assert call["timeout"] == 60.0
    assert "--- Log ---" in result.prompt
    assert '"gap"' in result.prompt


def test_openai_request_uses_bearer_auth() -> None:
    post = _RecordingPost({"choices": [{"message": {"content": "# Report"}}]})

    result = analyze_log(
        RAW_LOG,
        provider="openai",
        model="gpt-test",
        api_key="sk-test",
        base_url="http://localhost:9999/",
        timeout_seconds=5.0,
        request_post=post,
    )

    assert result.report == "# Report"
    call = post.calls[0]
    assert call["url"] == "http://localhost:9999/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["params"] is None
    assert call["json"]["model"] == "gpt-test"
    assert call["timeout"] == 5.0


def test_network_provider_requires_api_key() -> None:
    post = _RecordingPost({})

    with pytest.raises(MissingApiKeyError):
        analyze_log(RAW_LOG, provider="google", request_post=post)
    assert post.calls == []


def test_response_without_text_is_an_api_error_with_masked_key() -> None:
    post = _RecordingPost({"error": {"message": "API key secret-key not valid"}})

    with pytest.raises(AnalysisError) as excinfo:
        analyze_log(RAW_LOG, api_key="secret-key", request_post=post)

    message = str(excinfo.value)
    assert message.startswith("API Error: ")
    assert "secret-key" not in message
    assert "[REDACTED]" in message


def test_non_json_body_is_an_api_error() -> None:
    post = _RecordingPost("<html>Bad Gateway</html>")

    with pytest.raises(AnalysisError, match="API Error: <html>Bad Gateway</html>"):
        analyze_log(RAW_LOG, api_key="key-123", request_post=post)


def test_transport_failure_is_wrapped() -> None:
    def _post(url: str, **kwargs: Any) -> Any:
        raise requests.ConnectionError(f"cannot reach {url}?key=secret-key")

    with pytest.raises(AnalysisError) as excinfo:
        analyze_log(RAW_LOG, api_key="secret-key", request_post=_post)

    assert str(excinfo.value).startswith("request failed: ")
    assert "secret-key" not in str(excinfo.value)


def test_prompt_budget_and_compression_config_are_applied() -> None:
    big_log = "".join(f"Phase {index} text line\n" for index in range(3000))

    result = analyze_log(
        big_log,
        provider="fake",
        compression_config=CompressionConfig(max_output_chars=2000),
        max_prompt_chars=1000,
    )

    assert len(result.digest.text) <= 2000
    assert len(result.prompt) <= 1000
    assert result.to_dict()["prompt_chars"] == len(result.prompt)


def test_resolve_api_key_prefers_explicit_value() -> None:
    key, env_name = resolve_api_key(
        provider="google",
        explicit_api_key=" explicit ",
        environ={"GEMINI_API_KEY": "from-env"},
    )

    assert key == "explicit"
    assert env_name == "GEMINI_API_KEY"


def test_resolve_api_key_reads_default_or_custom_env() -> None:
    assert resolve_api_key(provider="openai", environ={"OPENAI_API_KEY": " k "}) == (
        "k",
        "OPENAI_API_KEY",
    )
    assert resolve_api_key(
        provider="google",
        api_key_env="TEAM_GEMINI_KEY",
        environ={"TEAM_GEMINI_KEY": "team"},
    ) == ("team", "TEAM_GEMINI_KEY")
    assert resolve_api_key(provider="google", environ={}) == (None, "GEMINI_API_KEY")
    assert resolve_api_key(provider="fake", environ={}) == (None, None)
