"""OpenAI-compatible chat completions report provider."""

from __future__ import annotations

from typing import Any

from solverpack.providers.base import ProviderRequest, ReportProvider


class OpenAIReportProvider(ReportProvider):
    """Chat completions request/response handling."""

    name = "openai"
    default_model = "gpt-4o-mini"
    default_base_url = "https://api.openai.com"
    api_key_env = "OPENAI_API_KEY"
    requires_network = True

    def build_request(
        self,
        *,
        model: str,
        prompt: str,
        api_key: str | None,
        base_url: str | None = None,
    ) -> ProviderRequest:
        root = (base_url or self.default_base_url).rstrip("/")
        return ProviderRequest(
            url=f"{root}/v1/chat/completions",
            payload={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "stream": False,
            },
            headers={
                "Authorization": f"Bearer {api_key or ''}",
                "Content-Type": "application/json",
            },
        )

    def extract_text(self, response: Any) -> str | None:
        if not isinstance(response, dict):
            return None
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        return None
