"""Google Gemini report provider."""

from __future__ import annotations

from typing import Any

from solverpack.providers.base import ProviderRequest, ReportProvider, first_text_part


class GoogleReportProvider(ReportProvider):
    """Gemini ``generateContent`` request/response handling."""

    name = "google"
    default_model = "gemini-2.5-flash"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"
    api_key_env = "GEMINI_API_KEY"
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
            url=f"{root}/models/{model}:generateContent",
            payload={"contents": [{"parts": [{"text": prompt}]}]},
            headers={"Content-Type": "application/json"},
            params={"key": api_key or ""},
        )

    def extract_text(self, response: Any) -> str | None:
        if not isinstance(response, dict):
            return None
        candidates = response.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        first = candidates[0]
        if not isinstance(first, dict):
            return None
        content = first.get("content")
        if not isinstance(content, dict):
            return None
        return first_text_part(content.get("parts"))
