"""Reference provider for local deterministic testing."""

from __future__ import annotations

from typing import Any

from solverpack.providers.base import ProviderRequest, ReportProvider


class FakeReportProvider(ReportProvider):
    """Offline provider that answers with a fixed Markdown report."""

    name = "fake"
    default_model = "fake-report"
    default_base_url = "fake://local"
    api_key_env = None
    requires_network = False

    def build_request(
        self,
        *,
        model: str,
        prompt: str,
        api_key: str | None,
        base_url: str | None = None,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{(base_url or self.default_base_url).rstrip('/')}/{model}",
            payload={"model": model, "prompt": prompt},
        )

    def respond(self, request: ProviderRequest) -> dict[str, Any]:
        prompt = str(request.payload.get("prompt", ""))
        return {
            "model": request.payload.get("model"),
            "text": f"# Solver Report\n\nPrompt length: {len(prompt)} characters.",
        }

    def extract_text(self, response: Any) -> str | None:
        if isinstance(response, dict) and isinstance(response.get("text"), str):
            return response["text"]
        return None
