"""Report provider contract for text-generation HTTP services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class ProviderRequest:
    """Everything needed to issue one POST to a provider."""

    url: str
    payload: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)


class ReportProvider(Protocol):
    """Protocol for provider-specific request building and response parsing."""

    name: str
    default_model: str
    default_base_url: str
    api_key_env: str | None
    requires_network: bool

    def build_request(
        self,
        *,
        model: str,
        prompt: str,
        api_key: str | None,
        base_url: str | None = None,
    ) -> ProviderRequest:
        """Build the HTTP request for one prompt."""

    def respond(self, request: ProviderRequest) -> Any:
        """Answer ``request`` locally; only called when ``requires_network`` is false."""

    def extract_text(self, response: Any) -> str | None:
        """Return the generated text, or ``None`` if the payload has none."""


def first_text_part(parts: Any) -> str | None:
    """Return ``parts[0]["text"]`` when it is a string."""
    if isinstance(parts, list) and parts:
        first = parts[0]
        if isinstance(first, dict):
            text = first.get("text")
            if isinstance(text, str):
                return text
    return None
