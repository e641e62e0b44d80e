"""Digest a captured solver log and ask a text-generation provider for a report."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from typing import Any, Callable, Mapping

from solverpack.compress import DEFAULT_COMPRESSION_CONFIG, CompressionConfig, compress
from solverpack.core.models import LogDigest
from solverpack.prompt import assemble_prompt
from solverpack.providers import get_report_provider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "google"
DEFAULT_TIMEOUT_SECONDS = 60.0
_KEY_MASK = "[REDACTED]"


class AnalysisError(Exception):
    """Raised when the provider call or its response cannot be used."""


class MissingApiKeyError(AnalysisError):
    """Raised when a network provider is called without a credential."""


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    report: str
    prompt: str
    digest: LogDigest
    provider: str
    model: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "report": self.report,
            "prompt_chars": len(self.prompt),
            "digest": self.digest.to_dict(),
            "provider": self.provider,
            "model": self.model,
        }


def resolve_api_key(
    *,
    provider: str,
    explicit_api_key: str | None = None,
    api_key_env: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[str | None, str | None]:
    """Return ``(api_key, env_name)``; an explicit key wins over the environment."""
    adapter = get_report_provider(provider)
    env_name = api_key_env.strip() if api_key_env and api_key_env.strip() else adapter.api_key_env
    if explicit_api_key and explicit_api_key.strip():
        return explicit_api_key.strip(), env_name
    if not env_name:
        return None, None
    source = os.environ if environ is None else environ
    value = source.get(env_name)
    if value and value.strip():
        return value.strip(), env_name
    return None, env_name


def _mask(message: str, secret: str | None) -> str:
    if secret:
        return message.replace(secret, _KEY_MASK)
    return message


def analyze_log(
    raw_text: str,
    *,
    focus_text: str = "",
    system_instruction: str = "",
    provider: str = DEFAULT_PROVIDER,
    model: str | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    compression_config: CompressionConfig = DEFAULT_COMPRESSION_CONFIG,
    max_prompt_chars: int | None = None,
    request_post: Callable[..., Any] | None = None,
) -> AnalysisResult:
    """Compress ``raw_text``, build the prompt and return the provider's report.

    Raises:
        MissingApiKeyError: A network provider was selected without a key.
        AnalysisError: The HTTP call failed or the response has no text.
    """
    adapter = get_report_provider(provider)
    resolved_model = model or adapter.default_model
    if adapter.requires_network and not (api_key and api_key.strip()):
        raise MissingApiKeyError(f"API key is not set for provider {adapter.name}.")

    digest = compress(raw_text, compression_config)
    prompt = assemble_prompt(
        system_instruction,
        focus_text,
        digest,
        max_prompt_chars=max_prompt_chars,
    )
    request = adapter.build_request(
        model=resolved_model,
        prompt=prompt,
        api_key=api_key,
        base_url=base_url,
    )

    if adapter.requires_network:
        payload = _post(
            request,
            timeout_seconds=timeout_seconds,
            api_key=api_key,
            request_post=request_post,
        )
    else:
        respond = getattr(adapter, "respond", None)
        if not callable(respond):
            raise AnalysisError(f"Provider {adapter.name} is offline but has no respond() method.")
        payload = respond(request)

    report = adapter.extract_text(payload)
    if report is None:
        body = json.dumps(payload, ensure_ascii=False) if not isinstance(payload, str) else payload
        raise AnalysisError(_mask(f"API Error: {body}", api_key))

    logger.debug(
        "report generated provider=%s model=%s prompt_chars=%d",
        adapter.name,
        resolved_model,
        len(prompt),
    )
    return AnalysisResult(
        report=report,
        prompt=prompt,
        digest=digest,
        provider=adapter.name,
        model=resolved_model,
    )


def _post(
    request: Any,
    *,
    timeout_seconds: float,
    api_key: str | None,
    request_post: Callable[..., Any] | None,
) -> Any:
    import requests

    post_fn = request_post or requests.post
    try:
        response = post_fn(
            request.url,
            params=request.params or None,
            headers=request.headers,
            json=request.payload,
            timeout=timeout_seconds,
        )
        body_text = response.text
    except requests.RequestException as error:
        raise AnalysisError(_mask(f"request failed: {error}", api_key)) from error

    try:
        return json.loads(body_text)
    except (TypeError, ValueError) as error:
        raise AnalysisError(_mask(f"API Error: {body_text}", api_key)) from error
