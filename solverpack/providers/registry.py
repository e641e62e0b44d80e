"""Report provider registry and plugin hooks."""

from __future__ import annotations

import importlib
from typing import Callable

from solverpack.providers.base import ReportProvider

ReportProviderFactory = Callable[[], ReportProvider]
_REPORT_PROVIDERS: dict[str, ReportProviderFactory] = {}


class ReportProviderRegistryError(ValueError):
    """Raised when a report provider cannot be registered or found."""


def _normalize_key(key: str) -> str:
    normalized = key.strip().lower()
    if not normalized:
        raise ReportProviderRegistryError("Provider key cannot be empty.")
    return normalized


def register_report_provider(
    key: str,
    factory: ReportProviderFactory,
    *,
    overwrite: bool = False,
) -> None:
    normalized_key = _normalize_key(key)
    if not overwrite and normalized_key in _REPORT_PROVIDERS:
        raise ReportProviderRegistryError(f"Provider '{normalized_key}' is already registered.")
    _REPORT_PROVIDERS[normalized_key] = factory


def register_report_provider_entrypoint(
    key: str,
    entrypoint: str,
    *,
    overwrite: bool = False,
) -> None:
    """Register ``module:attribute`` (a class or a zero-arg factory)."""
    module_name, separator, attr = entrypoint.partition(":")
    if not separator or not module_name or not attr:
        raise ReportProviderRegistryError(
            f"Invalid report provider entrypoint '{entrypoint}'. Expected module:attribute."
        )
    module = importlib.import_module(module_name)
    target = getattr(module, attr, None)
    if target is None or not callable(target):
        raise ReportProviderRegistryError(
            f"Report provider entrypoint '{entrypoint}' is not callable."
        )
    register_report_provider(key, target, overwrite=overwrite)


def get_report_provider(key: str) -> ReportProvider:
    normalized_key = _normalize_key(key)
    if normalized_key not in _REPORT_PROVIDERS:
        raise ReportProviderRegistryError(f"Provider '{normalized_key}' is not registered.")
    return _REPORT_PROVIDERS[normalized_key]()


def list_report_provider_keys() -> tuple[str, ...]:
    return tuple(sorted(_REPORT_PROVIDERS))


def reset_report_provider_registry() -> None:
    _REPORT_PROVIDERS.clear()


def initialize_default_report_providers(*, overwrite: bool = False) -> None:
    from solverpack.providers.fake import FakeReportProvider
    from solverpack.providers.google import GoogleReportProvider
    from solverpack.providers.openai import OpenAIReportProvider

    defaults: dict[str, ReportProviderFactory] = {
        "fake": FakeReportProvider,
        "google": GoogleReportProvider,
        "openai": OpenAIReportProvider,
    }
    for key, factory in defaults.items():
        if key in _REPORT_PROVIDERS and not overwrite:
            continue
        register_report_provider(key, factory, overwrite=True)


def load_report_providers_from_plugins(
    plugins: dict[str, str] | None = None,
    *,
    overwrite: bool = False,
) -> None:
    """Load report providers from an import entrypoint mapping."""
    for key, entrypoint in (plugins or {}).items():
        register_report_provider_entrypoint(key, entrypoint, overwrite=overwrite)
