"""Text-generation providers used to turn digests into reports."""

from solverpack.providers.base import ProviderRequest, ReportProvider
from solverpack.providers.fake import FakeReportProvider
from solverpack.providers.google import GoogleReportProvider
from solverpack.providers.openai import OpenAIReportProvider
from solverpack.providers.registry import (
    ReportProviderRegistryError,
    get_report_provider,
    initialize_default_report_providers,
    list_report_provider_keys,
    load_report_providers_from_plugins,
    register_report_provider,
    register_report_provider_entrypoint,
    reset_report_provider_registry,
)

initialize_default_report_providers()

__all__ = [
    "ProviderRequest",
    "ReportProvider",
    "FakeReportProvider",
    "GoogleReportProvider",
    "OpenAIReportProvider",
    "ReportProviderRegistryError",
    "get_report_provider",
    "initialize_default_report_providers",
    "list_report_provider_keys",
    "load_report_providers_from_plugins",
    "register_report_provider",
    "register_report_provider_entrypoint",
    "reset_report_provider_registry",
]
