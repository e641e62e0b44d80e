import inspect
from pathlib import Path
import sys

import pytest

import solverkit
from solverkit import RecordingEventSink, Settings
from solverpack.compress import CompressionConfig


def test_public_api_symbol_list_is_explicit_and_stable() -> None:
    assert solverkit.__all__ == [
        "__version__",
        "AnalysisError",
        "AnalysisResult",
        "CancelResult",
        "Event",
        "EventSink",
        "LogDigest",
        "ProcessFailure",
        "RecordingEventSink",
        "RunResult",
        "Settings",
        "load_settings",
        "run",
        "cancel",
        "sanitize",
        "digest",
        "prompt",
        "report",
    ]


def test_public_api_function_signatures_and_annotations() -> None:
    expected_parameter_order = {
        "run": ("script", "args", "prefix", "sink", "settings"),
        "cancel": ("pid",),
        "sanitize": ("raw_text", "settings"),
        "digest": ("raw_text", "max_chars", "max_items", "window", "stride", "settings"),
        "prompt": ("raw_text", "focus", "instruction", "settings"),
        "report": ("raw_text", "focus", "instruction", "provider", "model", "api_key", "settings"),
    }

    for name, parameters in expected_parameter_order.items():
        function = getattr(solverkit, name)
        signature = inspect.signature(function)
        assert tuple(signature.parameters.keys()) == parameters
        assert "return" in function.__annotations__
        assert function.__doc__ is not None
        assert function.__doc__.strip() != ""

        for index, parameter in enumerate(signature.parameters.values()):
            if index == 0:
                assert parameter.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
            else:
                assert parameter.kind is inspect.Parameter.KEYWORD_ONLY


def test_public_digest_prompt_and_report_work_offline() -> None:
    raw = "Academic license\n" + "".join(f"{index} row\n" for index in range(100))
    settings = Settings(provider="fake", compression=CompressionConfig(max_output_chars=400))

    digest = solverkit.digest(raw, window=3, settings=settings)
    assert len(digest.text) <= 400
    assert digest.numeric_lines_seen == 100

    assert solverkit.sanitize(raw, settings=settings).startswith("0 row")
    assert solverkit.prompt(raw, focus="gap", settings=settings).count("--- Log ---") == 1

    result = solverkit.report(raw, settings=settings)
    assert result.provider == "fake"
    assert result.report.startswith("# Solver Report")


@pytest.mark.skipif(" " in sys.executable, reason="prefix is whitespace-split")
def test_public_run_streams_into_sink(tmp_path: Path) -> None:
    script = tmp_path / "solver.py"
    script.write_text("print('1 2 3')\n", encoding="utf-8")
    sink = RecordingEventSink()

    result = solverkit.run(
        str(script),
        prefix=f"{sys.executable} -u",
        sink=sink,
        settings=Settings(),
    )

    assert result.display_text == "1 2 3"
    assert sink.lines() == ["1 2 3"]
    assert sink.pids() == [result.pid]


def test_public_cancel_never_raises() -> None:
    assert solverkit.cancel(0).ok is False
