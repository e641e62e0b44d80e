import json

from solverpack.compress import (
    DEFAULT_COMPRESSION_CONFIG,
    JSON_SECTION_HEADER,
    CompressionConfig,
    compress,
    split_log,
    truncate_tail,
    truncation_marker,
)
from solverpack.compress.config import DEFAULT_ELISION_MARKER

BEGIN = "===JSON_BEGIN==="
END = "===JSON_END==="


def _solver_log(rows: int) -> str:
    lines = ["Optimize a model with 120 rows", ""]
    lines.extend(f"{index:6d}    12   {1000 - index:10.4f}   900.0000   4.2%" for index in range(rows))
    lines.append("Explored 42 nodes")
    lines.append(BEGIN)
    lines.append(json.dumps({"status": "OPTIMAL", "x": list(range(40))}))
    lines.append(END)
    return "\n".join(lines) + "\n"


def test_compress_is_deterministic() -> None:
    raw = _solver_log(500)

    assert compress(raw) == compress(raw)


def test_compress_exact_layout_with_json_section() -> None:
    raw = "line\n" + BEGIN + "\n[1]\n" + END

    digest = compress(raw)

    assert digest.text == "line\n\n--- JSON Result ---\n[\n  1\n]"
    assert digest.has_json
    assert digest.json_parsed
    assert digest.truncated is False


def test_compress_prunes_json_and_discards_text_after_end_marker() -> None:
    raw = (
        "Header\n"
        f"{BEGIN}\n"
        '{"a": [1, 2, 3, 4, 5, 6, 7], "note": "two   spaces"}\n'
        f"{END}\n"
        "trailing noise\n"
    )

    digest = compress(raw)

    assert JSON_SECTION_HEADER in digest.text
    assert truncation_marker(2) in digest.text
    assert "trailing noise" not in digest.text
    assert '"two   spaces"' in digest.text
    assert digest.json_fragment == {"a": [1, 2, 3, 4, 5, truncation_marker(2)], "note": "two   spaces"}


def test_compress_keeps_malformed_json_verbatim() -> None:
    raw = f"Header\n{BEGIN}\n{{bad json\n{END}\n"

    digest = compress(raw)

    assert digest.json_parsed is False
    assert digest.text.endswith(f"{JSON_SECTION_HEADER}\n{{bad json")


def test_compress_without_markers_has_no_json_section() -> None:
    digest = compress("a    b\n\n\nc\n")

    assert digest.text == "a b\nc"
    assert not digest.has_json
    assert JSON_SECTION_HEADER not in digest.text


def test_begin_marker_without_end_runs_to_end_of_text() -> None:
    digest = compress(f"body\n{BEGIN}\n{{\"k\": 1}}\n")

    assert digest.json_parsed
    assert digest.json_fragment == {"k": 1}


def test_blank_fragment_counts_as_no_json() -> None:
    digest = compress(f"body\n{BEGIN}\n   \n{END}\n")

    assert digest.text == "body"
    assert not digest.has_json


def test_digest_respects_output_budget() -> None:
    config = CompressionConfig(max_output_chars=500)

    digest = compress(_solver_log(5000), config)

    assert len(digest.text) <= 500
    assert digest.truncated
    assert digest.text.startswith(DEFAULT_ELISION_MARKER)
    assert digest.text.endswith("}")


def test_digest_budget_smaller_than_marker() -> None:
    digest = compress(_solver_log(100), CompressionConfig(max_output_chars=5))

    assert len(digest.text) == 5
    assert digest.truncated


def test_digest_samples_numeric_rows() -> None:
    digest = compress(_solver_log(1000), DEFAULT_COMPRESSION_CONFIG)

    assert digest.numeric_lines_seen == 1000
    assert digest.numeric_lines_kept == 19 + 1000 // 20
    assert "Optimize a model with 120 rows" in digest.body_lines


def test_split_log_returns_body_and_fragment() -> None:
    split = split_log(f"a\n{BEGIN}[1]{END}tail", begin_marker=BEGIN, end_marker=END)

    assert split.body == "a\n"
    assert split.fragment == "[1]"

    missing = split_log("a\nb", begin_marker=BEGIN, end_marker=END)
    assert missing.body == "a\nb"
    assert missing.fragment is None


def test_truncate_tail_keeps_end_of_text() -> None:
    assert truncate_tail("abcdef", limit=10, marker="..") == ("abcdef", False)
    assert truncate_tail("abcdefghij", limit=6, marker="..") == ("..ghij", True)
    assert truncate_tail("abcdefghij", limit=2, marker="...") == ("ij", True)


def test_deeply_nested_json_result_does_not_fail_compression() -> None:
    nested = "[" * 5000 + "]" * 5000
    raw = f"log line\n{BEGIN}\n{nested}\n{END}\n"

    digest = compress(raw)

    assert digest.json_parsed is False
    assert digest.json_fragment == nested
    assert digest.body_lines == ("log line",)
