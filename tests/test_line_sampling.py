import pytest

from solverpack.compress import collapse_spaces, is_numeric_line, sample_lines


def test_fifty_numeric_lines_window_fifteen_stride_fifteen() -> None:
    text = "\n".join(f"{index} 0.5 12.0" for index in range(1, 51))

    result = sample_lines(text, window=15, stride=15)

    kept = [int(line.split()[0]) for line in result.lines]
    assert kept == list(range(1, 15)) + [15, 30, 45]
    assert result.numeric_seen == 50
    assert result.numeric_kept == 17


def test_heuristic_and_marker_lines_are_always_kept() -> None:
    text = "1 a\nH 10 incumbent\n* 11 improved\n2 b\n3 c\nExplored 3 nodes\n"

    result = sample_lines(text, window=2, stride=100)

    assert result.lines == ("1 a", "H 10 incumbent", "* 11 improved", "Explored 3 nodes")
    assert result.numeric_seen == 3
    assert result.numeric_kept == 1


def test_blank_lines_are_dropped_and_indented_numbers_count() -> None:
    text = "header\n\n   \r\n   7 row\n8 row\r\n"

    result = sample_lines(text, window=10, stride=10)

    assert result.lines == ("header", "   7 row", "8 row")
    assert result.numeric_seen == 2


def test_is_numeric_line() -> None:
    assert is_numeric_line("0 1 2")
    assert is_numeric_line("   42")
    assert not is_numeric_line("H 1")
    assert not is_numeric_line("*")
    assert not is_numeric_line("   ")
    assert not is_numeric_line("-1.5")


def test_collapse_spaces_touches_only_space_runs() -> None:
    assert collapse_spaces("Obj    1.0  gap") == "Obj 1.0 gap"
    assert collapse_spaces("a\t\tb\n\nc") == "a\t\tb\n\nc"
    assert collapse_spaces("single space") == "single space"


def test_stride_must_be_positive() -> None:
    with pytest.raises(ValueError):
        sample_lines("1\n", window=1, stride=0)
