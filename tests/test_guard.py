import pytest
from coreason_runner.config import DEFAULT_DENYLIST
from coreason_runner.exceptions import ValidationError
from coreason_runner.guard import check_code


def test_accepts_plain_code() -> None:
    check_code('print("hello")')


def test_accepts_empty_code() -> None:
    check_code("")


def test_accepts_code_at_exact_limit() -> None:
    check_code("x" * 10_000)


@pytest.mark.parametrize("code", ["x" * 10_001, "#" * 20_000, 'print("hi")\n' + " " * 10_000])
def test_rejects_oversized_code_regardless_of_content(code: str) -> None:
    with pytest.raises(ValidationError, match="too large"):
        check_code(code)


def test_size_is_measured_in_bytes() -> None:
    # 5001 two-byte characters
    with pytest.raises(ValidationError, match="too large"):
        check_code("é" * 5001)


@pytest.mark.parametrize("pattern", DEFAULT_DENYLIST)
def test_rejects_every_denylisted_pattern(pattern: str) -> None:
    with pytest.raises(ValidationError, match="blocked pattern"):
        check_code(f"x = 1\n{pattern}\n")


def test_scan_is_case_sensitive() -> None:
    check_code("OS.SYSTEM('ls')")


def test_custom_limit_and_denylist() -> None:
    check_code("import subprocess", denylist=["eval("])

    with pytest.raises(ValidationError, match="eval"):
        check_code("eval('1')", denylist=["eval("])

    with pytest.raises(ValidationError):
        check_code("abc", max_bytes=2)


def test_oversized_check_runs_before_denylist() -> None:
    with pytest.raises(ValidationError, match="too large"):
        check_code("subprocess" * 2000)
