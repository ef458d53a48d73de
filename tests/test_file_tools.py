"""Tests for file snippet reading and file metadata."""

import os

import pytest

from utils.io import (
    AccessDeniedError,
    FileTooLargeError,
    InvalidRequestError,
    NotFoundError,
    OutOfRangeError,
    UnsupportedContentError,
    get_file_info,
    is_binary_file,
    read_file_snippet,
)
from utils.io import files


@pytest.mark.unit
def test_read_file_range(temp_dir, write_lines):
    """Test file range reading."""
    test_file = write_lines(temp_dir / "test.txt", 10)

    snippet = read_file_snippet([str(temp_dir)], str(test_file), 2, 4)

    assert snippet.snippet == "line 2\nline 3\nline 4"
    assert snippet.start == 2
    assert snippet.end == 4
    assert snippet.total_lines == 10
    assert snippet.path == str(test_file)


@pytest.mark.unit
def test_end_is_clamped_to_file_length(temp_dir, write_lines):
    test_file = write_lines(temp_dir / "fifty.txt", 50)

    snippet = read_file_snippet([str(temp_dir)], str(test_file), 48, 60)

    assert snippet.snippet.splitlines() == ["line 48", "line 49", "line 50"]
    assert snippet.end == 50
    assert snippet.total_lines == 50


@pytest.mark.unit
@pytest.mark.parametrize("start,end", [(1, 1), (1, 7), (3, 3), (5, 200), (7, 7)])
def test_line_count_matches_requested_range(temp_dir, write_lines, start, end):
    test_file = write_lines(temp_dir / "seven.txt", 7)

    snippet = read_file_snippet([str(temp_dir)], str(test_file), start, end)

    expected = [f"line {i}" for i in range(start, min(end, 7) + 1)]
    assert snippet.snippet.split("\n") == expected


@pytest.mark.unit
def test_start_beyond_eof_is_an_error(temp_dir, write_lines):
    test_file = write_lines(temp_dir / "short.txt", 3)

    with pytest.raises(OutOfRangeError, match="Start line 4 exceeds file length 3"):
        read_file_snippet([str(temp_dir)], str(test_file), 4, 5)


@pytest.mark.unit
def test_crlf_and_lf_split_uniformly(temp_dir):
    test_file = temp_dir / "mixed.txt"
    test_file.write_bytes(b"one\r\ntwo\nthree\r\n")

    snippet = read_file_snippet([str(temp_dir)], str(test_file), 1, 10)

    # trailing newline produces a final empty line
    assert snippet.total_lines == 4
    assert snippet.snippet == "one\ntwo\nthree\n"


@pytest.mark.unit
def test_bom_is_dropped(temp_dir):
    test_file = temp_dir / "bom.txt"
    test_file.write_bytes(b"\xef\xbb\xbfhello\nworld")

    snippet = read_file_snippet([str(temp_dir)], str(test_file), 1, 1)

    assert snippet.snippet == "hello"


@pytest.mark.unit
@pytest.mark.parametrize(
    "path,start,end,message",
    [
        ("", 1, 2, "File path is required"),
        ("   ", 1, 2, "File path is required"),
        ("a.ts", 0, 2, "Start line must be >= 1"),
        ("a.ts", 5, 3, "End line must be >= start line"),
        ("a.ts", 1, 201, "Maximum 200 lines per request"),
    ],
)
def test_invalid_requests(temp_dir, path, start, end, message):
    target = str(temp_dir / path) if path.strip() else path

    with pytest.raises(InvalidRequestError, match=message):
        read_file_snippet([str(temp_dir)], target, start, end)


@pytest.mark.unit
def test_range_limit_applies_regardless_of_file_length(temp_dir, write_lines):
    test_file = write_lines(temp_dir / "tiny.txt", 2)

    with pytest.raises(InvalidRequestError):
        read_file_snippet([str(temp_dir)], str(test_file), 10, 300)


@pytest.mark.unit
def test_read_outside_roots_is_denied(temp_dir, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("secret")

    with pytest.raises(AccessDeniedError):
        read_file_snippet([str(temp_dir)], str(outside), 1, 1)


@pytest.mark.unit
def test_etc_passwd_is_denied_for_read_and_info(temp_dir):
    with pytest.raises(AccessDeniedError):
        read_file_snippet([str(temp_dir)], "/etc/passwd", 1, 5)
    with pytest.raises(AccessDeniedError):
        get_file_info([str(temp_dir)], "/etc/passwd")


@pytest.mark.unit
def test_missing_file_and_directory_are_not_found(temp_dir):
    with pytest.raises(NotFoundError):
        read_file_snippet([str(temp_dir)], str(temp_dir / "nope.txt"), 1, 1)

    (temp_dir / "subdir").mkdir()
    with pytest.raises(NotFoundError):
        read_file_snippet([str(temp_dir)], str(temp_dir / "subdir"), 1, 1)


@pytest.mark.unit
def test_binary_file_is_rejected(temp_dir):
    binary = temp_dir / "image.bin"
    binary.write_bytes(b"PNG\x00\x01\x02")

    assert is_binary_file(str(binary)) is True
    with pytest.raises(UnsupportedContentError):
        read_file_snippet([str(temp_dir)], str(binary), 1, 1)


@pytest.mark.unit
def test_nul_after_sample_window_is_text(temp_dir):
    late = temp_dir / "late.txt"
    late.write_bytes(b"a" * 8000 + b"\x00")

    assert is_binary_file(str(late)) is False


@pytest.mark.unit
def test_unreadable_file_counts_as_binary(temp_dir):
    assert is_binary_file(str(temp_dir / "missing.bin")) is True


@pytest.mark.unit
def test_too_large_file(temp_dir, monkeypatch):
    big = temp_dir / "big.txt"
    big.write_text("x" * 100)
    monkeypatch.setattr(files, "MAX_FILE_SIZE", 50)

    with pytest.raises(FileTooLargeError):
        read_file_snippet([str(temp_dir)], str(big), 1, 1)


@pytest.mark.unit
def test_file_info_text(temp_dir, write_lines):
    test_file = write_lines(temp_dir / "info.txt", 12)

    info = get_file_info([str(temp_dir)], str(test_file))

    assert info.to_dict() == {
        "exists": True,
        "size": os.path.getsize(test_file),
        "lines": 12,
        "isBinary": False,
    }


@pytest.mark.unit
def test_file_info_binary_skips_line_count(temp_dir):
    binary = temp_dir / "blob.bin"
    binary.write_bytes(b"\x00" * 32)

    info = get_file_info([str(temp_dir)], str(binary)).to_dict()

    assert info == {"exists": True, "size": 32, "isBinary": True}
    assert "lines" not in info


@pytest.mark.unit
def test_file_info_missing_never_raises(temp_dir):
    assert get_file_info([str(temp_dir)], str(temp_dir / "ghost.txt")).to_dict() == {
        "exists": False,
        "size": 0,
    }


@pytest.mark.unit
def test_file_info_directory_reports_missing(temp_dir):
    (temp_dir / "pkg").mkdir()

    info = get_file_info([str(temp_dir)], str(temp_dir / "pkg"))

    assert info.exists is False
    assert info.size == 0


@pytest.mark.unit
def test_nul_on_last_sampled_byte_is_binary(temp_dir):
    edge = temp_dir / "edge.dat"
    edge.write_bytes(b"a" * 7999 + b"\x00")

    assert is_binary_file(str(edge)) is True
    with pytest.raises(UnsupportedContentError):
        read_file_snippet([str(temp_dir)], str(edge), 1, 1)
    assert get_file_info([str(temp_dir)], str(edge)).to_dict() == {
        "exists": True,
        "size": 8000,
        "isBinary": True,
    }


@pytest.mark.unit
def test_file_info_path_with_nul_reports_missing(temp_dir):
    info = get_file_info([str(temp_dir)], str(temp_dir) + "/a\x00b.txt")

    assert info.to_dict() == {"exists": False, "size": 0}
