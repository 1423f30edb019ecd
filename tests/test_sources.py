"""Unit tests for reading and writing source files."""

from pathlib import Path

import pytest

from sourcetrans.errors import SourceEncodingError
from sourcetrans.sources import SourceFile, check_encoding, derive_output_path


class TestOutputPath:
    """Tests for the translated file name."""

    def test_marker_goes_before_extension(self):
        """The output keeps the extension after the marker."""
        path = Path("/work/src/MY_HEADER.H")
        assert derive_output_path(path) == Path("/work/src/MY_HEADER.TRANSLATED.H")

    def test_file_without_extension(self):
        """Files without an extension get the bare marker."""
        assert derive_output_path(Path("/work/Makefile")).name == "Makefile.TRANSLATED"

    def test_only_last_suffix_is_kept(self):
        """Only the last suffix is treated as the extension."""
        assert derive_output_path(Path("a.tar.c")).name == "a.tar.TRANSLATED.c"


class TestSourceFile:
    """Tests for decoding and encoding."""

    def test_shift_jis_source_is_decoded(self, tmp_path):
        """cp932 bytes decode to text."""
        path = tmp_path / "main.c"
        path.write_bytes("// 初期化\r\nint x;\r\n".encode("cp932"))
        source = SourceFile(path, "cp932")
        assert source.text == "// 初期化\r\nint x;\r\n"

    def test_save_keeps_line_endings(self, tmp_path):
        """Saving writes the exact text without newline translation."""
        path = tmp_path / "main.c"
        path.write_bytes(b"// a\r\nint x;\n")
        source = SourceFile(path, "utf-8")
        destination = tmp_path / "out.c"
        source.save(destination, "// b\r\nint x;\n", "utf-8")
        assert destination.read_bytes() == b"// b\r\nint x;\n"

    def test_invalid_bytes_raise(self, tmp_path):
        """Undecodable input is reported."""
        path = tmp_path / "main.c"
        path.write_bytes(b"// \xff\xfe\n")
        with pytest.raises(SourceEncodingError):
            SourceFile(path, "utf-8")

    def test_unencodable_text_raises(self, tmp_path):
        """Characters missing from the output encoding are reported."""
        path = tmp_path / "main.c"
        path.write_bytes(b"// a\n")
        source = SourceFile(path, "utf-8")
        with pytest.raises(SourceEncodingError):
            source.save(tmp_path / "out.c", "// \U0001F600\n", "cp932")
        assert not (tmp_path / "out.c").exists()

    def test_unknown_encoding(self):
        """Unknown codec names are rejected."""
        with pytest.raises(SourceEncodingError):
            check_encoding("no-such-codec")
