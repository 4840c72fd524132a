"""Unit tests for the command line front end."""

from __future__ import annotations

from pathlib import Path

import pytest

from fluent_modelgen.cli import main

MODELS = """
    @entity
    class Author:
        id: Annotated[int, Id]
        name: str

    @entity
    class Book:
        id: Annotated[int, Id]
        author: Annotated[Author, ManyToOne]
"""


class TestMain:
    def test_success(self, src_dir: Path, tmp_path: Path, write_source, capsys: pytest.CaptureFixture) -> None:
        write_source("library/models.py", MODELS)
        out = tmp_path / "out"
        assert main([str(src_dir), "-o", str(out)]) == 0
        assert capsys.readouterr().out.splitlines() == ["library.author_model", "library.book_model"]
        assert (out / "library" / "book_model.py").is_file()
        assert (out / "library" / "__init__.py").is_file()

    def test_skip(self, src_dir: Path, tmp_path: Path, write_source, capsys: pytest.CaptureFixture) -> None:
        write_source("library/models.py", MODELS)
        out = tmp_path / "out"
        assert main([str(src_dir), "-o", str(out), "--skip", "Author", "--skip", "library.models.Book"]) == 0
        assert capsys.readouterr().out == ""
        assert not out.exists()

    def test_errors_exit_one(self, src_dir: Path, tmp_path: Path, write_source) -> None:
        write_source("library/models.py", """
            @entity
            class Draft:
                title: str
        """)
        assert main([str(src_dir), "-o", str(tmp_path / "out")]) == 1

    def test_undecodable_source_exits_one(self, src_dir: Path, tmp_path: Path, write_source) -> None:
        write_source("library/models.py", MODELS)
        (src_dir / "library" / "legacy.py").write_bytes(b"\xff\xfe\x00bad")
        assert main([str(src_dir), "-o", str(tmp_path / "out")]) == 1
        assert (tmp_path / "out" / "library" / "book_model.py").is_file()

    def test_missing_source_directory(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing"), "-o", str(tmp_path / "out")]) == 2

    def test_output_is_required(self, src_dir: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(src_dir)])
        assert exc_info.value.code == 2
