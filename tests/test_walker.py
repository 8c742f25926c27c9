"""Tests for gtn_lint/walker.py — discovery and the corpus-wide pass."""

import os

import pytest

from gtn_lint.dispatch import Linter
from gtn_lint.indexes import ReferenceIndex
from gtn_lint.pipeline import DiagnosticPipeline, EmitOptions
from gtn_lint.walker import enumerate_lintable, enumerate_symlinks, enumerate_type, run_linter_global


def write(path, text=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def corpus(tmp_path):
    tut = tmp_path / "topics" / "intro" / "tutorials" / "t"
    write(tut / "tutorial.md", "# Title\n\nSome text.\n")
    write(tut / "tutorial.bib", "@misc{k,\n  title = {T},\n  url = {https://example.com}\n}\n")
    write(tut / "data_library.yml", "destination: {}\n")
    write(tut / "notes:draft.txt", "x")
    write(tut / ".hidden" / "ignored.md", "**Bold line**\n")
    write(tmp_path / "faqs" / "gtn" / "faq.md", "An answer.\n")
    write(tmp_path / "news" / "_posts" / "2024-01-01-post.md", "News.\n")
    write(tmp_path / "_config.yml", "icon-tag: {}\n")
    os.symlink(str(tut / "gone.md"), str(tut / "broken.md"))
    return tmp_path


class TestEnumerate:

    def test_relative_dot_paths(self, corpus):
        assert enumerate_type(r"\.bib$", root=str(corpus)) == ["./topics/intro/tutorials/t/tutorial.bib"]

    def test_hidden_directories_skipped(self, corpus):
        found = enumerate_type(r"md$", root=str(corpus))
        assert not any(".hidden" in p for p in found)

    def test_lintable(self, corpus):
        assert enumerate_lintable(str(corpus)) == [
            "./topics/intro/tutorials/t/tutorial.bib",
            "./topics/intro/tutorials/t/broken.md",
            "./topics/intro/tutorials/t/tutorial.md",
            "./faqs/gtn/faq.md",
            "./news/_posts/2024-01-01-post.md",
        ]

    def test_symlinks(self, corpus):
        assert enumerate_symlinks(root=str(corpus)) == ["./topics/intro/tutorials/t/broken.md"]

    def test_missing_root_dir(self, tmp_path):
        assert enumerate_type(r".*", root_dir="news", root=str(tmp_path)) == []


class TestRunLinterGlobal:

    def run(self, corpus, capsys):
        # The broken symlink cannot be read, so lint everything but it.
        os.remove(str(corpus / "topics" / "intro" / "tutorials" / "t" / "broken.md"))
        os.symlink("gone.yml", str(corpus / "topics" / "intro" / "tutorials" / "t" / "broken.yml"))
        linter = Linter(ReferenceIndex(str(corpus)), DiagnosticPipeline(EmitOptions(root=str(corpus))))
        run_linter_global(linter)
        return capsys.readouterr().out.splitlines()

    def test_global_checks(self, corpus, capsys):
        out = self.run(corpus, capsys)
        assert out == [
            "./topics/intro/tutorials/t/notes:draft.txt:1:1:1:1:GTN014 There are colons in this filename, "
            "that is forbidden.",
            "./topics/intro/tutorials/t/broken.yml:1:1:1:1:GTN013 This is a BAD symlink",
            "./topics/intro/tutorials/t/data_library.yml:1:1:1:1:GTN023 This file must be named "
            "data-library.yaml. Please rename it.",
        ]
