"""Tests for gtn_lint/pipeline.py — suppression, formats, auto-fix."""

import json

from gtn_lint import diagnostics
from gtn_lint.pipeline import DiagnosticPipeline, EmitOptions, filter_results, should_ignore


def diag(path="./topics/a.md", code="GTN:007", **kw):
    kw.setdefault("message", "The citation (x) could not be found.\nsecond line")
    return diagnostics.error(path=path, code=code, **kw)


# ---------------------------------------------------------------------------
# Suppression
# ---------------------------------------------------------------------------

class TestShouldIgnore:

    def test_markers(self):
        lines = ["<!-- GTN:IGNORE:007 -->", "text", "GTN:IGNORE:033 GTN:IGNORE:007"]
        assert should_ignore(lines) == ["GTN:007", "GTN:033"]

    def test_none(self):
        assert should_ignore(["GTN:IGNORE:7", "plain"]) == []


class TestFilterResults:

    def test_ignored_codes_removed(self):
        results = [diag(code="GTN:007"), diag(code="GTN:005"), None]
        assert [r.code for r in filter_results(results, ["GTN:007"])] == ["GTN:005"]

    def test_no_ignores(self):
        results = [diag(code="GTN:007")]
        assert filter_results(results) == results


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class TestFormat:

    def test_plain(self):
        line = DiagnosticPipeline().format(diag(idx=0, match_start=2, match_end=9))
        assert line == "./topics/a.md:1:3:1:9:GTN007 The citation (x) could not be found."

    def test_plain_short_path(self):
        p = DiagnosticPipeline(EmitOptions(short_path=True))
        assert p.format(diag()).startswith("topics/a.md:1:1:")

    def test_short_path_custom_root(self):
        p = DiagnosticPipeline(EmitOptions(short_path=True, root="/srv/gtn"))
        assert p.format(diag(path="/srv/gtn/topics/a.md")).startswith("topics/a.md:")

    def test_rdjson(self):
        d = diag(replacement="", fn="check_bad_cite")
        out = DiagnosticPipeline(EmitOptions(fmt="rdjson")).format(d)
        assert "\n" not in out
        assert json.loads(out) == d.to_rdjson()


class TestEmit:

    def test_one_line_per_diagnostic(self, capsys):
        p = DiagnosticPipeline()
        p.emit_results([diag(), None, diag(code="GTN:005")])
        out = capsys.readouterr().out.splitlines()
        assert len(out) == 2

    def test_limit(self, capsys):
        p = DiagnosticPipeline(EmitOptions(limit=frozenset({"GTN:005"})))
        p.emit_results([diag(code="GTN:007"), diag(code="GTN:005")])
        out = capsys.readouterr().out.splitlines()
        assert len(out) == 1
        assert "GTN005" in out[0]


# ---------------------------------------------------------------------------
# Auto-fix
# ---------------------------------------------------------------------------

class TestAutoFix:

    def test_single_line_rewrite(self, tmp_path, capsys):
        doc = tmp_path / "doc.md"
        doc.write_text("# Title\n\nRead [here](https://example.com) now.\nLast line\n", encoding="utf-8")
        # "[here]" spans offsets 5..11 on the third line
        d = diagnostics.error(path="doc.md", idx=2, match_start=5, match_end=12,
                              replacement="[the docs]", code="GTN:005")
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit(d)

        assert doc.read_text(encoding="utf-8") == (
            "# Title\n\nRead [the docs](https://example.com) now.\nLast line\n"
        )
        err = capsys.readouterr().err
        assert "DIFF" in err
        assert "+Read [the docs](https://example.com) now." in err

    def test_multi_line_not_applied(self, tmp_path, capsys):
        doc = tmp_path / "doc.md"
        original = "## Heading {: .no_toc}\nText\n"
        doc.write_text(original, encoding="utf-8")
        line = "## Heading {: .no_toc}"
        d = diagnostics.delete_text(path="doc.md", idx=0, text=line, code="GTN:001", full_line=line)
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit(d)

        assert doc.read_text(encoding="utf-8") == original
        assert "Cannot apply this suggestion sorry" in capsys.readouterr().err

    def test_no_suggestion_no_write(self, tmp_path):
        doc = tmp_path / "doc.md"
        doc.write_text("text\n", encoding="utf-8")
        d = diagnostics.error(path="missing.md", idx=0, code="GTN:007")
        # Would raise if it tried to read missing.md.
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit(d)
        assert doc.read_text(encoding="utf-8") == "text\n"

    def test_disabled_by_default(self, tmp_path):
        doc = tmp_path / "doc.md"
        doc.write_text("Read [here](x)\n", encoding="utf-8")
        d = diagnostics.error(path="doc.md", idx=0, match_start=5, match_end=12, replacement="[docs]")
        DiagnosticPipeline(EmitOptions(root=str(tmp_path))).emit(d)
        assert doc.read_text(encoding="utf-8") == "Read [here](x)\n"

    def test_two_fixes_on_one_line(self, tmp_path):
        doc = tmp_path / "doc.md"
        doc.write_text("Title\nSee [here](a) and [link](b) now.\n", encoding="utf-8")
        # "[here]" is 4..10 and "[link]" is 18..24 on the second line
        results = [
            diagnostics.error(path="doc.md", idx=1, match_start=4, match_end=11,
                              replacement="[Something better here]", code="GTN:005"),
            diagnostics.error(path="doc.md", idx=1, match_start=18, match_end=25,
                              replacement="[Something better here]", code="GTN:005"),
        ]
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit_results(results)

        assert doc.read_text(encoding="utf-8") == (
            "Title\nSee [Something better here](a) and [Something better here](b) now.\n"
        )

    def test_overlapping_fix_skipped(self, tmp_path, capsys):
        doc = tmp_path / "doc.md"
        doc.write_text("abcdef\n", encoding="utf-8")
        results = [
            diagnostics.error(path="doc.md", idx=0, match_start=0, match_end=4, replacement="X"),
            diagnostics.error(path="doc.md", idx=0, match_start=2, match_end=6, replacement="Y"),
        ]
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit_results(results)

        # the rightmost span wins, "cde" -> "Y"
        assert doc.read_text(encoding="utf-8") == "abYf\n"
        assert "overlaps" in capsys.readouterr().err

    def test_fixes_on_separate_lines(self, tmp_path):
        doc = tmp_path / "doc.md"
        doc.write_text("one\ntwo\n", encoding="utf-8")
        results = [
            diagnostics.error(path="doc.md", idx=0, match_start=0, match_end=4, replacement="1"),
            diagnostics.error(path="doc.md", idx=1, match_start=0, match_end=4, replacement="2"),
        ]
        DiagnosticPipeline(EmitOptions(auto_fix=True, root=str(tmp_path))).emit_results(results)
        assert doc.read_text(encoding="utf-8") == "1\n2\n"
