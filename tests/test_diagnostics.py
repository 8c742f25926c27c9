"""Tests for gtn_lint/diagnostics.py — positions and rdjson rendering."""

from gtn_lint import diagnostics
from gtn_lint.diagnostics import CODE_URL, Diagnostic


class TestPositions:

    def test_zero_indexed_in_one_indexed_out(self):
        d = diagnostics.error(path="a.md", idx=2, match_start=4, match_end=10, code="GTN:005")
        assert (d.start_line, d.start_column, d.end_line, d.end_column) == (3, 5, 3, 10)
        assert d.severity == "ERROR"

    def test_rollover_at_line_end(self):
        d = diagnostics.warning(idx=0, match_start=0, match_end=3, full_line="abc")
        assert (d.end_line, d.end_column) == (2, 1)
        assert not d.is_single_line

    def test_rollover_without_line(self):
        d = diagnostics.error(idx=0, match_start=0, match_end=0)
        assert (d.end_line, d.end_column) == (2, 1)

    def test_file_error(self):
        d = diagnostics.file_error(path="a.ga", message="bad", code="GTN:019")
        assert (d.start_line, d.start_column, d.end_line, d.end_column) == (1, 1, 1, 1)
        assert d.replacement is None
        assert d.severity == "ERROR"

    def test_delete_text(self):
        line = "## Heading {: .no_toc}"
        d = diagnostics.delete_text(path="a.md", idx=4, text=line, code="GTN:001", full_line=line)
        assert (d.start_line, d.start_column, d.end_line, d.end_column) == (5, 1, 6, 1)
        assert d.replacement == ""


class TestRdjson:

    def test_full_record(self):
        d = diagnostics.error(path="./a.md", idx=0, match_start=0, match_end=5, replacement="x",
                              message="msg", code="GTN:005", fn="check_bad_link_text")
        assert d.to_rdjson() == {
            "message": "msg",
            "location": {
                "path": "./a.md",
                "range": {"start": {"line": 1, "column": 1}, "end": {"line": 1, "column": 5}},
            },
            "severity": "ERROR",
            "code": {"value": "GTN:005", "url": f"{CODE_URL}#method-c-check_bad_link_text"},
            "suggestions": [{
                "text": "x",
                "range": {"start": {"line": 1, "column": 1}, "end": {"line": 1, "column": 5}},
            }],
        }

    def test_no_url_without_rule(self):
        rec = diagnostics.file_error(path="a.ga", code="GTN:024").to_rdjson()
        assert rec["code"] == {"value": "GTN:024"}
        assert "suggestions" not in rec

    def test_empty_replacement_is_a_suggestion(self):
        rec = diagnostics.warning(replacement="").to_rdjson()
        assert rec["suggestions"][0]["text"] == ""

    def test_path_override(self):
        d = Diagnostic("./topics/a.md", "WARNING", "GTN:001", "m", 1, 1, 1, 2)
        assert d.to_rdjson(path="topics/a.md")["location"]["path"] == "topics/a.md"
