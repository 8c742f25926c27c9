"""Tests for Choose Your Own Adventure branch validation (GTN:041–045)."""

import pytest

from gtn_lint.indexes import LintContext, ReferenceIndex
from gtn_lint.rules import cyoa_branches, parse_cyoa_branches


@pytest.fixture
def ctx(tmp_path):
    return LintContext(path="./topics/intro/tutorials/t/tutorial.md", index=ReferenceIndex(str(tmp_path)))


def include(**kwargs):
    args = " ".join(f'{k}="{v}"' for k, v in kwargs.items())
    return "{% include _includes/cyoa-choices.html " + args + " %}"


def codes(results):
    return [r.code for r in results]


class TestParseBranches:

    def test_single_line(self):
        branches = parse_cyoa_branches(include(option1="Galaxy", option2="Planemo", default="Galaxy"))
        assert branches == [{"option1": "Galaxy", "option2": "Planemo", "default": "Galaxy"}]

    def test_include_spanning_lines(self):
        text = '{% include _includes/cyoa-choices.html\n   option1="A"\n   option2="B"\n   default="A" %}'
        branches = parse_cyoa_branches(text)
        assert branches == [{"option1": "A", "option2": "B", "default": "A"}]

    def test_several_includes(self):
        text = include(option1="A", default="A") + "\n\ntext\n\n" + include(option1="C", default="C")
        assert len(parse_cyoa_branches(text)) == 2

    def test_no_includes(self):
        assert parse_cyoa_branches("# Title\n\nJust text") == []


class TestCyoaBranches:

    def test_clean(self, ctx):
        lines = [
            include(option1="Galaxy", option2="Planemo", default="Galaxy"),
            '<div class="galaxy" markdown="1">',
            "</div>",
            '<div class="planemo" markdown="1">',
            "</div>",
        ]
        assert cyoa_branches(lines, ctx) == []

    def test_duplicate_slugs(self, ctx):
        lines = [include(option1="Option A", option2="Option-A", default="Option A")]
        res = cyoa_branches(lines, ctx)
        assert codes(res).count("GTN:041") == 1
        dup = [r for r in res if r.code == "GTN:041"][0]
        assert dup.severity == "ERROR"
        assert "option-a" in dup.message

    def test_duplicates_across_includes(self, ctx):
        lines = [
            include(option1="Hello World", default="Hello World"),
            include(option1="hello world", default="hello world"),
            "hello-world",
        ]
        assert "GTN:041" in codes(cyoa_branches(lines, ctx))

    def test_missing_default(self, ctx):
        lines = [include(option1="Galaxy", option2="Planemo"), "galaxy planemo"]
        assert codes(cyoa_branches(lines, ctx)) == ["GTN:042"]

    def test_default_only_slug_equal(self, ctx):
        lines = [include(option1="Galaxy Server", default="galaxy server"), "galaxy-server"]
        res = cyoa_branches(lines, ctx)
        assert codes(res) == ["GTN:043"]
        assert res[0].severity == "WARNING"

    def test_default_matches_nothing(self, ctx):
        lines = [include(option1="Galaxy", default="Conda"), "galaxy"]
        assert codes(cyoa_branches(lines, ctx)) == ["GTN:044"]

    def test_unused_option(self, ctx):
        lines = [include(option1="Galaxy", option2="Planemo", default="Galaxy"), '<div class="galaxy">']
        res = cyoa_branches(lines, ctx)
        assert codes(res) == ["GTN:045"]
        assert "Planemo" in res[0].message

    def test_file_level_location(self, ctx):
        res = cyoa_branches([include(option1="Galaxy")], ctx)
        for r in res:
            assert (r.start_line, r.start_column, r.end_line, r.end_column) == (1, 1, 1, 1)
