"""File classifier and dispatcher: pick the rule subset for a path and run it."""

from __future__ import annotations

import re
from typing import Optional

from gtn_lint import diagnostics
from gtn_lint.bib_rules import fix_bib
from gtn_lint.indexes import LintContext, ReferenceIndex
from gtn_lint.parsers import WorkflowParseError, load_bibliography, load_workflow, read_lines
from gtn_lint.pipeline import DiagnosticPipeline, filter_results, should_ignore
from gtn_lint.rules import fix_md
from gtn_lint.util import warn
from gtn_lint.workflow_rules import check_workflow_tests, fix_ga_wf


def filename_problems(path: str) -> list:
    """GTN:014 - Characters that break the site build or URLs in filenames."""
    res = []
    if re.search(r"\s", path):
        res.append(diagnostics.file_error(
            path=path, message="There are spaces in this filename, that is forbidden.", code="GTN:014"))
    if "?" in path:
        res.append(diagnostics.file_error(
            path=path, message="There ?s in this filename, that is forbidden.", code="GTN:014"))
    if ":" in path:
        res.append(diagnostics.file_error(
            path=path, message="There are colons in this filename, that is forbidden.", code="GTN:014"))
    return res


class Linter:
    """Lints single files against the shared indexes, emitting through a pipeline."""

    def __init__(self, index: Optional[ReferenceIndex] = None, pipeline: Optional[DiagnosticPipeline] = None):
        self.index = index or ReferenceIndex()
        self.pipeline = pipeline or DiagnosticPipeline()

    def lint_file(self, path: str) -> list:
        """All diagnostics for ``path`` after ignore filtering, without emitting them."""
        results = filename_problems(path)
        ctx = LintContext(path=path, index=self.index)
        full_path = self.index.resolve(path)

        if path.endswith(".md"):
            contents = self.read_text_lines(full_path, path)
            if contents is not None:
                ignores = should_ignore(contents)
                results += filter_results(fix_md(contents, ctx), ignores)
        elif path.endswith(".bib"):
            contents = self.read_text_lines(full_path, path)
            if contents is not None:
                try:
                    entries = load_bibliography(full_path)
                except Exception as e:
                    warn(f"Could not read bibliography {path}: {e}")
                    entries = []
                results += fix_bib(contents, entries, ctx)
        elif path.endswith(".ga"):
            results += self.lint_workflow(full_path, ctx)
        return results

    @staticmethod
    def read_text_lines(full_path: str, path: str) -> Optional[list]:
        try:
            return read_lines(full_path)
        except UnicodeDecodeError as e:
            warn(f"Could not decode {path} as UTF-8, skipping its content checks: {e}")
            return None

    def lint_workflow(self, full_path: str, ctx: LintContext) -> list:
        try:
            with open(full_path, encoding="utf-8") as f:
                text = f.read()
            workflow = load_workflow(text)
        except (UnicodeDecodeError, WorkflowParseError) as e:
            warn(f"Error parsing {ctx.path}: {e}")
            return [diagnostics.file_error(
                path=ctx.path, message="Unparseable JSON in this workflow file.", code="GTN:019")]
        return check_workflow_tests(text, ctx) + fix_ga_wf(workflow, ctx)

    def fix_file(self, path: str):
        self.pipeline.emit_results(self.lint_file(path))
