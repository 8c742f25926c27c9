"""Diagnostic pipeline: suppression, code limits, output formats and auto-fix.

Order matters and is fixed: ignore markers are collected from the file, the
rules' raw results are filtered by them, then by the ``--limit`` allow-list,
and only then is each survivor printed and (optionally) applied.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from gtn_lint.diagnostics import Diagnostic
from gtn_lint.parsers import read_lines
from gtn_lint.util import info, warn

IGNORE_RE = re.compile(r"GTN:IGNORE:(\d\d\d)")

FORMATS = ("plain", "rdjson")


@dataclass
class EmitOptions:
    fmt: str = "plain"                  # plain | rdjson
    limit: Optional[frozenset] = None   # codes to emit, None for all
    auto_fix: bool = False
    short_path: bool = False
    root: str = "."                     # corpus root


def should_ignore(contents: list[str]) -> list[str]:
    """Codes suppressed by ``GTN:IGNORE:NNN`` markers, in first-seen order."""
    ignores = []
    for line in contents:
        for num in IGNORE_RE.findall(line):
            code = f"GTN:{num}"
            if code not in ignores:
                ignores.append(code)
    return ignores


def filter_results(results: Iterable[Optional[Diagnostic]], ignores: Iterable[str] = ()) -> list[Diagnostic]:
    ignores = set(ignores)
    return [r for r in results if r is not None and r.code not in ignores]


def apply_suggestion(lines: list[str], diag: Diagnostic) -> tuple[str, str]:
    """Rewrite the addressed line in place, returning (original, fixed)."""
    original = lines[diag.start_line - 1]
    fixed = original[:diag.start_column - 1] + diag.replacement + original[diag.end_column - 1:]
    lines[diag.start_line - 1] = fixed
    return original, fixed


class DiagnosticPipeline:
    """Formats diagnostics to stdout and applies their suggestions."""

    def __init__(self, options: Optional[EmitOptions] = None):
        self.options = options or EmitOptions()

    def display_path(self, path: str) -> str:
        prefix = self.options.root.rstrip("/") + "/"
        if self.options.short_path and path.startswith(prefix):
            return path[len(prefix):]
        return path

    def format(self, diag: Diagnostic) -> str:
        path = self.display_path(diag.path)
        if self.options.fmt == "plain":
            code = (diag.code or "").replace(":", "")
            first_line = diag.message.split("\n")[0]
            return ":".join(str(p) for p in (
                path, diag.start_line, diag.start_column, diag.end_line, diag.end_column,
                f"{code} {first_line}"))
        return json.dumps(diag.to_rdjson(path=path), ensure_ascii=False, separators=(",", ":"))

    def emit(self, diag: Optional[Diagnostic]):
        self.emit_results([diag])

    def emit_results(self, results: Iterable[Optional[Diagnostic]]):
        """Print every surviving diagnostic, then apply the collected suggestions."""
        fixes = []
        limit = self.options.limit
        for diag in results:
            if diag is None:
                continue
            if limit is not None and diag.code not in limit:
                continue
            info(self.format(diag))
            if self.options.auto_fix and diag.replacement is not None:
                fixes.append(diag)
        if fixes:
            self.apply_fixes(fixes)

    def apply_fixes(self, fixes: list[Diagnostic]):
        """Single-line suggestions only; anything spanning lines is reported and left alone.

        Each file is read and written once. Suggestions on the same line are
        applied right to left so earlier columns stay valid, and one that
        overlaps an already applied span is skipped.
        """
        by_path: dict[str, list[Diagnostic]] = {}
        for diag in fixes:
            if not diag.is_single_line:
                warn("Cannot apply this suggestion sorry")
                continue
            by_path.setdefault(diag.path, []).append(diag)

        for path, diags in by_path.items():
            target = os.path.join(self.options.root, path)
            lines = read_lines(target)
            by_line: dict[int, list[Diagnostic]] = {}
            for diag in diags:
                if diag.start_line > len(lines):
                    warn(f"Cannot apply this suggestion sorry, {path} has no line {diag.start_line}")
                    continue
                by_line.setdefault(diag.start_line, []).append(diag)
            if not by_line:
                continue

            for line_no, line_diags in by_line.items():
                original = lines[line_no - 1]
                applied_from = None
                for diag in sorted(line_diags, key=lambda d: (-d.start_column, -d.end_column)):
                    if applied_from is not None and diag.end_column > applied_from:
                        warn(f"Cannot apply this suggestion sorry, it overlaps another on {path}:{line_no}")
                        continue
                    apply_suggestion(lines, diag)
                    applied_from = diag.start_column
                warn(f"DIFF\n-{original}\n+{lines[line_no - 1]}")

            with open(target, "w", encoding="utf-8") as f:
                f.write("\n".join(lines + [""]))
