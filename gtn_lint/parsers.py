"""Structural parsers: Markdown headings, BibTeX entries, Galaxy workflows.

Rules mostly work on raw lines; these parsers exist for the handful of
checks that need structure (heading order, bibliography metadata, workflow
fields and their tests).
"""

from __future__ import annotations

import glob
import json
import os
import re
from dataclasses import dataclass, field
from typing import Optional

import bibtexparser
import yaml
from bibtexparser.bparser import BibTexParser
from markdown_it import MarkdownIt


# ─── Lines ──────────────────────────────────────────────────────────────────

def split_lines(text: str) -> list[str]:
    """Split on newlines, dropping trailing empty lines."""
    lines = text.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return lines


def read_lines(path: str) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return split_lines(f.read())


# ─── Markdown headings ──────────────────────────────────────────────────────

@dataclass
class Heading:
    level: int                    # 1–6
    raw_text: str                 # heading text without the #s
    line: int                     # 1-indexed source line


def blank_front_matter(lines: list[str]) -> list[str]:
    """Replace a leading YAML front matter block with empty lines.

    Keeps line numbering intact. Without this the last metadata line followed
    by the closing ``---`` would parse as a setext heading.
    """
    if not lines or lines[0].strip() != "---":
        return list(lines)
    for end in range(1, len(lines)):
        if lines[end].strip() == "---":
            return [""] * (end + 1) + list(lines[end + 1:])
    return list(lines)


_MD = MarkdownIt("commonmark")


def extract_headings(lines: list[str]) -> list[Heading]:
    """Top-level headings in document order (not those nested in quotes/lists)."""
    tokens = _MD.parse("\n".join(blank_front_matter(lines)))
    headings = []
    for i, tok in enumerate(tokens):
        if tok.type != "heading_open" or tok.level != 0 or tok.map is None:
            continue
        inline = tokens[i + 1] if i + 1 < len(tokens) else None
        raw = inline.content if inline is not None and inline.type == "inline" else ""
        headings.append(Heading(level=int(tok.tag[1:]), raw_text=raw, line=tok.map[0] + 1))
    return headings


# ─── BibTeX ─────────────────────────────────────────────────────────────────

@dataclass
class BibEntry:
    key: str
    fields: dict[str, str] = field(default_factory=dict)
    source: str = ""              # .bib file the entry came from

    def get(self, name: str) -> Optional[str]:
        return self.fields.get(name)

    @property
    def doi(self):
        return self.get("doi")

    @property
    def url(self):
        return self.get("url")

    @property
    def isbn(self):
        return self.get("isbn")

    @property
    def title(self):
        return self.get("title")


def parse_bibliography(text: str, source: str = "") -> list[BibEntry]:
    # A BibTexParser accumulates entries, so each parse needs a fresh one.
    parser = BibTexParser(common_strings=True, ignore_nonstandard_types=False)
    db = bibtexparser.loads(text, parser=parser)
    entries = []
    for raw in db.entries:
        fields = {k.lower(): v for k, v in raw.items() if k not in ("ID", "ENTRYTYPE")}
        entries.append(BibEntry(key=raw["ID"], fields=fields, source=source))
    return entries


def load_bibliography(path: str) -> list[BibEntry]:
    with open(path, encoding="utf-8") as f:
        return parse_bibliography(f.read(), source=path)


MISSING_LINK = "Missing a DOI, URL or ISBN. Please add one of the three."
MISSING_TITLE = "This entry is missing a title attribute. Please add it."


def missing_mandatory_fields(entries: list[BibEntry]) -> list[tuple[str, str]]:
    """(key, reason) for each entry lacking a locator or a title."""
    results = []
    for entry in entries:
        if entry.doi is None and entry.url is None and entry.isbn is None:
            results.append((entry.key, MISSING_LINK))
        if not entry.title:
            results.append((entry.key, MISSING_TITLE))
    return results


# ─── Galaxy workflows ───────────────────────────────────────────────────────

class WorkflowParseError(ValueError):
    """The workflow file is not valid JSON."""


def load_workflow(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise WorkflowParseError(str(e)) from e


def _iter_steps(steps):
    if isinstance(steps, dict):
        return steps.items()
    if isinstance(steps, list):
        return ((str(i), s) for i, s in enumerate(steps))
    return ()


def tool_id_extractor(workflow: dict, path: tuple = ()) -> list[tuple[str, str]]:
    """(step path, tool_id) for every tool step, recursing into subworkflows."""
    res = []
    for step_id, step in _iter_steps(workflow.get("steps")):
        if not isinstance(step, dict):
            continue
        if "subworkflow" in step and isinstance(step["subworkflow"], dict):
            res += tool_id_extractor(step["subworkflow"], path + (step_id,))
        elif step.get("tool_id") is not None:
            res.append(("/".join(path) + "/" + str(step_id), step["tool_id"]))
    return res


def find_workflow_tests(path: str) -> list[str]:
    """Test files next to a workflow: ``<base>-tests.yml`` and near misses."""
    folder = os.path.dirname(path)
    basename = re.sub(r"\.ga$", "", os.path.basename(path))
    candidates = glob.glob(os.path.join(glob.escape(folder), glob.escape(basename) + "*"))
    name_re = re.compile(re.escape(basename) + r"[_-]tests?.ya?ml")
    return sorted(p for p in candidates if name_re.search(p))


def load_workflow_test(path: str):
    """(parsed YAML, raw text) for a workflow test file."""
    with open(path, encoding="utf-8") as f:
        text = f.read()
    return yaml.safe_load(text), text
