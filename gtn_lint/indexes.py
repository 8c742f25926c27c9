"""Reference indexes consulted by rules, and the per-file linter context.

Both indexes are expensive (every .bib in the corpus, the site config) and
are built on first use, then shared read-only for the rest of the run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import cached_property

import yaml

from gtn_lint.parsers import BibEntry, load_bibliography
from gtn_lint.util import warn
from gtn_lint.walker import enumerate_type

CONFIG_FILE = "_config.yml"

KNOWN_TAGS = frozenset({
    # GTN
    "cite",
    "snippet",
    "link",
    "icon",
    "tool",
    "color",
    "set",  # seen inside a raw block in a tool tutorial
    # Jekyll / Liquid
    "if", "else", "elsif", "endif",
    "capture", "assign", "include",
    "comment", "endcomment",
    "for", "endfor",
    "unless", "endunless",
    "raw", "endraw",
})

BOX_CLASSES = frozenset({
    "agenda",
    "code-in",
    "code-out",
    "comment",
    "details",
    "feedback",
    "hands-on",
    "hands_on",
    "question",
    "solution",
    "tip",
    "warning",
})


class ReferenceIndex:
    """Corpus-wide lookups rooted at the training material checkout."""

    def __init__(self, root: str = "."):
        self.root = root

    @cached_property
    def bibliography(self) -> dict[str, BibEntry]:
        """Citation key → entry, from every .bib under topics/ and faqs/."""
        lib: dict[str, BibEntry] = {}
        paths = (enumerate_type(r"bib$", root=self.root)
                 + enumerate_type(r"bib$", root_dir="faqs", root=self.root))
        for path in paths:
            try:
                entries = load_bibliography(self.resolve(path))
            except Exception as e:
                warn(f"Could not read bibliography {path}: {e}")
                continue
            for entry in entries:
                entry.source = path
                lib[entry.key] = entry
        return lib

    @cached_property
    def config(self) -> dict:
        path = self.resolve(CONFIG_FILE)
        if not os.path.exists(path):
            warn(f"No {CONFIG_FILE} found under {self.root}, icon checks will flag every icon.")
            return {}
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @property
    def icons(self) -> dict:
        return self.config.get("icon-tag") or {}

    def resolve(self, path: str) -> str:
        """Absolute paths pass through; anything else is relative to the root."""
        return os.path.join(self.root, path)

    def exists(self, path: str) -> bool:
        return bool(path) and os.path.exists(self.resolve(path))


@dataclass(frozen=True)
class LintContext:
    """What a rule needs besides the lines: the file path and the indexes."""
    path: str
    index: ReferenceIndex
