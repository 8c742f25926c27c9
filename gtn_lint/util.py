"""Shared helpers: operator messages, slugs and tool ID acceptance."""

from __future__ import annotations

import re
import sys

# ─── Operator messages ──────────────────────────────────────────────────────
# Diagnostics own stdout, so anything meant for the person running the linter
# goes to stderr.


def abort(msg):
    """Print error and exit."""
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def warn(msg):
    """Print warning to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)


def info(msg):
    """Print info to stdout."""
    print(msg)


# ─── Slugs ──────────────────────────────────────────────────────────────────

SLUG_STRIP_RE = re.compile(r"[\"'\\/;:,.!@#$%^&*()]")


def unsafe_slugify(text: str) -> str:
    """Slug used by the CYOA include to name branches.

    Lossy on purpose: punctuation is dropped, ASCII letters are lowercased and
    every whitespace character becomes a hyphen (runs collapsed). Two option
    labels must always be compared through this function.
    """
    text = SLUG_STRIP_RE.sub("", text)
    text = "".join(c.lower() if c.isascii() else c for c in text)
    text = re.sub(r"\s", "-", text)
    return re.sub(r"-+", "-", text)


# ─── Tool IDs ───────────────────────────────────────────────────────────────

# Built-in tools that ship with Galaxy and have no toolshed ID.
ALLOWED_SHORT_IDS = frozenset({
    "ChangeCase",
    "Convert characters1",
    "Count1",
    "Cut1",
    "Extract genomic DNA 1",
    "Extract_features1",
    "Filter1",
    "Grep1",
    "Grouping1",
    "Paste1",
    "Remove beginning1",
    "Show beginning1",
    "Show tail1",
    "Summary_Statistics1",
    "addValue",
    "cat1",
    "comp1",
    "createInterval",
    "csv_to_tabular",
    "ebi_sra_main",
    "gene2exon1",
    "intermine",
    "join1",
    "param_value_from_file",
    "random_lines1",
    "sort1",
    "tabular_to_csv",
    "trimmer",
    "ucsc_table_direct1",
    "upload1",
    "wc_gnu",
    "wig_to_bigWig",
})

# host/repos/<owner>/<repo>/<tool>/<version>
TOOLSHED_ID_RE = re.compile(r"^toolshed\.g2\.bx\.psu\.edu/repos/[^/\s]+/[^/\s]+/[^/\s]+/[^/\s]+$")
BUILTIN_ID_RE = re.compile(r"^__.*__$")


def acceptable_tool(tool_id) -> bool:
    """True when a tool ID may be used in tutorials and workflows."""
    if not isinstance(tool_id, str):
        return False
    if TOOLSHED_ID_RE.match(tool_id):
        return True
    if tool_id in ALLOWED_SHORT_IDS or BUILTIN_ID_RE.match(tool_id):
        return True
    if tool_id.startswith("interactive_tool_"):
        return True
    # Templated IDs are resolved at build time.
    if tool_id.startswith("{{"):
        return True
    return False
