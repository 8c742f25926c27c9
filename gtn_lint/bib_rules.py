"""Bibliography (.bib) rules.

GTN:012 - Your bibliography is missing mandatory fields (a DOI, URL or ISBN, and a title).
GTN:031 - Your bibliography fills the DOI field with https://doi.org/..., just give the DOI.
"""

from __future__ import annotations

import re

from gtn_lint import diagnostics
from gtn_lint.diagnostics import Diagnostic
from gtn_lint.indexes import LintContext
from gtn_lint.parsers import BibEntry, missing_mandatory_fields
from gtn_lint.rules import find_matching_texts

DOI_URL_FIELD_RE = re.compile(r"doi\s*=\s*\{(https?://doi.org/)")


def fix_bib(contents: list[str], entries: list[BibEntry], ctx: LintContext) -> list[Diagnostic]:
    results = []
    for key, reason in missing_mandatory_fields(entries):
        entry_start = re.compile(r"^\s*@.*\{" + re.escape(key) + ",")
        for idx, text, _ in find_matching_texts(contents, entry_start):
            results.append(diagnostics.error(
                path=ctx.path, idx=idx, match_start=0, match_end=len(text),
                message=reason, code="GTN:012", fn="fix_bib"))

    #   doi = {https://doi.org/10.1016/j.cmpbup.2021.100007},
    for idx, _, selected in find_matching_texts(contents, DOI_URL_FIELD_RE):
        results.append(diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement="",
            message="Unnecessary use of URL in DOI-only field, please just use the doi component itself",
            code="GTN:031"))
    return results
