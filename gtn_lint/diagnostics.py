"""Diagnostic records and the reviewdog (rdjson) emitter helpers.

A diagnostic is built from a 0-indexed line number and a pair of match
offsets, and reported 1-indexed. Each rule picks its own ``match_end`` and
consumers rely on the exact numbers, so the helpers here only translate.

When ``match_end`` equals the length of ``full_line`` the end position rolls
over to column 1 of the next line, which reviewdog reads as "up to and
including the newline".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

CODE_URL = "https://training.galaxyproject.org/training-material/gtn_rdoc/Gtn/Linter.html"

WARNING = "WARNING"
ERROR = "ERROR"


@dataclass(frozen=True)
class Diagnostic:
    """One finding. Never mutated after a rule creates it."""
    path: str
    severity: str                 # WARNING | ERROR
    code: Optional[str]           # e.g. "GTN:007"
    message: str
    start_line: int               # 1-indexed
    start_column: int             # 1-indexed
    end_line: int
    end_column: int
    replacement: Optional[str] = None
    fn: Optional[str] = None      # name of the rule that produced it

    @property
    def url(self) -> Optional[str]:
        if self.fn:
            return f"{CODE_URL}#method-c-{self.fn}"
        return None

    @property
    def is_single_line(self) -> bool:
        return self.start_line == self.end_line

    def range_dict(self) -> dict:
        return {
            "start": {"line": self.start_line, "column": self.start_column},
            "end": {"line": self.end_line, "column": self.end_column},
        }

    def to_rdjson(self, path: Optional[str] = None) -> dict:
        """Render as a reviewdog rdjson diagnostic record."""
        res = {
            "message": self.message,
            "location": {
                "path": self.path if path is None else path,
                "range": self.range_dict(),
            },
            "severity": self.severity,
        }
        if self.code is not None:
            res["code"] = {"value": self.code}
            if self.url:
                res["code"]["url"] = self.url
        if self.replacement is not None:
            res["suggestions"] = [{
                "text": self.replacement,
                "range": self.range_dict(),
            }]
        return res


# ─── Constructors ───────────────────────────────────────────────────────────

def diagnostic(path="", idx=0, match_start=0, match_end=1, replacement=None,
               message="No message", level=WARNING, code="GTN000", full_line="",
               fn=None) -> Diagnostic:
    end_line, end_column = idx + 1, match_end
    if match_end == len(full_line):
        end_line, end_column = idx + 2, 1
    return Diagnostic(
        path=path,
        severity=level,
        code=code,
        message=message,
        start_line=idx + 1,
        start_column=match_start + 1,
        end_line=end_line,
        end_column=end_column,
        replacement=replacement,
        fn=fn,
    )


def warning(path="", idx=0, match_start=0, match_end=1, replacement=None,
            message="No message", code="GTN000", full_line="", fn=None) -> Diagnostic:
    return diagnostic(
        path=path, idx=idx, match_start=match_start, match_end=match_end,
        replacement=replacement, message=message, level=WARNING, code=code,
        full_line=full_line, fn=fn,
    )


def error(path="", idx=0, match_start=0, match_end=1, replacement=None,
          message="No message", code="GTN000", full_line="", fn=None) -> Diagnostic:
    return diagnostic(
        path=path, idx=idx, match_start=match_start, match_end=match_end,
        replacement=replacement, message=message, level=ERROR, code=code,
        full_line=full_line, fn=fn,
    )


def file_error(path="", message="None", code="GTN:000", fn=None) -> Diagnostic:
    """An ERROR attached to the file as a whole (first character)."""
    return error(path=path, idx=0, match_start=0, match_end=1, replacement=None,
                 message=message, code=code, full_line="", fn=fn)


def delete_text(path="", idx=0, text="", message="No message", code="GTN000",
                full_line="", fn=None) -> Diagnostic:
    """An ERROR suggesting the whole of ``text`` be removed."""
    return error(path=path, idx=idx, match_start=0, match_end=len(text),
                 replacement="", message=message, code=code,
                 full_line=full_line, fn=fn)
