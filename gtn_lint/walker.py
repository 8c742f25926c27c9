"""Corpus walker: enumerate content files and run the corpus-wide checks.

Paths are reported the way the site build sees them, relative to the corpus
root and prefixed with ``./`` (``./topics/admin/tutorials/x/tutorial.md``).
Hidden directories (``.git``, ``.jekyll-cache`` ...) are never entered.
"""

from __future__ import annotations

import os
import re

from gtn_lint import diagnostics

LINTABLE_SUFFIXES = (".md", ".bib", ".ga")


def _walk(root_dir: str, root: str):
    start = os.path.join(root, root_dir)
    for dirpath, dirnames, filenames in os.walk(start):
        # Prune in place so os.walk does not descend.
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for fn in sorted(filenames):
            full = os.path.join(dirpath, fn)
            yield full, "./" + os.path.relpath(full, root).replace(os.sep, "/")


def enumerate_type(pattern: str, root_dir: str = "topics", root: str = ".") -> list[str]:
    """Files under ``root/root_dir`` whose ./-relative path matches ``pattern``."""
    regex = re.compile(pattern)
    return [rel for _, rel in _walk(root_dir, root) if regex.search(rel)]


def enumerate_symlinks(root_dir: str = "topics", root: str = ".") -> list[str]:
    return [rel for full, rel in _walk(root_dir, root) if os.path.islink(full)]


def enumerate_lintable(root: str = ".") -> list[str]:
    return (enumerate_type(r"bib$", root=root)
            + enumerate_type(r"md$", root=root)
            + enumerate_type(r"md$", root_dir="faqs", root=root)
            + enumerate_type(r"md$", root_dir="news", root=root))


def run_linter_global(linter):
    """Lint the whole corpus: filename-level checks, then workflows, then content.

    GTN:014 - please do not use : colon in your filename.
    GTN:013 - Please fix this symlink
    GTN:023 - data libraries must be named data-library.yaml
    """
    root = linter.index.root
    emit = linter.pipeline.emit

    # Lintable files get the colon check from fix_file along with the others.
    for path in enumerate_type(r":", root=root):
        if not path.endswith(LINTABLE_SUFFIXES):
            emit(diagnostics.file_error(
                path=path, message="There are colons in this filename, that is forbidden.",
                code="GTN:014"))

    for path in enumerate_symlinks(root=root):
        if not os.path.exists(os.path.join(root, path)):
            emit(diagnostics.file_error(path=path, message="This is a BAD symlink", code="GTN:013"))

    for path in enumerate_type(r"data[_-]library.ya?ml", root=root):
        if path.split("/")[-1] != "data-library.yaml":
            emit(diagnostics.file_error(
                path=path, message="This file must be named data-library.yaml. Please rename it.",
                code="GTN:023"))

    for path in enumerate_type(r"\.ga$", root=root):
        linter.fix_file(path)

    for path in enumerate_lintable(root=root):
        linter.fix_file(path)
