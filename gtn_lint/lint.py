#!/usr/bin/env python3
"""GTN content linter.

Checks tutorials (Markdown), bibliographies (BibTeX) and Galaxy workflows
(.ga) under a training-material checkout for style, accessibility and
correctness problems. Findings are printed one per line, either as
``path:line:col:end_line:end_col:CODE message`` or as reviewdog rdjson.

Usage:
    python gtn_lint/lint.py [--format plain|rdjson] [--root DIR]
    python gtn_lint/lint.py --path topics/admin/tutorials/x/tutorial.md --auto-fix
    python gtn_lint/lint.py --format rdjson --limit GTN:007,GTN:033 | reviewdog -f=rdjson

Suppress a code for one Markdown file by writing GTN:IGNORE:NNN anywhere in
it (usually inside an HTML comment).
"""

import argparse
import os
import sys

# Add repo root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from gtn_lint.dispatch import Linter
from gtn_lint.indexes import ReferenceIndex
from gtn_lint.pipeline import FORMATS, DiagnosticPipeline, EmitOptions
from gtn_lint.util import abort
from gtn_lint.walker import run_linter_global


def parse_limit(value):
    if not value:
        return None
    return frozenset(code.strip() for code in value.split(",") if code.strip())


def build_parser():
    parser = argparse.ArgumentParser(
        description="Lint GTN tutorials, bibliographies and workflows.",
        epilog="Rule documentation: https://training.galaxyproject.org/training-material/gtn_rdoc/Gtn/Linter.html",
    )
    parser.add_argument("-f", "--format", default="plain",
                        help="Output format: plain or rdjson (default: plain)")
    parser.add_argument("-p", "--path", default=None,
                        help="Lint a single file instead of the whole corpus")
    parser.add_argument("-l", "--limit", default=None,
                        help="Only emit these codes, comma separated (e.g. GTN:007,GTN:033)")
    parser.add_argument("-a", "--auto-fix", action="store_true",
                        help="Apply single-line suggestions to the files")
    parser.add_argument("-s", "--short-path", action="store_true",
                        help="Report paths without the corpus root prefix")
    parser.add_argument("-r", "--root", default=".",
                        help="Root of the training-material checkout (default: current directory)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.format not in FORMATS:
        abort(f"Unknown format '{args.format}', expected one of: {', '.join(FORMATS)}")
    if not os.path.isdir(args.root):
        abort(f"Root directory not found: {args.root}")

    options = EmitOptions(
        fmt=args.format,
        limit=parse_limit(args.limit),
        auto_fix=args.auto_fix,
        short_path=args.short_path,
        root=args.root,
    )
    linter = Linter(ReferenceIndex(args.root), DiagnosticPipeline(options))

    if args.path:
        if not os.path.isfile(os.path.join(args.root, args.path)):
            abort(f"File not found: {args.path}")
        linter.fix_file(args.path)
    else:
        run_linter_global(linter)
    return 0


if __name__ == "__main__":
    sys.exit(main())
