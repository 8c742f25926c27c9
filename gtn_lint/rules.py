"""Markdown rule set.

Every rule takes the file's lines and a LintContext and returns a list of
diagnostics. Rules are independent: they never see each other's output and
overlapping findings are all reported. Column arithmetic is part of the
output contract (reviewdog applies suggestions by range), so each rule keeps
its own ``match_start``/``match_end`` choice even where they look
inconsistent.

The docstrings double as the rule documentation linked from each
diagnostic's code URL.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterator

from gtn_lint import diagnostics
from gtn_lint.diagnostics import Diagnostic
from gtn_lint.indexes import BOX_CLASSES, KNOWN_TAGS, LintContext
from gtn_lint.parsers import extract_headings
from gtn_lint.util import acceptable_tool, unsafe_slugify

# ─── Patterns ───────────────────────────────────────────────────────────────

NOTOC_RE = re.compile(r"\{:\s*.no_toc\s*\}")
YOUTUBE_IFRAME_RE = re.compile(r"<iframe.*youtu.?be.*</iframe>")
GTN_TUTORIAL_URL_RE = re.compile(
    r"\(https?://(training.galaxyproject.org|galaxyproject.github.io)/training-material/([^)]*)\)")
GTN_SLIDES_URL_RE = re.compile(
    r"\((https?://(training.galaxyproject.org|galaxyproject.github.io)/training-material/(.*slides.html))\)")
DOI_LINK_RE = re.compile(r"(\[[^\]]*\]\(https?://doi.org/[^)]*\))")
PMID_LINK_RE = re.compile(r"(\[[^\]]*\]\(https?://www.ncbi.nlm.nih.gov/pubmed/[0-9]*\))")
BAD_LINK_TEXT_RE = re.compile(r"\[\s*(here|link)\s*\]", re.IGNORECASE)

# Liquid tags with one of their four delimiters missing.
MISSING_OPEN_BRACE_RE = re.compile(r"([^{]|^)(%\s*[^%]*%\})", re.IGNORECASE)
MISSING_OPEN_PERCENT_RE = re.compile(r"\{([^%]\s*[^%]* %\})", re.IGNORECASE)
MISSING_CLOSE_BRACE_RE = re.compile(r"(\{%\s*[^%]*%)([^}]|$)", re.IGNORECASE)
MISSING_CLOSE_PERCENT_RE = re.compile(r"(\{%\s*[^}]*[^%])\}", re.IGNORECASE)

CITE_RE = re.compile(r"\{%\s*cite\s+([^%]*)\s*%\}", re.IGNORECASE)
ICON_RE = re.compile(r"\{%\s*icon\s+([^%]*)\s*%\}", re.IGNORECASE)
SNIPPET_RE = re.compile(r"\{%\s*snippet\s+([^ ]*)", re.IGNORECASE)
LINK_RE = re.compile(r"\{%\s*link\s+([^%]*)\s*%\}", re.IGNORECASE)
EMPTY_LINK_RE = re.compile(r"\]\(\)")
TRS_SNIPPET_RE = re.compile(r'snippet faqs/galaxy/workflows_run_trs.md path="([^"]*)"', re.IGNORECASE)

BAD_TOOL_LINK = re.compile(r"\{% tool (\[[^\]]*\])\(\s*https?.*tool_id=([^)]*)\)\s*%\}", re.IGNORECASE)
BAD_TOOL_LINK2 = re.compile(r"\{% tool (\[[^\]]*\])\(\s*https://(toolshed.g2[^)]*)\)\s*%\}", re.IGNORECASE)
MAYBE_OK_TOOL_LINK = re.compile(r"\{% tool (\[[^\]]*\])\(([^)]*)\)\s*%\}", re.IGNORECASE)
TOOL_LINK_RE = re.compile(r"\{%\s*tool \[([^\]]*)\]\(([^)]*)\)\s*%\}")

BOX_ICON_TITLE_RE = re.compile(r"> (### \{%\s*icon ([^%]*)\s*%\}[^:]*:?(.*))")
AGENDA_TITLE_RE = re.compile(r"> (###\s+Agenda\s*)")
TARGET_BLANK_RE = re.compile(r"""target=("_blank"|'_blank')""")
EMPTY_ALT_RE = re.compile(r"!\[\]\(", re.IGNORECASE)
BOLD_LINE_RE = re.compile(r"^\*\*(.*)\*\*$")
TAG_RE = re.compile(r"\{%\s*(?P<tag>[a-z]+)")
BOX_TITLE_PREFIX_RE = re.compile(r"<(?P<tag>[a-z_-]+)-title>(?P<fw>[a-zA-Z_-]+:?\s*)")
BOLDED_HEADING_RE = re.compile(r"^#+ (?P<title>\*\*.*\*\*)$")
SNIPPET_LINE_RE = re.compile(r"^[> ]*\{% snippet")
ZENODO_API_RE = re.compile(r"https://zenodo.org/api/")
ZENODO_API_FILES_RE = re.compile(r"(zenodo\.org/api/files/)")
NONSEMANTIC_LIST_RE = re.compile(r">\s*(\*\*\s*[Ss]tep)")
CYOA_RE = re.compile(r"_includes/cyoa-choices[^%]*%\}", re.MULTILINE)
CYOA_OPTION_RE = re.compile(r'([\w-]+)="([^"]*)"')
USELESS_INTRO_RE = re.compile(r"\n---\n+# Introduction")

GTN_LINK_MESSAGE = ("Please use the link function to link to other pages within the GTN. "
                    "It helps us ensure that all links are correct")
BOX_TITLE_MESSAGE = "We have developed a new syntax for box titles, please consider using this instead."


def find_matching_texts(contents: list[str], query: re.Pattern) -> Iterator[tuple[int, str, re.Match]]:
    """(line index, line, match) for every match on every line."""
    for idx, text in enumerate(contents):
        for selected in query.finditer(text):
            yield idx, text, selected


# ─── Presentation ───────────────────────────────────────────────────────────

def fix_notoc(contents, ctx):
    """GTN:001 - Setting no_toc is discouraged as headers are useful for
    learners to link to and to jump to.

    Remediation: remove {: .no_toc}
    """
    seen = set()
    res = []
    for idx, text, _ in find_matching_texts(contents, NOTOC_RE):
        if idx in seen:
            continue
        seen.add(idx)
        res.append(diagnostics.delete_text(
            path=ctx.path, idx=idx, text=text,
            message="Setting no_toc is discouraged, these headings provide useful places for readers to jump to.",
            code="GTN:001", full_line=text, fn="fix_notoc"))
    return res


def youtube_bad(contents, ctx):
    """GTN:002 - YouTube iframes are discouraged, the video belongs in the
    tutorial "recordings" metadata or the youtube include.

        {% include _includes/youtube.html id="e0vj-0imOLw" title="..." %}
    """
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 1,
            replacement="",
            message=("Instead of embedding IFrames to YouTube contents, consider adding this video to the "
                     'GTN tutorial "recordings" metadata where it will be more visible for others.'),
            code="GTN:002", fn="youtube_bad")
        for idx, _, selected in find_matching_texts(contents, YOUTUBE_IFRAME_RE)
    ]


# ─── Links ──────────────────────────────────────────────────────────────────

def link_gtn_tutorial_external(contents, ctx):
    """GTN:003 - Links to training.galaxyproject.org are "external" and slow
    to validate; use {% link topics/.../tutorial.md %} instead.
    """
    # The whole URL (inside the explicit parentheses) is the replaced range.
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0) + 1, match_end=selected.end(0),
            replacement="{% link " + selected.group(2).replace(".html", ".md") + " %}",
            message=GTN_LINK_MESSAGE, code="GTN:003", fn="link_gtn_tutorial_external")
        for idx, _, selected in find_matching_texts(contents, GTN_TUTORIAL_URL_RE)
    ]


def link_gtn_slides_external(contents, ctx):
    """GTN:003 - As link_gtn_tutorial_external, for slide decks."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement="{% link " + selected.group(3) + " %}",
            message=GTN_LINK_MESSAGE, code="GTN:003", fn="link_gtn_slides_external")
        for idx, _, selected in find_matching_texts(contents, GTN_SLIDES_URL_RE)
    ]


def check_dois(contents, ctx):
    """GTN:004 - Cite DOIs through a tutorial.bib entry rather than linking
    them. Zenodo DOIs (datasets) are exempt.
    """
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 2,
            replacement="{% cite ... %}",
            message=("This looks like a DOI which could be better served by using the built-in Citations "
                     "mechanism. You can use https://doi2bib.org to convert your DOI into a .bib formatted "
                     "entry, and add to your tutorial.md"),
            code="GTN:004", fn="check_dois")
        for idx, _, selected in find_matching_texts(contents, DOI_LINK_RE)
        if "10.5281/zenodo" not in selected.group(0)
    ]


def check_pmids(contents, ctx):
    """GTN:004 - Companion of check_dois for PubMed links."""
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 2,
            replacement="{% cite ... %}",
            message=("This looks like a PMID which could be better served by using the built-in Citations "
                     "mechanism. You can use https://doi2bib.org to convert your PMID/PMCID into a .bib "
                     "formatted entry, and add to your tutorial.md"),
            code="GTN:004", fn="check_pmids")
        for idx, _, selected in find_matching_texts(contents, PMID_LINK_RE)
    ]


def check_bad_link_text(contents, ctx):
    """GTN:005 - Link texts like 'here' are unhelpful for screenreader users.

    Instead of ``see the documentation [here](https://example.com)`` write
    ``see [edgeR's documentation](https://example.com)``.
    """
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 1,
            replacement="[Something better here]",
            message=("Please do not use 'here' as your link title, it is "
                     "[bad for accessibility](https://usability.yale.edu/web-accessibility/articles/links#link-text). "
                     "Instead try restructuring your sentence to have useful descriptive text in the link."),
            code="GTN:005", fn="check_bad_link_text")
        for idx, _, selected in find_matching_texts(contents, BAD_LINK_TEXT_RE)
    ]


def incorrect_calls(contents, ctx):
    """GTN:006 - Mismatched Liquid delimiters: ``{{ }}`` and ``{% %}`` must pair."""
    res = []
    for idx, _, selected in find_matching_texts(contents, MISSING_OPEN_BRACE_RE):
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(2), match_end=selected.end(2) + 1,
            replacement="{" + selected.group(2),
            message="It looks like you might be missing the opening { of a jekyll function",
            code="GTN:006", fn="incorrect_calls"))
    for idx, _, selected in find_matching_texts(contents, MISSING_OPEN_PERCENT_RE):
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement="%" + selected.group(1),
            message="It looks like you might be missing the opening % of a jekyll function",
            code="GTN:006", fn="incorrect_calls"))
    for idx, _, selected in find_matching_texts(contents, MISSING_CLOSE_BRACE_RE):
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 2,
            replacement=selected.group(1) + "}" + selected.group(2),
            message="It looks like you might be missing the closing } of a jekyll function",
            code="GTN:006", fn="incorrect_calls"))
    for idx, _, selected in find_matching_texts(contents, MISSING_CLOSE_PERCENT_RE):
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement=selected.group(1) + "%",
            message="It looks like you might be missing the closing % of a jekyll function",
            code="GTN:006", fn="incorrect_calls"))
    return res


def check_bad_cite(contents, ctx):
    """GTN:007 - The citation key is not in any bibliography in the corpus."""
    res = []
    for idx, _, selected in find_matching_texts(contents, CITE_RE):
        citation_key = selected.group(1).strip()
        if citation_key not in ctx.index.bibliography:
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0),
                message=f"The citation ({citation_key}) could not be found.",
                code="GTN:007", fn="check_bad_cite"))
    return res


def check_bad_icon(contents, ctx):
    """GTN:033 - This icon is not known; new icons go in _config.yml under icon-tag."""
    res = []
    for idx, _, selected in find_matching_texts(contents, ICON_RE):
        words = selected.group(1).strip().split()
        icon_key = words[0] if words else ""
        if ctx.index.icons.get(icon_key) is None:
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0),
                message=f"The icon ({icon_key}) could not be found, please add it to _config.yml.",
                code="GTN:033", fn="check_bad_icon"))
    return res


def non_existent_snippet(contents, ctx):
    """GTN:008 - This snippet does not exist under snippets/ (or faqs/)."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0),
            message=f"This snippet (`{selected.group(1)}`) does not seem to exist",
            code="GTN:008", fn="non_existent_snippet")
        for idx, _, selected in find_matching_texts(contents, SNIPPET_RE)
        if not ctx.index.exists(selected.group(1))
    ]


def check_bad_link(contents, ctx):
    """GTN:018 - The linked file could not be found, or the link has no target."""
    res = []
    for idx, _, selected in find_matching_texts(contents, LINK_RE):
        path = selected.group(1).strip()
        if not ctx.index.exists(re.sub(r"^/", "", path)):
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0),
                message=f"The linked file (`{path}`) could not be found.",
                code="GTN:018", fn="check_bad_link"))
    for idx, _, selected in find_matching_texts(contents, EMPTY_LINK_RE):
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0),
            message="The link does not seem to have a target.",
            code="GTN:018", fn="check_bad_link"))
    return res


def check_bad_trs_link(contents, ctx):
    """GTN:036 - The TRS snippet points at a workflow file that does not exist."""
    res = []
    for idx, _, selected in find_matching_texts(contents, TRS_SNIPPET_RE):
        path = selected.group(1).strip()
        if not ctx.index.exists(path):
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0),
                message=f"The linked file (`{path}`) could not be found.",
                code="GTN:036", fn="check_bad_trs_link"))
    return res


def bad_zenodo_links(contents, ctx):
    """GTN:040 - zenodo.org/api links give users badly named datasets; use
    zenodo.org/records/<id>/files/<filename>.
    """
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 1,
            message=("Please do not use zenodo.org/api/ links, instead it should look like "
                     "zenodo.org/records/id/files/<filename>"),
            code="GTN:040", fn="bad_zenodo_links")
        for idx, text, selected in find_matching_texts(contents, ZENODO_API_RE)
        if "files-archive" not in text
    ]


def zenodo_api(contents, ctx):
    """GTN:032 - Older spelling of bad_zenodo_links, kept for its code."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            message="The Zenodo.org/api URLs are not stable, you must use a URL of the format zenodo.org/record/...",
            code="GTN:032", fn="zenodo_api")
        for idx, _, selected in find_matching_texts(contents, ZENODO_API_FILES_RE)
    ]


# ─── Tools ──────────────────────────────────────────────────────────────────

def bad_tool_links(contents, ctx):
    """GTN:009 - Invalid tool link. The only correct form is

        {% tool [JBrowse genome browser](toolshed.g2.bx.psu.edu/repos/iuc/jbrowse/jbrowse/1.16.4+galaxy3) %}

    Full server URLs and unknown short IDs are rejected.
    """
    res = []
    for pattern in (BAD_TOOL_LINK, BAD_TOOL_LINK2):
        for idx, _, selected in find_matching_texts(contents, pattern):
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0) + 1,
                replacement=f"{{% tool {selected.group(1)}({selected.group(2)}) %}}",
                message="You have used the full tool URL to a specific server, here we only need the tool ID portion.",
                code="GTN:009", fn="bad_tool_links"))
    for idx, _, selected in find_matching_texts(contents, MAYBE_OK_TOOL_LINK):
        if acceptable_tool(selected.group(2)):
            continue
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0) + 1,
            replacement=f"{{% tool {selected.group(1)}({selected.group(2)}) %}}",
            message=('You have used an invalid tool URL, it should be of the form '
                     '"toolshed.g2.bx.psu.edu/repos/{owner}/{repo}/{tool}/{version}" (or an internal tool ID) '
                     "so, please double check."),
            code="GTN:009", fn="bad_tool_links"))
    return res


def check_tool_link(contents, ctx):
    """GTN:009 - See bad_tool_links. Checks the shape of the tool ID itself."""
    res = []
    for idx, _, selected in find_matching_texts(contents, TOOL_LINK_RE):
        link = selected.group(2)
        span = dict(path=ctx.path, idx=idx, match_start=selected.start(2),
                    match_end=selected.end(2) + 1, code="GTN:009", fn="check_tool_link")
        if "/" in link:
            if link.count("/") < 5:
                res.append(diagnostics.error(
                    message="This tool identifier looks incorrect, it doesn't have the right number of segments.",
                    **span))
            if "testtoolshed" in link:
                res.append(diagnostics.warning(
                    message="The GTN strongly avoids using testtoolshed tools in your tutorials or workflows",
                    **span))
        else:
            if "+" in link:
                res.append(diagnostics.error(message="Broken tool link, unnecessary +", **span))
            if not acceptable_tool(link):
                res.append(diagnostics.error(
                    message=("Unknown short tool ID. Please use the full tool ID, or check the allowed "
                             "short IDs if you believe this is correct."),
                    **span))
    return res


# ─── Boxes and headings ─────────────────────────────────────────────────────

def new_more_accessible_boxes(contents, ctx):
    """GTN:010 - Box titles have an accessible syntax:

        > <hands-on-title>Some Title</hands-on-title>
        > ...
        {: .hands_on}
    """
    res = []
    for idx, _, selected in find_matching_texts(contents, BOX_ICON_TITLE_RE):
        key = selected.group(2).strip().replace("_", "-")
        res.append(diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement=f"<{key}-title>{selected.group(3).strip()}</{key}-title>",
            message=BOX_TITLE_MESSAGE, code="GTN:010", fn="new_more_accessible_boxes"))
    return res


def new_more_accessible_boxes_agenda(contents, ctx):
    """GTN:010 - See new_more_accessible_boxes."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement="<agenda-title></agenda-title>",
            message=BOX_TITLE_MESSAGE, code="GTN:010", fn="new_more_accessible_boxes_agenda")
        for idx, _, selected in find_matching_texts(contents, AGENDA_TITLE_RE)
    ]


def no_target_blank(contents, ctx):
    """GTN:011 - Do not use target="_blank", it is bad for accessibility."""
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0),
            message=('Please do not use `target="_blank"`, [it is bad for accessibility.]'
                     "(https://www.a11yproject.com/checklist/#identify-links-that-open-in-a-new-tab-or-window)"),
            code="GTN:011", fn="no_target_blank")
        for idx, _, selected in find_matching_texts(contents, TARGET_BLANK_RE)
    ]


def empty_alt_text(contents, ctx):
    """GTN:034 - Alt text is mandatory for every image."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(0), match_end=selected.end(0),
            message="The alt text for this image seems to be empty",
            code="GTN:034", fn="empty_alt_text")
        for idx, _, selected in find_matching_texts(contents, EMPTY_ALT_RE)
    ]


def check_looks_like_heading(contents, ctx):
    """GTN:020 - Please do not bold random lines, use a heading properly.

    FAQs are exempt: they have no way to give a sub-section its own hierarchy.
    """
    if "faq" in ctx.path:
        return []
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement=f"### {selected.group(1)}",
            message=("This looks like a heading, but isn't. Please use proper semantic headings where possible. "
                     "You should check the heading level of this suggestion, rather than accepting the change "
                     "as-is."),
            code="GTN:020", fn="check_looks_like_heading")
        for idx, _, selected in find_matching_texts(contents, BOLD_LINE_RE)
    ]


def check_bad_tag(contents, ctx):
    """GTN:021 - Only a small set of Liquid tags is used in tutorials; anything
    else is probably a typo.
    """
    return [
        diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            message=f"We're not sure this tag is correct ({selected.group('tag')}), it isn't one of the known tags.",
            code="GTN:021", fn="check_bad_tag")
        for idx, _, selected in find_matching_texts(contents, TAG_RE)
        if selected.group("tag") not in KNOWN_TAGS
    ]


def check_useless_box_prefix(contents, ctx):
    """GTN:022 - Do not prefix box titles with the box name.

    ``> <question-title>Question: Some question!</question-title>`` becomes
    ``> <question-title>Some question!</question-title>``; the prefix is added
    automatically.
    """
    res = []
    for idx, _, selected in find_matching_texts(contents, BOX_TITLE_PREFIX_RE):
        tag = selected.group("tag")
        first_word = re.sub(r":\s*$", "", selected.group("fw")).lower()
        if tag not in BOX_CLASSES or tag != first_word:
            continue
        res.append(diagnostics.warning(
            path=ctx.path, idx=idx,
            match_start=selected.start(2), match_end=selected.end(2) + 1,
            replacement="",
            message=(f"It is no longer necessary to prefix your {tag} box titles with "
                     f"{tag.capitalize()}, this is done automatically."),
            code="GTN:022", fn="check_useless_box_prefix"))
    return res


def check_bad_heading_order(contents, ctx):
    """GTN:028 - Headings are out of order: a level was skipped."""
    headers = extract_headings(contents)
    bad_depth = [k2 for k1, k2 in zip(headers, headers[1:]) if k2.level - k1.level > 1]
    if not bad_depth:
        return []
    all_headings = "\n".join("#" * h.level + " " + h.raw_text for h in headers)
    return [
        diagnostics.error(
            path=ctx.path, idx=h.line - 1,
            match_start=0, match_end=len(h.raw_text) + h.level + 1,
            replacement="#" * (h.level - 1),
            message=("You have skipped a heading level, please correct this.\n<details>"
                     f"<summary>Listing of Heading Levels</summary>\n\n```\n{all_headings}\n```\n</details>"),
            code="GTN:028", fn="check_bad_heading_order")
        for h in bad_depth
    ]


def check_bolded_heading(contents, ctx):
    """GTN:029 - Please do not bold headings, screen readers will shout them."""
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            replacement=selected.group("title")[2:-2],
            message=("Please do not bold headings, it is unncessary "
                     "and will potentially cause screen readers to shout them."),
            code="GTN:029", fn="check_bolded_heading")
        for idx, _, selected in find_matching_texts(contents, BOLDED_HEADING_RE)
    ]


def snippets_too_close_together(contents, ctx):
    """GTN:032 - Snippets on consecutive lines break rendering; separate them
    with one line.
    """
    prev_line = -2
    res = []
    for idx, _, selected in find_matching_texts(contents, SNIPPET_LINE_RE):
        if idx == prev_line + 1:
            res.append(diagnostics.error(
                path=ctx.path, idx=idx,
                match_start=selected.start(0), match_end=selected.end(0) + 1,
                message="Snippets too close together",
                code="GTN:032", fn="snippets_too_close_together"))
        prev_line = idx
    return res


def nonsemantic_list(contents, ctx):
    """GTN:035 - ``**Step 1.** ...`` lines are a non-semantic list; use a
    numbered Markdown list instead.
    """
    return [
        diagnostics.error(
            path=ctx.path, idx=idx,
            match_start=selected.start(1), match_end=selected.end(1) + 1,
            message=("This is a non-semantic list which is bad for accessibility and bad for screenreaders. "
                     "It results in poorly structured HTML and as a result is not allowed."),
            code="GTN:035", fn="nonsemantic_list")
        for idx, _, selected in find_matching_texts(contents, NONSEMANTIC_LIST_RE)
    ]


def useless_intro(contents, ctx):
    """GTN:046 - Do not open with an # Introduction section; the first
    paragraph is used as the abstract.
    """
    joined = "\n".join(contents)
    return [
        diagnostics.error(
            path=ctx.path, idx=0, match_start=0, match_end=0, replacement="",
            message=("Please do not include an # Introduction section, it is unnecessary here, just start "
                     "directly into your text. The first paragraph that is seen by our infrastructure will "
                     "automatically be shown in a few places as an abstract."),
            code="GTN:046", fn="useless_intro")
        for _ in USELESS_INTRO_RE.finditer(joined)
    ]


# ─── Choose Your Own Adventure ──────────────────────────────────────────────

def parse_cyoa_branches(joined: str) -> list[dict[str, str]]:
    """key → value for every cyoa-choices include in the document."""
    branches = []
    for block in CYOA_RE.findall(joined):
        block = re.sub(r"\s+", " ", block)
        branches.append(dict(CYOA_OPTION_RE.findall(block)))
    return branches


def _options(branch: dict[str, str]) -> list[str]:
    return [v for k, v in branch.items() if "option" in k]


def cyoa_branches(contents, ctx):
    """GTN:041, GTN:042, GTN:043, GTN:044, GTN:045 - Choose Your Own Adventure
    problems: duplicate options, missing or mismatched defaults, and options
    with no matching branch in the document.
    """
    joined = "\n".join(contents)
    branches = parse_cyoa_branches(joined)
    file_level = dict(path=ctx.path, idx=0, match_start=0, match_end=1, fn="cyoa_branches")
    errors = []

    # Options are unique across the whole file once slugified.
    grouped = defaultdict(list)
    for branch in branches:
        for option in _options(branch):
            grouped[unsafe_slugify(option)].append(option)
    dupes = {slug: opts for slug, opts in grouped.items() if len(opts) > 1}
    if dupes:
        msg = "We identified the following duplicate options in your CYOA: "
        msg += "; ".join(f"Options {', '.join(opts)} became the key: {slug}" for slug, opts in dupes.items())
        errors.append(diagnostics.error(
            message=("You have non-unique options in your Choose Your Own Adventure. Please ensure that each "
                     "option is unique in its text. Unfortunately we do not currently support re-using the same "
                     "option text across differently disambiguated CYOA branches, so, please inform us if this "
                     "is a requirement for you.") + msg,
            code="GTN:041", **file_level))

    for branch in branches:
        if "default" not in branch:
            errors.append(diagnostics.error(
                message="We recommend specifying a default for every branch",
                code="GTN:042", **file_level))
            continue

        options = _options(branch)
        default = branch["default"]
        if default in options:
            continue
        if any(unsafe_slugify(o) == unsafe_slugify(default) for o in options):
            errors.append(diagnostics.warning(
                message=(f"We did not see a corresponding option# for the default: «{default}», but this could "
                         "have been written before we automatically slugified the options. If you like, please "
                         "consider making your default option match the option text exactly."),
                code="GTN:043", **file_level))
        else:
            errors.append(diagnostics.warning(
                message=(f"We did not see a corresponding option# for the default: «{default}», please ensure "
                         "the text matches one of the branches."),
                code="GTN:044", **file_level))

    for branch in branches:
        for option in _options(branch):
            slug_option = unsafe_slugify(option)
            if slug_option not in joined:
                errors.append(diagnostics.warning(
                    message=(f"We did not see a branch for {option} ({slug_option}) in the file. Please consider "
                             "ensuring that all options are used."),
                    code="GTN:045", **file_level))
    return errors


# ─── Registry ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rule:
    name: str
    codes: tuple[str, ...]
    check: Callable[[list[str], LintContext], list[Diagnostic]]


MARKDOWN_RULES: tuple[Rule, ...] = (
    Rule("fix_notoc", ("GTN:001",), fix_notoc),
    Rule("youtube_bad", ("GTN:002",), youtube_bad),
    Rule("link_gtn_slides_external", ("GTN:003",), link_gtn_slides_external),
    Rule("link_gtn_tutorial_external", ("GTN:003",), link_gtn_tutorial_external),
    Rule("check_dois", ("GTN:004",), check_dois),
    Rule("check_pmids", ("GTN:004",), check_pmids),
    Rule("check_bad_link_text", ("GTN:005",), check_bad_link_text),
    Rule("incorrect_calls", ("GTN:006",), incorrect_calls),
    Rule("check_bad_cite", ("GTN:007",), check_bad_cite),
    Rule("non_existent_snippet", ("GTN:008",), non_existent_snippet),
    Rule("bad_tool_links", ("GTN:009",), bad_tool_links),
    Rule("check_tool_link", ("GTN:009",), check_tool_link),
    Rule("new_more_accessible_boxes", ("GTN:010",), new_more_accessible_boxes),
    Rule("new_more_accessible_boxes_agenda", ("GTN:010",), new_more_accessible_boxes_agenda),
    Rule("no_target_blank", ("GTN:011",), no_target_blank),
    Rule("check_bad_link", ("GTN:018",), check_bad_link),
    Rule("check_bad_icon", ("GTN:033",), check_bad_icon),
    Rule("check_looks_like_heading", ("GTN:020",), check_looks_like_heading),
    Rule("check_bad_tag", ("GTN:021",), check_bad_tag),
    Rule("check_useless_box_prefix", ("GTN:022",), check_useless_box_prefix),
    Rule("check_bad_heading_order", ("GTN:028",), check_bad_heading_order),
    Rule("check_bolded_heading", ("GTN:029",), check_bolded_heading),
    Rule("snippets_too_close_together", ("GTN:032",), snippets_too_close_together),
    Rule("bad_zenodo_links", ("GTN:040",), bad_zenodo_links),
    Rule("zenodo_api", ("GTN:032",), zenodo_api),
    Rule("empty_alt_text", ("GTN:034",), empty_alt_text),
    Rule("check_bad_trs_link", ("GTN:036",), check_bad_trs_link),
    Rule("nonsemantic_list", ("GTN:035",), nonsemantic_list),
    Rule("cyoa_branches", ("GTN:041", "GTN:042", "GTN:043", "GTN:044", "GTN:045"), cyoa_branches),
    Rule("useless_intro", ("GTN:046",), useless_intro),
)


def fix_md(contents: list[str], ctx: LintContext) -> list[Diagnostic]:
    """Run every Markdown rule, in registry order."""
    results = []
    for rule in MARKDOWN_RULES:
        results.extend(rule.check(contents, ctx))
    return results
