"""Galaxy workflow (.ga) rules.

GTN:015, GTN:016, GTN:024, GTN:025, GTN:026 - Workflow metadata is missing or incomplete.
GTN:017 - A step uses an invalid tool ID or a testtoolshed tool.
GTN:027, GTN:030, GTN:032 - The workflow tests are missing, misnamed or test nothing.
"""

from __future__ import annotations

import os
import re

import jsonschema
import yaml

from gtn_lint import diagnostics
from gtn_lint.diagnostics import Diagnostic
from gtn_lint.indexes import LintContext
from gtn_lint.parsers import find_workflow_tests, load_workflow_test, tool_id_extractor
from gtn_lint.util import acceptable_tool, warn

TESTING_FAQ = ("https://training.galaxyproject.org/training-material/faqs/"
               "gtn/gtn_workflow_testing.html")

# (field, code, schema of the field, message). The message may use {topic}.
REQUIRED_FIELDS = (
    ("tags", "GTN:015", {"type": "array", "minItems": 1},
     'This workflow is missing required tags. Please add `"tags": ["{topic}"]`'),
    ("annotation", "GTN:016", {},
     'This workflow is missing an annotation. Please add `"annotation": "title of tutorial"`'),
    ("license", "GTN:026", {},
     "This workflow is missing a license. Please select a valid OSI license. "
     "You can correct this in the Galaxy workflow editor."),
)

TOPIC_PLACEHOLDER = "topic-name"


def field_schema(name: str, schema: dict) -> dict:
    return {
        "type": "object",
        "required": [name],
        "properties": {name: schema},
    }


def workflow_topic(path: str) -> str:
    """Path segment after ``topics``, the tag every tutorial workflow carries."""
    parts = path.split("/")
    if "topics" in parts:
        idx = parts.index("topics")
        if idx + 1 < len(parts):
            return parts[idx + 1]
    return TOPIC_PLACEHOLDER


def fix_ga_wf(workflow, ctx: LintContext) -> list[Diagnostic]:
    """Content checks on a decoded workflow."""
    results = []
    for name, code, schema, message in REQUIRED_FIELDS:
        try:
            jsonschema.validate(workflow, field_schema(name, schema))
        except jsonschema.ValidationError:
            results.append(diagnostics.file_error(
                path=ctx.path, message=message.replace("{topic}", workflow_topic(ctx.path)), code=code))

    if not isinstance(workflow, dict):
        return results

    # Reported at the first character, like the other whole-file findings.
    for step_id, tool_id in tool_id_extractor(workflow):
        if acceptable_tool(tool_id):
            continue
        results.append(diagnostics.error(
            path=ctx.path, idx=0, match_start=0, match_end=0,
            message=(f"A step in your workflow ({step_id}) uses an invalid tool ID ({tool_id}) or a tool ID "
                     "from the testtoolshed. These are not permitted in GTN tutorials. If this is in error, "
                     "you can add it to the list of allowed short tool IDs."),
            code="GTN:017"))

    if "creator" in workflow:
        creators = workflow["creator"]
        if isinstance(creators, dict):
            creators = [creators]
        for person in creators or []:
            if not isinstance(person, dict) or person.get("class") != "Person":
                continue
            if not person.get("identifier"):
                results.append(diagnostics.file_error(
                    path=ctx.path,
                    message=("This workflow has a creator but is missing an identifier for them. "
                             "Please ensure all creators have valid ORCIDs."),
                    code="GTN:025"))
            if not person.get("name"):
                results.append(diagnostics.file_error(
                    path=ctx.path, message="This workflow has a creator but is a name, please add it.",
                    code="GTN:025"))
    else:
        results.append(diagnostics.file_error(
            path=ctx.path,
            message=("This workflow is missing a Creator. Please edit this workflow in "
                     "Galaxy to add the correct creator entities"),
            code="GTN:024"))
    return results


def check_workflow_tests(text: str, ctx: LintContext) -> list[Diagnostic]:
    """Checks on the ``<workflow>-tests.yml`` files beside a workflow."""
    results = []
    test_files = find_workflow_tests(ctx.index.resolve(ctx.path))

    if not test_files:
        # Interactive tools cannot be run by the test harness.
        if "interactive_tool_" not in text:
            results.append(diagnostics.file_error(
                path=ctx.path,
                message=("This workflow is missing a test, which is now mandatory. Please see "
                         f"[the FAQ on how to add tests to your workflows]({TESTING_FAQ})."),
                code="GTN:027"))
        return results

    for test_file in test_files:
        if "-tests.yml" not in os.path.basename(test_file):
            results.append(diagnostics.file_error(
                path=ctx.path, message="Please use the extension -tests.yml for this test file.",
                code="GTN:032"))

        try:
            jobs, test_plain = load_workflow_test(test_file)
        except (OSError, yaml.YAMLError) as e:
            warn(f"Could not read workflow test {test_file}: {e}")
            continue

        if not isinstance(jobs, list) or re.search(r"GTN_RUN_SKIP_REASON", test_plain):
            continue
        for job in jobs:
            outputs = job.get("outputs") if isinstance(job, dict) else None
            if not outputs:
                results.append(diagnostics.file_error(
                    path=ctx.path,
                    message=("This workflow test does not test the contents of outputs, which is now "
                             "mandatory. Please see [the FAQ on how to add tests to your workflows]"
                             f"({TESTING_FAQ})."),
                    code="GTN:030"))
    return results
