"""Reference parser for dynamic template directives.

A note marks a generated section with an opening line naming the script and
its arguments, and a closing line::

    %%{ template: 'greet.py', name: 'Nate' }%%
    My name is Nate.
    %%%%

Fenced code blocks hide directives. Fences nest by using more backticks:
```` opens a block of depth 1 that may contain ``` (depth 0) lines.
"""

import re

from dynamic_templates.obsidian.template_system.arguments import evaluate_arguments
from dynamic_templates.obsidian.template_system.base import (
    TemplateReference,
    template_path,
)
from dynamic_templates.utils.mixins import LoggerMixin

LINE_SPLIT_RE = re.compile(r"\r?\n")
FENCE_RE = re.compile(r"^```(`*)[^`]*$")
REFERENCE_START_RE = re.compile(r"^%%(?!%%\s*$)\s*(?P<args>[^%\s].*?)\s*%%\s*$")
REFERENCE_END_RE = re.compile(r"^%%%%\s*$")
REFERENCE_ANYWHERE_RE = re.compile(r"^%%(?!%%\s*$)\s*[^%\s].*?\s*%%\s*$", re.MULTILINE)


def split_lines(text: str) -> list[str]:
    """Split note text on LF or CRLF line breaks"""
    return LINE_SPLIT_RE.split(text)


def has_references(text: str) -> bool:
    """Cheap check whether the text may contain a directive"""
    return REFERENCE_ANYWHERE_RE.search(text) is not None


class ReferenceParser(LoggerMixin):
    """Extracts template references from a note's text"""

    def parse(self, text: str, source_path: str) -> list[TemplateReference]:
        return self.parse_lines(split_lines(text), source_path)

    def parse_lines(
        self, lines: list[str], source_path: str
    ) -> list[TemplateReference]:
        references: list[TemplateReference] = []
        current: TemplateReference | None = None

        # Open fence depths, innermost last
        fence_stack: list[int] = []

        for index, line in enumerate(lines):
            fence_match = FENCE_RE.match(line)
            if fence_match:
                depth = len(fence_match.group(1))
                if depth in fence_stack:
                    # Closing a fence also closes every fence opened inside it
                    del fence_stack[fence_stack.index(depth) :]
                else:
                    fence_stack.append(depth)
                continue

            if fence_stack:
                continue

            start_match = REFERENCE_START_RE.match(line)
            if start_match:
                arguments = evaluate_arguments(start_match.group("args"))
                script_path = template_path(arguments)
                if script_path:
                    current = TemplateReference(
                        source_path=source_path,
                        script_path=script_path,
                        line_start=index,
                        arguments=arguments,
                    )
                    references.append(current)
                    continue
                self.logger.debug(
                    "Marker without template key ignored",
                    source_path=source_path,
                    line=index,
                )

            if current is not None and REFERENCE_END_RE.match(line):
                current.line_end = index
                current = None

        if fence_stack:
            self.logger.debug(
                "Unclosed code fence at end of note",
                source_path=source_path,
                depths=fence_stack,
            )

        return references
