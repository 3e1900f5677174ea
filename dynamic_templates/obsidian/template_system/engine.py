"""Expansion engine regenerating every template section of a note"""

from typing import Literal

from dynamic_templates.obsidian.template_system.base import (
    TERMINATOR,
    ExpansionResult,
    ITemplateSandbox,
    TemplateReference,
)
from dynamic_templates.obsidian.template_system.parser import (
    ReferenceParser,
    split_lines,
)
from dynamic_templates.obsidian.template_system.resolver import TemplateResolver
from dynamic_templates.utils.mixins import LoggerMixin

MissingTemplatePolicy = Literal["error", "empty"]


class ExpansionEngine(LoggerMixin):
    """Parses a note, runs each referenced script and splices in the output.

    The note is walked once, front to back, against the line sequence it was
    parsed from. At a reference's opening line the fresh output and a
    terminator are emitted and the old body plus old terminator are skipped,
    so expanding an expanded note regenerates sections instead of stacking
    them. An unterminated reference gets a terminator of its own and nothing
    after it is consumed.
    """

    def __init__(
        self,
        resolver: TemplateResolver,
        sandbox: ITemplateSandbox,
        parser: ReferenceParser | None = None,
        missing_template_policy: MissingTemplatePolicy = "error",
    ):
        self.resolver = resolver
        self.sandbox = sandbox
        self.parser = parser or ReferenceParser()
        self.missing_template_policy = missing_template_policy

    async def expand(self, document_text: str, source_path: str) -> ExpansionResult:
        log = self.bind_logger(source_path=source_path)

        lines = split_lines(document_text)
        references = self.parser.parse_lines(lines, source_path)
        if not references:
            return ExpansionResult(
                source_path=source_path, text=document_text, had_references=False
            )

        by_start = {reference.line_start: reference for reference in references}
        result = ExpansionResult(
            source_path=source_path,
            text=document_text,
            had_references=True,
            references=len(references),
        )

        output: list[str] = []
        index = 0
        while index < len(lines):
            output.append(lines[index])
            reference = by_start.get(index)
            if reference is not None:
                output.extend(await self._generate(reference, result))
                if reference.line_end is not None:
                    index = reference.line_end
            index += 1

        result.text = "\n".join(output)
        result.changed = result.text != document_text
        log.info(
            "Templates expanded",
            references=result.references,
            used=len(result.used_script_paths),
            removed=len(result.removed_script_paths),
            errors=len(result.errors),
            changed=result.changed,
        )
        return result

    async def _generate(
        self, reference: TemplateReference, result: ExpansionResult
    ) -> list[str]:
        """Lines replacing one reference's old body and terminator."""
        script = await self.resolver.resolve(
            reference.source_path, reference.script_path
        )

        if not script.found:
            _add_once(result.removed_script_paths, reference.script_path)
            if self.missing_template_policy == "empty":
                return [TERMINATOR]

        invocation = await self.sandbox.invoke(
            script, reference.source_path, reference.arguments
        )
        if not invocation.ok:
            result.errors.append(invocation)

        generated = self.sandbox.render(invocation)
        if not generated:
            return []

        if script.found:
            _add_once(result.used_script_paths, reference.script_path)
        return [*split_lines(generated), TERMINATOR]


def _add_once(paths: list[str], path: str) -> None:
    if path not in paths:
        paths.append(path)
