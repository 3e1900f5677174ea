"""Note update commands built on the expansion engine"""

from dynamic_templates.obsidian.interfaces import IVaultStorage
from dynamic_templates.obsidian.registry import KnownPathsRegistry
from dynamic_templates.obsidian.template_system.base import (
    TEMPLATE_KEY,
    TERMINATOR,
    ExpansionResult,
    TemplateArguments,
)
from dynamic_templates.obsidian.template_system.engine import ExpansionEngine
from dynamic_templates.obsidian.template_system.parser import (
    has_references,
    split_lines,
)
from dynamic_templates.utils.mixins import LoggerMixin


def build_reference_block(template_path: str, generated: str | None) -> str:
    """Opening marker, generated text and terminator for a new section."""
    quoted = template_path.replace("\\", "\\\\").replace("'", "\\'")
    return f"%% {TEMPLATE_KEY}: '{quoted}' %%\n{generated or ''}\n{TERMINATOR}"


class TemplateUpdater(LoggerMixin):
    """Update commands: one note, every note, known notes, and insertion.

    Notes are processed one after another and each is written back in a
    single call once its new text is complete. The registry is saved at the
    end of every command.
    """

    def __init__(
        self,
        vault: IVaultStorage,
        engine: ExpansionEngine,
        registry: KnownPathsRegistry,
    ):
        self.vault = vault
        self.engine = engine
        self.registry = registry

    async def update_file(self, path: str) -> ExpansionResult | None:
        result = await self._update(path)
        await self.registry.save()
        return result

    async def update_all(self) -> list[ExpansionResult]:
        results = []
        for path in await self.vault.list_markdown_files():
            text = await self.vault.read(path)
            if not has_references(text):
                continue
            result = await self._update(path)
            if result is not None:
                results.append(result)

        await self.registry.save()
        self.logger.info("Updated all notes", notes=len(results))
        return results

    async def update_known(self) -> list[ExpansionResult]:
        results = []
        for path in self.registry.templated_file_paths:
            result = await self._update(path)
            if result is not None:
                results.append(result)

        await self.registry.save()
        self.logger.info("Updated known notes", notes=len(results))
        return results

    async def insert_reference(self, path: str, line: int, template_path: str) -> str:
        """Insert a section for ``template_path`` at ``line`` of a note.

        The section goes on ``line`` itself when it is blank and on the next
        line otherwise. Returns the inserted block.
        """
        engine = self.engine
        script = await engine.resolver.resolve(path, template_path)
        invocation = await engine.sandbox.invoke(
            script, path, TemplateArguments({TEMPLATE_KEY: template_path})
        )
        block = build_reference_block(template_path, engine.sandbox.render(invocation))

        lines = split_lines(await self.vault.read(path))
        line = max(0, min(line, len(lines) - 1))
        if lines[line].strip() == "":
            lines[line] = block
        else:
            lines.insert(line + 1, block)

        await self.vault.modify(path, "\n".join(lines))
        self.registry.add_templated_file_path(path)
        if script.found:
            self.registry.add_template_path(template_path)
        else:
            self.registry.remove_template_path(template_path)
        await self.registry.save()

        self.logger.info(
            "Template inserted", path=path, line=line, template=template_path
        )
        return block

    def suggest_templates(self, query: str = "") -> list[str]:
        return self.registry.suggest_templates(query)

    async def _update(self, path: str) -> ExpansionResult | None:
        if not await self.vault.exists(path):
            self.logger.info("Known note no longer exists", path=path)
            self.registry.remove_templated_file_path(path)
            return None

        text = await self.vault.read(path)
        result = await self.engine.expand(text, path)
        self.registry.record(result)

        if result.changed:
            await self.vault.modify(path, result.text)
            self.logger.info(
                "Note updated",
                path=path,
                references=result.references,
                errors=len(result.errors),
            )
        return result
