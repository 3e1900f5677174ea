"""
Known paths registry: which notes contain templates and which scripts work
"""

import json
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import BaseModel, ConfigDict, Field

from dynamic_templates.obsidian.interfaces import IKnownPathsStore
from dynamic_templates.obsidian.template_system.base import ExpansionResult
from dynamic_templates.utils.error_handler import handle_errors, safe_with_default
from dynamic_templates.utils.mixins import LoggerMixin


class KnownPaths(BaseModel):
    """Registry contents, stored with the plugin's camelCase keys"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    known_templated_file_paths: list[str] = Field(
        default_factory=list, alias="knownTemplatedFilePaths"
    )
    known_template_paths: list[str] = Field(
        default_factory=list, alias="knownTemplatePaths"
    )


class JsonKnownPathsStore(LoggerMixin):
    """Persists the registry as a JSON file."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    @safe_with_default("load known paths", default_value={})
    async def load(self) -> dict[str, Any]:
        if not self.file_path.exists():
            return {}
        async with aiofiles.open(self.file_path, encoding="utf-8") as f:
            data = json.loads(await f.read())
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.file_path}")
        return data

    @handle_errors("save known paths", reraise=True)
    async def save(self, data: dict[str, Any]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.file_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False))
        self.logger.debug("Known paths saved", file_path=str(self.file_path))


class KnownPathsRegistry(LoggerMixin):
    """Two ordered path sets; every mutation is an idempotent set operation."""

    def __init__(
        self, store: IKnownPathsStore | None = None, paths: KnownPaths | None = None
    ):
        self.store = store
        self.paths = paths or KnownPaths()

    @property
    def templated_file_paths(self) -> list[str]:
        return list(self.paths.known_templated_file_paths)

    @property
    def template_paths(self) -> list[str]:
        return list(self.paths.known_template_paths)

    async def load(self) -> None:
        if self.store is None:
            return
        data = await self.store.load()
        try:
            self.paths = KnownPaths.model_validate(data)
        except ValueError as e:
            self.logger.warning("Known paths file is malformed", error=str(e))
            self.paths = KnownPaths()

    async def save(self) -> None:
        if self.store is None:
            return
        await self.store.save(self.paths.model_dump(by_alias=True))

    def add_templated_file_path(self, path: str) -> None:
        _add(self.paths.known_templated_file_paths, path)

    def remove_templated_file_path(self, path: str) -> None:
        _remove(self.paths.known_templated_file_paths, path)

    def add_template_path(self, path: str) -> None:
        _add(self.paths.known_template_paths, path)

    def remove_template_path(self, path: str) -> None:
        _remove(self.paths.known_template_paths, path)

    def record(self, result: ExpansionResult) -> None:
        """Apply the bookkeeping reported by one note expansion."""
        if result.had_references:
            self.add_templated_file_path(result.source_path)
        else:
            self.remove_templated_file_path(result.source_path)
        for path in result.used_script_paths:
            self.add_template_path(path)
        for path in result.removed_script_paths:
            self.remove_template_path(path)

    def suggest_templates(self, query: str = "") -> list[str]:
        """Known template paths containing ``query``, case-insensitively."""
        needle = query.lower()
        return [path for path in self.paths.known_template_paths if needle in path.lower()]


def _add(paths: list[str], path: str) -> None:
    if path not in paths:
        paths.append(path)


def _remove(paths: list[str], path: str) -> None:
    while path in paths:
        paths.remove(path)
