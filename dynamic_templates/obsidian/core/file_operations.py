"""Core file operations for the Obsidian vault."""

import glob
from pathlib import Path, PurePosixPath
from typing import Any

import aiofiles
import structlog

from dynamic_templates.obsidian.template_system.errors import VaultPathError

logger = structlog.get_logger(__name__)

DEFAULT_EXCLUDE_FOLDERS = [".obsidian", ".trash"]


class VaultFileOperations:
    """Reads, writes and resolves files inside one vault.

    Notes are addressed by vault-relative POSIX paths (``Daily/2024-01-01.md``),
    the same identifiers the known paths registry stores.
    """

    def __init__(self, vault_path: Path, exclude_folders: list[str] | None = None):
        self.vault_path = Path(vault_path)
        self.exclude_folders = (
            DEFAULT_EXCLUDE_FOLDERS if exclude_folders is None else exclude_folders
        )
        self.operation_history: list[dict[str, Any]] = []

    def absolute_path(self, path: str) -> Path:
        """Map a vault-relative path to the filesystem, refusing escapes."""
        candidate = (self.vault_path / path.lstrip("/")).resolve()
        try:
            candidate.relative_to(self.vault_path.resolve())
        except ValueError as e:
            raise VaultPathError(f"Path '{path}' is outside the vault") from e
        return candidate

    def relative_path(self, path: Path) -> str:
        """Vault-relative POSIX identifier of a file inside the vault."""
        try:
            relative = Path(path).resolve().relative_to(self.vault_path.resolve())
        except ValueError as e:
            raise VaultPathError(f"Path '{path}' is outside the vault") from e
        return relative.as_posix()

    async def read(self, path: str) -> str:
        """Read a note's full text."""
        file_path = self.absolute_path(path)
        async with aiofiles.open(file_path, encoding="utf-8", newline="") as f:
            return await f.read()

    async def modify(self, path: str, content: str) -> None:
        """Replace a note's full text."""
        file_path = self.absolute_path(path)
        try:
            async with aiofiles.open(
                file_path, "w", encoding="utf-8", newline=""
            ) as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write note", error=str(e), path=path)
            raise

        self._log_operation("modify", path, len(content))
        logger.debug("Note written", path=path, size=len(content))

    async def exists(self, path: str) -> bool:
        try:
            return self.absolute_path(path).is_file()
        except VaultPathError:
            return False

    async def list_markdown_files(self) -> list[str]:
        """Every Markdown note in the vault, excluded folders skipped."""
        return self.markdown_files()

    def markdown_files(self) -> list[str]:
        markdown_files = []
        for path in self.vault_path.rglob("*.md"):
            relative = path.relative_to(self.vault_path)
            if self._is_excluded(relative):
                continue
            markdown_files.append(relative.as_posix())
        return sorted(markdown_files)

    def _is_excluded(self, relative: Path) -> bool:
        return any(part in self.exclude_folders for part in relative.parts[:-1])

    def resolve_link(self, link: str, source_path: str) -> Path | None:
        """Find the file a link in ``source_path`` points at.

        Lookup order: relative to the source note's folder, relative to the
        vault root, then any file in the vault whose path ends with the link
        (the shortest such path wins).
        """
        link = link.strip()
        if not link:
            return None

        source_folder = PurePosixPath(source_path).parent
        candidates: list[str] = []
        if link.startswith("/"):
            candidates.append(link.lstrip("/"))
        else:
            candidates.append(str(source_folder / link))
            if not link.startswith(("./", "../")):
                candidates.append(link)

        for candidate in candidates:
            try:
                file_path = self.absolute_path(candidate)
            except VaultPathError:
                continue
            if file_path.is_file():
                return file_path

        if link.startswith(("/", "./", "../")):
            return None
        return self._find_by_suffix(link)

    def _find_by_suffix(self, link: str) -> Path | None:
        link_parts = PurePosixPath(link).parts
        name = link_parts[-1]
        matches = []
        for path in self.vault_path.rglob(glob.escape(name)):
            relative = path.relative_to(self.vault_path)
            if not path.is_file() or self._is_excluded(relative):
                continue
            if relative.parts[-len(link_parts) :] == link_parts:
                matches.append(relative)
        if not matches:
            return None
        best = min(matches, key=lambda p: (len(p.parts), p.as_posix()))
        return self.vault_path / best

    def read_resource(self, path: Path) -> str:
        """Synchronously read a file for ``require`` and the note index."""
        return Path(path).read_text(encoding="utf-8")

    async def load_resource(self, path: Path) -> str:
        """Read a resolved script file."""
        async with aiofiles.open(path, encoding="utf-8") as f:
            return await f.read()

    def _log_operation(self, operation: str, path: str, size: int) -> None:
        self.operation_history.append(
            {"operation": operation, "path": path, "size": size}
        )
