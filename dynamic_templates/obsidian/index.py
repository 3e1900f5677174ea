"""
Note index handed to template scripts as ``dv``
"""

import re
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from pydantic import BaseModel, Field

from dynamic_templates.obsidian.core.file_operations import VaultFileOperations
from dynamic_templates.utils.mixins import LoggerMixin

INLINE_TAG_RE = re.compile(r"(?<![\w#/])#([\w/-]*[A-Za-z_/-][\w/-]*)")


class PageInfo(BaseModel):
    """A note as seen by template scripts"""

    path: str
    name: str
    folder: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    content: str = ""

    def __getitem__(self, key: str) -> Any:
        """Frontmatter lookup, ``page['status']``"""
        return self.frontmatter[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.frontmatter.get(key, default)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Separate a leading YAML block from the note body."""
    if not text.startswith("---"):
        return {}, text

    frontmatter_end = text.find("\n---", 3)
    if frontmatter_end < 0:
        return {}, text

    body_start = text.find("\n", frontmatter_end + 4)
    body = "" if body_start < 0 else text[body_start + 1 :]
    try:
        metadata = yaml.safe_load(text[3:frontmatter_end])
    except yaml.YAMLError:
        return {}, body
    return (metadata if isinstance(metadata, dict) else {}), body


def collect_tags(frontmatter: dict[str, Any], body: str) -> list[str]:
    raw = frontmatter.get("tags") or []
    if isinstance(raw, str):
        raw = [part for part in re.split(r"[,\s]+", raw) if part]
    tags = [str(tag).lstrip("#") for tag in raw]
    for tag in INLINE_TAG_RE.findall(body):
        if tag not in tags:
            tags.append(tag)
    return tags


class VaultIndex(LoggerMixin):
    """Read-only view of the vault's notes for scripts."""

    def __init__(self, vault: VaultFileOperations):
        self.vault = vault

    def page(self, path: str) -> PageInfo | None:
        """Look up a note by path or link, with or without ``.md``."""
        file_path = self._locate(path)
        if file_path is None:
            return None
        return self._load(file_path)

    def pages(self, folder: str | None = None) -> list[PageInfo]:
        """Every note, optionally restricted to a folder and its subfolders."""
        prefix = folder.strip("/") + "/" if folder else ""
        result = []
        for relative in self.vault.markdown_files():
            if prefix and not relative.startswith(prefix):
                continue
            page = self._load(self.vault.vault_path / relative)
            if page is not None:
                result.append(page)
        return result

    def _locate(self, path: str) -> Path | None:
        file_path = self.vault.resolve_link(path, "")
        if file_path is None and not path.endswith(".md"):
            file_path = self.vault.resolve_link(f"{path}.md", "")
        return file_path

    def _load(self, file_path: Path) -> PageInfo | None:
        try:
            text = self.vault.read_resource(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.debug("Note unreadable", path=str(file_path), error=str(e))
            return None

        relative = PurePosixPath(self.vault.relative_path(file_path))
        frontmatter, body = split_frontmatter(text)
        return PageInfo(
            path=str(relative),
            name=relative.stem,
            folder="" if str(relative.parent) == "." else str(relative.parent),
            frontmatter=frontmatter,
            tags=collect_tags(frontmatter, body),
            content=body,
        )
