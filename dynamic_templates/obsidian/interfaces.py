"""
Collaborator interfaces consumed by the template system.
The vault implementation lives in ``obsidian.core``; tests substitute fakes.
"""

from pathlib import Path
from typing import Any, Protocol


class IVaultStorage(Protocol):
    """Interface for note storage operations."""

    async def read(self, path: str) -> str:
        """Read a note's full text by vault-relative path."""
        ...

    async def modify(self, path: str, content: str) -> None:
        """Write back a note's full text."""
        ...

    async def exists(self, path: str) -> bool:
        """Check whether a note exists."""
        ...

    async def list_markdown_files(self) -> list[str]:
        """Enumerate every note of the vault."""
        ...


class ILinkResolver(Protocol):
    """Interface for resolving script links against a source note."""

    def resolve_link(self, link: str, source_path: str) -> Path | None:
        """Resolve a link to a concrete file, or ``None`` when missing."""
        ...

    def read_resource(self, path: Path) -> str:
        """Read a resolved file's text."""
        ...

    async def load_resource(self, path: Path) -> str:
        """Read a resolved file's text without blocking the event loop."""
        ...

    def relative_path(self, path: Path) -> str:
        """Vault-relative identifier of a resolved file."""
        ...


class IDocumentIndex(Protocol):
    """Interface for the queryable note index handed to scripts."""

    def page(self, path: str) -> Any:
        """Look up one note by path."""
        ...


class IKnownPathsStore(Protocol):
    """Interface for persisting the known paths registry."""

    async def load(self) -> dict[str, Any]:
        ...

    async def save(self, data: dict[str, Any]) -> None:
        ...
