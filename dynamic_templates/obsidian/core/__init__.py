"""Core Obsidian vault access."""

from dynamic_templates.obsidian.core.file_operations import VaultFileOperations

__all__ = ["VaultFileOperations"]
