"""
Obsidian vault integration for dynamic templates
"""

from dynamic_templates.obsidian.core import VaultFileOperations
from dynamic_templates.obsidian.index import PageInfo, VaultIndex
from dynamic_templates.obsidian.registry import (
    JsonKnownPathsStore,
    KnownPaths,
    KnownPathsRegistry,
)
from dynamic_templates.obsidian.template_system import (
    ExpansionEngine,
    ScriptSandbox,
    TemplateResolver,
)
from dynamic_templates.obsidian.updater import TemplateUpdater

__all__ = [
    # Vault access
    "VaultFileOperations",
    "VaultIndex",
    "PageInfo",
    # Bookkeeping
    "KnownPaths",
    "KnownPathsRegistry",
    "JsonKnownPathsStore",
    # Templates
    "TemplateResolver",
    "ScriptSandbox",
    "ExpansionEngine",
    "TemplateUpdater",
]
