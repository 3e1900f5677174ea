"""
Shared fixtures and collection settings.

- Test environment variables are set for every test (autouse)
- The project root is added to ``sys.path`` so ``import dynamic_templates`` resolves
- ``vault_dir`` / ``write_file`` build a throwaway vault per test
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point settings at a temporary vault and reset the settings cache."""
    from dynamic_templates.config import clear_settings_cache

    env: dict[str, str] = {
        "OBSIDIAN_VAULT_PATH": str(tmp_path / "vault"),
        "LOG_LEVEL": "WARNING",
        "LOG_FORMAT": "console",
        "ENVIRONMENT": "testing",
    }
    for k, v in env.items():
        monkeypatch.setenv(k, v)

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    path = tmp_path / "vault"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def write_file(vault_dir: Path) -> Callable[[str, str], Path]:
    """Write a vault-relative file, creating folders as needed."""

    def _write(relative: str, content: str) -> Path:
        path = vault_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def vault(vault_dir: Path):
    from dynamic_templates.obsidian import VaultFileOperations

    return VaultFileOperations(vault_dir)


@pytest.fixture
def resolver(vault):
    from dynamic_templates.obsidian import TemplateResolver

    return TemplateResolver(vault)


@pytest.fixture
def sandbox(resolver, vault):
    from dynamic_templates.obsidian import ScriptSandbox, VaultIndex

    return ScriptSandbox(resolver, vault, index=VaultIndex(vault))


@pytest.fixture
def engine(resolver, sandbox):
    from dynamic_templates.obsidian import ExpansionEngine

    return ExpansionEngine(resolver, sandbox)
