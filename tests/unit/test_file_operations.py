"""Test vault file operations"""

import pytest

from dynamic_templates.obsidian import VaultFileOperations
from dynamic_templates.obsidian.template_system.errors import VaultPathError


@pytest.mark.asyncio
class TestVaultFileOperations:
    """Reading, writing and enumerating notes"""

    async def test_read_and_modify(self, vault, write_file, vault_dir) -> None:
        write_file("notes/a.md", "one\r\ntwo")
        assert await vault.read("notes/a.md") == "one\r\ntwo"

        await vault.modify("notes/a.md", "three\nfour")
        assert (vault_dir / "notes/a.md").read_text(encoding="utf-8") == "three\nfour"
        assert vault.operation_history[-1]["path"] == "notes/a.md"

    async def test_exists(self, vault, write_file) -> None:
        write_file("a.md", "")
        assert await vault.exists("a.md")
        assert not await vault.exists("b.md")
        assert not await vault.exists("../outside.md")

    async def test_paths_outside_vault_are_rejected(self, vault) -> None:
        with pytest.raises(VaultPathError):
            await vault.read("../secret.md")

    async def test_list_markdown_files(self, vault, write_file) -> None:
        write_file("b.md", "")
        write_file("folder/a.md", "")
        write_file("script.py", "")
        write_file(".obsidian/plugin.md", "")
        write_file(".trash/old.md", "")

        assert await vault.list_markdown_files() == ["b.md", "folder/a.md"]

    async def test_custom_exclude_folders(self, vault_dir, write_file) -> None:
        write_file("archive/a.md", "")
        write_file("b.md", "")
        ops = VaultFileOperations(vault_dir, exclude_folders=["archive"])
        assert await ops.list_markdown_files() == ["b.md"]


class TestResolveLink:
    """Link resolution relative to a source note"""

    def test_relative_to_source_folder(self, vault, write_file) -> None:
        expected = write_file("notes/greet.py", "")
        write_file("greet.py", "")
        assert vault.resolve_link("greet.py", "notes/a.md") == expected.resolve()

    def test_vault_root(self, vault, write_file) -> None:
        expected = write_file("scripts/greet.py", "")
        assert vault.resolve_link("scripts/greet.py", "notes/a.md") == expected.resolve()
        assert vault.resolve_link("/scripts/greet.py", "notes/a.md") == expected.resolve()

    def test_dot_relative(self, vault, write_file) -> None:
        expected = write_file("scripts/greet.py", "")
        assert vault.resolve_link("../scripts/greet.py", "notes/a.md") == expected.resolve()
        assert vault.resolve_link("./greet.py", "notes/a.md") is None

    def test_by_file_name_anywhere(self, vault, write_file, vault_dir) -> None:
        write_file("deep/er/templates/greet.py", "")
        write_file("templates/greet.py", "")
        assert vault.resolve_link("greet.py", "notes/a.md") == vault_dir / "templates/greet.py"

    def test_by_path_suffix(self, vault, write_file, vault_dir) -> None:
        write_file("x/templates/greet.py", "")
        write_file("y/other/greet.py", "")
        assert (
            vault.resolve_link("templates/greet.py", "a.md")
            == vault_dir / "x/templates/greet.py"
        )

    def test_missing(self, vault) -> None:
        assert vault.resolve_link("missing.py", "a.md") is None
        assert vault.resolve_link("", "a.md") is None

    def test_escaping_link(self, vault) -> None:
        assert vault.resolve_link("../../etc/passwd", "a.md") is None

    def test_relative_path(self, vault, write_file) -> None:
        path = write_file("notes/a.md", "")
        assert vault.relative_path(path) == "notes/a.md"


@pytest.mark.asyncio
async def test_load_resource(vault, write_file) -> None:
    path = write_file("templates/greet.py", "return 'hi'")
    assert await vault.load_resource(vault.resolve_link("greet.py", "a.md")) == "return 'hi'"
    assert vault.read_resource(path) == "return 'hi'"
