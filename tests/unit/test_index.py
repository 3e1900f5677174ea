"""Test the note index exposed to scripts"""

from dynamic_templates.obsidian import VaultIndex
from dynamic_templates.obsidian.index import collect_tags, split_frontmatter


class TestVaultIndex:
    def test_page_with_frontmatter(self, vault, write_file) -> None:
        write_file(
            "projects/alpha.md",
            "---\ntitle: Alpha\ntags: [work, '#urgent']\n---\n# Alpha\nSee #followup\n",
        )
        page = VaultIndex(vault).page("projects/alpha.md")

        assert page is not None
        assert page.path == "projects/alpha.md"
        assert page.name == "alpha"
        assert page.folder == "projects"
        assert page["title"] == "Alpha"
        assert page.get("missing", "x") == "x"
        assert page.tags == ["work", "urgent", "followup"]
        assert page.content == "# Alpha\nSee #followup\n"

    def test_page_by_link_without_extension(self, vault, write_file) -> None:
        write_file("deep/folder/alpha.md", "text")
        page = VaultIndex(vault).page("alpha")
        assert page is not None
        assert page.path == "deep/folder/alpha.md"
        assert page.folder == "deep/folder"

    def test_missing_page(self, vault) -> None:
        assert VaultIndex(vault).page("nothing.md") is None

    def test_pages_in_folder(self, vault, write_file) -> None:
        write_file("a.md", "")
        write_file("projects/b.md", "")
        write_file("projects/sub/c.md", "")
        write_file("projects-old/d.md", "")

        index = VaultIndex(vault)
        assert [p.path for p in index.pages()] == [
            "a.md",
            "projects-old/d.md",
            "projects/b.md",
            "projects/sub/c.md",
        ]
        assert [p.path for p in index.pages("projects")] == [
            "projects/b.md",
            "projects/sub/c.md",
        ]


class TestFrontmatter:
    def test_no_frontmatter(self) -> None:
        assert split_frontmatter("# Title\n") == ({}, "# Title\n")

    def test_invalid_yaml(self) -> None:
        metadata, body = split_frontmatter("---\nkey: [unclosed\n---\nbody")
        assert metadata == {}
        assert body == "body"

    def test_non_mapping_yaml(self) -> None:
        assert split_frontmatter("---\n- a\n- b\n---\nbody") == ({}, "body")

    def test_tags_from_string(self) -> None:
        assert collect_tags({"tags": "a, b c"}, "## Heading\n#1 not a tag") == ["a", "b", "c"]
