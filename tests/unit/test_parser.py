"""Test reference parsing"""

import pytest

from dynamic_templates.obsidian.template_system.parser import (
    ReferenceParser,
    has_references,
    split_lines,
)


def parse(text: str):
    return ReferenceParser().parse(text, "note.md")


class TestReferenceParser:
    """Reference and terminator recognition"""

    def test_single_reference(self) -> None:
        text = "intro\n%%{ template: 'greet.py', name: 'Nate' }%%\nold body\n%%%%\noutro"
        [reference] = parse(text)

        assert reference.source_path == "note.md"
        assert reference.script_path == "greet.py"
        assert reference.line_start == 1
        assert reference.line_end == 3
        assert reference.arguments == {"template": "greet.py", "name": "Nate"}

    def test_braceless_form(self) -> None:
        [reference] = parse("%% template: 'a.py' %%\n%%%%")
        assert reference.script_path == "a.py"
        assert reference.line_end == 1

    def test_unterminated_reference(self) -> None:
        [reference] = parse("%% template: 'a.py' %%\nbody")
        assert reference.line_end is None
        assert not reference.is_terminated

    def test_terminator_without_reference_is_inert(self) -> None:
        references = parse("%%%%\n%% template: 'a.py' %%\n%%%%\n%%%%")
        assert len(references) == 1
        assert references[0].line_start == 1
        assert references[0].line_end == 2

    def test_new_reference_leaves_open_one_unterminated(self) -> None:
        first, second = parse("%% template: 'a.py' %%\n%% template: 'b.py' %%\n%%%%")
        assert first.line_end is None
        assert (second.line_start, second.line_end) == (1, 2)

    def test_marker_without_template_key_is_ordinary_text(self) -> None:
        text = "%% name: 'Nate' %%\n%% not an object %%\n%% template: 'a.py' %%\n%%%%"
        [reference] = parse(text)
        assert reference.line_start == 2
        assert reference.line_end == 3

    def test_terminator_after_ignored_marker_is_inert(self) -> None:
        assert parse("%% name: 'Nate' %%\n%%%%") == []

    def test_error_marker_is_not_a_reference(self) -> None:
        text = (
            "%% template: 'a.py' %%\n"
            "%% ZeroDivisionError: division by zero %%\n"
            "%%%%"
        )
        [reference] = parse(text)
        assert (reference.line_start, reference.line_end) == (0, 2)

    def test_crlf_line_breaks(self) -> None:
        [reference] = parse("x\r\n%% template: 'a.py' %%\r\nbody\r\n%%%%\r\n")
        assert (reference.line_start, reference.line_end) == (1, 3)

    def test_end_always_after_start(self) -> None:
        text = "%%%%\n%% template: 'a.py' %%\n%%%%\n%% template: 'b.py' %%\nx\n%%%%"
        for reference in parse(text):
            assert reference.line_end is not None
            assert reference.line_end > reference.line_start


class TestFenceTracking:
    """Directives inside fenced code blocks are plain text"""

    @pytest.mark.parametrize("depth", [0, 1, 2, 3])
    def test_reference_inside_fence_is_ignored(self, depth: int) -> None:
        fence = "`" * (3 + depth)
        text = f"{fence}markdown\n%% template: 'a.py' %%\n%%%%\n{fence}\n%% template: 'b.py' %%\n%%%%"
        [reference] = parse(text)
        assert reference.script_path == "b.py"
        assert (reference.line_start, reference.line_end) == (4, 5)

    def test_nested_fences(self) -> None:
        text = "\n".join(
            [
                "``````",
                "`````",
                "````",
                "```python",
                "%% template: 'a.py' %%",
                "```",
                "%% template: 'b.py' %%",
                "````",
                "%% template: 'c.py' %%",
                "`````",
                "``````",
                "%% template: 'd.py' %%",
                "%%%%",
            ]
        )
        [reference] = parse(text)
        assert reference.script_path == "d.py"

    def test_closing_outer_fence_closes_inner(self) -> None:
        text = "\n".join(
            [
                "````",
                "```",
                "%% template: 'a.py' %%",
                "````",
                "%% template: 'b.py' %%",
                "%%%%",
            ]
        )
        [reference] = parse(text)
        assert reference.script_path == "b.py"
        assert reference.line_start == 4

    def test_unclosed_fence_suppresses_rest_of_note(self) -> None:
        text = "%% template: 'a.py' %%\n```\n%%%%\n%% template: 'b.py' %%\n%%%%"
        [reference] = parse(text)
        assert reference.script_path == "a.py"
        assert reference.line_end is None

    def test_fence_line_does_not_close_reference(self) -> None:
        text = "%% template: 'a.py' %%\n```\ncode\n```\n%%%%"
        [reference] = parse(text)
        assert reference.line_end == 4

    def test_inline_backticks_are_not_fences(self) -> None:
        text = "```inline``` text\n%% template: 'a.py' %%\n%%%%"
        [reference] = parse(text)
        assert reference.script_path == "a.py"


class TestHelpers:
    def test_split_lines(self) -> None:
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]
        assert split_lines("a\n") == ["a", ""]

    def test_has_references(self) -> None:
        assert has_references("text\n%%{ template: 'a.py' }%%\n")
        assert has_references("%% template: 'a.py' %%")
        assert not has_references("just text\n%%%%\n")
        assert not has_references("inline %% comment %% here")
