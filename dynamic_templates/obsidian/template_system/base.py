"""Template system data classes and protocols"""

from dataclasses import dataclass, field
from typing import Any, Protocol

TEMPLATE_KEY = "template"
TERMINATOR = "%%%%"


class TemplateArguments(dict):
    """Argument mapping of a reference.

    Behaves like the object literal it was parsed from: keys are reachable as
    attributes (``input.name``) as well as items, nested objects included.
    Keys win over dict methods of the same name, so ``input.items`` is the
    ``items`` argument when one was given.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        for key, value in dict.items(self):
            dict.__setitem__(self, key, _wrap(value))

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("__") and dict.__contains__(self, name):
            return dict.__getitem__(self, name)
        return super().__getattribute__(name)

    def __getattr__(self, name: str) -> Any:
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = _wrap(value)

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None


def template_path(arguments: dict[str, Any]) -> str | None:
    """Script path named by a reference's arguments, if it names one"""
    value = dict.get(arguments, TEMPLATE_KEY)
    return value if isinstance(value, str) and value else None


def _wrap(value: Any) -> Any:
    if isinstance(value, dict) and not isinstance(value, TemplateArguments):
        return TemplateArguments(value)
    if isinstance(value, list):
        return [_wrap(item) for item in value]
    return value


@dataclass
class TemplateReference:
    """One directive found in a note.

    Line indices refer to the line sequence the note was parsed from and
    are meaningless once the note is rewritten.
    """

    source_path: str
    script_path: str
    line_start: int
    arguments: TemplateArguments
    line_end: int | None = None

    @property
    def is_terminated(self) -> bool:
        return self.line_end is not None


@dataclass
class Script:
    """A resolved script, loaded fresh for every invocation"""

    script_path: str
    source_text: str
    found: bool


@dataclass
class InvocationResult:
    """Outcome of running one script"""

    script_path: str
    text: str | None = None
    error_kind: str | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None


@dataclass
class ExpansionResult:
    """Rewritten note text plus the bookkeeping the caller applies"""

    source_path: str
    text: str
    had_references: bool
    references: int = 0
    changed: bool = False
    used_script_paths: list[str] = field(default_factory=list)
    removed_script_paths: list[str] = field(default_factory=list)
    errors: list[InvocationResult] = field(default_factory=list)


class ITemplateSandbox(Protocol):
    """Runs one script and renders its outcome as note text."""

    async def invoke(
        self, script: Script, source_path: str, arguments: dict[str, Any]
    ) -> InvocationResult:
        ...

    def render(self, result: InvocationResult) -> str | None:
        ...
