"""Script sandbox running template scripts.

A template script is the body of a function receiving four arguments::

    require   load a vault module (``require('helpers.py')``) or a Python module
    dv        the note index, with ``dv.current()`` bound to the calling note
    input     the reference's arguments (``input.name`` or ``input['name']``)
    template  ``await template('other.py', key=value)`` renders another template

Its return value becomes the generated section. A script mentioning ``await``
is compiled as a coroutine function. Failures never escape ``invoke``; they
come back as an ``InvocationResult`` carrying the error.

Scripts run with ordinary Python builtins. The namespace isolates them from
the engine's state, not from the machine: only run templates you trust.
"""

import ast
import builtins
import importlib
import inspect
import re
import types
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any

from dynamic_templates.obsidian.interfaces import IDocumentIndex, ILinkResolver
from dynamic_templates.obsidian.template_system.base import (
    TEMPLATE_KEY,
    InvocationResult,
    Script,
    TemplateArguments,
)
from dynamic_templates.obsidian.template_system.errors import (
    ModuleLoadError,
    TemplateNotFoundError,
)
from dynamic_templates.obsidian.template_system.resolver import TemplateResolver
from dynamic_templates.utils.logger import preview_text
from dynamic_templates.utils.mixins import LoggerMixin

ENTRY_POINT = "__dynamic_template__"
PARAMETERS = ("require", "dv", "input", "template")
AWAIT_RE = re.compile(r"\bawait\b")


def script_namespace(name: str) -> dict[str, Any]:
    """Fresh globals for one script or module execution."""
    return {
        "__builtins__": builtins,
        "__name__": name,
        "TemplateNotFoundError": TemplateNotFoundError,
    }


def compile_script(source_text: str, filename: str) -> Callable[..., Any]:
    """Compile a script body into a function taking ``PARAMETERS``."""
    tree = ast.parse(source_text, filename=filename, mode="exec")

    prefix = "async " if AWAIT_RE.search(source_text) else ""
    wrapper = ast.parse(f"{prefix}def {ENTRY_POINT}({', '.join(PARAMETERS)}):\n    pass\n")
    function = wrapper.body[0]
    if tree.body:
        function.body = tree.body  # type: ignore[attr-defined]
        function.end_lineno = tree.body[-1].end_lineno
        function.end_col_offset = tree.body[-1].end_col_offset
    ast.fix_missing_locations(wrapper)

    namespace = script_namespace(f"template:{filename}")
    exec(compile(wrapper, filename, "exec"), namespace)
    return namespace[ENTRY_POINT]


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def format_error_marker(kind: str, message: str | None) -> str:
    """One-line marker shown in place of a failed template's output."""
    message = " ".join((message or "").split())
    text = f"{kind}: {message}" if message else kind
    return f"%% {text} %%"


class CurrentDocumentProxy:
    """Forwards to the note index, adding ``current()`` for the calling note."""

    def __init__(self, index: IDocumentIndex, source_path: str):
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_source_path", source_path)

    def __getattr__(self, name: str) -> Any:
        if name == "current":
            return lambda: self._index.page(self._source_path)
        return getattr(self._index, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._index, name, value)

    def __dir__(self) -> list[str]:
        return sorted(set(dir(self._index)) | {"current"})


class ModuleLoader:
    """The ``require`` function handed to scripts.

    Vault modules resolve relative to ``base_path``; each loaded module gets a
    loader of its own based at the module's location.
    """

    def __init__(self, links: ILinkResolver, base_path: str):
        self.links = links
        self.base_path = base_path

    def __call__(self, name: str) -> Any:
        if self.is_vault_module(name):
            return self.load_vault_module(name)
        try:
            return importlib.import_module(name)
        except ImportError as e:
            raise ModuleLoadError(f"Cannot import module {name!r}: {e}") from e

    @staticmethod
    def is_vault_module(name: str) -> bool:
        return name.endswith(".py") or "/" in name

    def load_vault_module(self, name: str) -> Any:
        file_path = self.links.resolve_link(name, self.base_path)
        if file_path is None:
            raise ModuleLoadError(
                f"Module not found: {name} (from {self.base_path})"
            )

        source_text = self.links.read_resource(file_path)
        module_path = self.links.relative_path(file_path)

        module = types.ModuleType(PurePosixPath(module_path).stem)
        module.__dict__.update(script_namespace(module.__name__))
        module.__dict__["__file__"] = module_path
        module.__dict__["require"] = ModuleLoader(self.links, module_path)

        exec(compile(source_text, str(file_path), "exec"), module.__dict__)

        if "exports" in module.__dict__:
            return module.__dict__["exports"]
        return module


class ScriptSandbox(LoggerMixin):
    """Runs template scripts with the fixed input contract."""

    def __init__(
        self,
        resolver: TemplateResolver,
        links: ILinkResolver,
        index: IDocumentIndex | None = None,
    ):
        self.resolver = resolver
        self.links = links
        self.index = index

    async def invoke(
        self, script: Script, source_path: str, arguments: dict[str, Any]
    ) -> InvocationResult:
        log = self.bind_logger(source_path=source_path, script_path=script.script_path)

        try:
            entry = compile_script(script.source_text, script.script_path)
            value = entry(
                ModuleLoader(self.links, source_path),
                self._document_index(source_path),
                TemplateArguments(arguments),
                self._template_callback(source_path),
            )
            if inspect.isawaitable(value):
                value = await value
            text = to_text(value)
        except (Exception, SystemExit) as e:
            log.warning(
                "Template script failed",
                error_kind=type(e).__name__,
                error=str(e),
            )
            return InvocationResult(
                script_path=script.script_path,
                error_kind=type(e).__name__,
                error_message=str(e),
            )

        log.debug("Template script finished", output=preview_text(text or ""))
        return InvocationResult(script_path=script.script_path, text=text)

    def render(self, result: InvocationResult) -> str | None:
        """Text to splice into the note for an invocation result."""
        if not result.ok:
            return format_error_marker(result.error_kind or "Error", result.error_message)
        return result.text

    def _document_index(self, source_path: str) -> CurrentDocumentProxy | None:
        if self.index is None:
            return None
        return CurrentDocumentProxy(self.index, source_path)

    def _template_callback(self, source_path: str) -> Callable[..., Any]:
        async def invoke_template(
            path: str, args: dict[str, Any] | None = None, **extra: Any
        ) -> str:
            arguments = TemplateArguments({**(args or {}), **extra})
            arguments[TEMPLATE_KEY] = path
            script = await self.resolver.resolve(source_path, path)
            result = await self.invoke(script, source_path, arguments)
            return self.render(result) or ""

        return invoke_template
