"""Dynamic template system: parse, invoke and rewrite template sections"""

from .arguments import evaluate_arguments, parse_arguments
from .base import (
    ExpansionResult,
    InvocationResult,
    ITemplateSandbox,
    Script,
    TemplateArguments,
    TemplateReference,
)
from .engine import ExpansionEngine
from .errors import (
    DynamicTemplateError,
    ModuleLoadError,
    TemplateNotFoundError,
    VaultPathError,
)
from .parser import ReferenceParser, has_references, split_lines
from .resolver import TemplateResolver
from .sandbox import CurrentDocumentProxy, ModuleLoader, ScriptSandbox

__all__ = [
    "TemplateArguments",
    "TemplateReference",
    "Script",
    "InvocationResult",
    "ExpansionResult",
    "ITemplateSandbox",
    "ReferenceParser",
    "has_references",
    "split_lines",
    "evaluate_arguments",
    "parse_arguments",
    "TemplateResolver",
    "ScriptSandbox",
    "ModuleLoader",
    "CurrentDocumentProxy",
    "ExpansionEngine",
    "DynamicTemplateError",
    "TemplateNotFoundError",
    "ModuleLoadError",
    "VaultPathError",
]
