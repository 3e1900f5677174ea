"""Exceptions raised by the dynamic template system"""


class DynamicTemplateError(Exception):
    """Base class for dynamic template errors"""


class TemplateNotFoundError(DynamicTemplateError, LookupError):
    """A referenced script has no backing file in the vault"""

    def __init__(self, script_path: str):
        super().__init__(f"Template not found: {script_path}")
        self.script_path = script_path


class ModuleLoadError(DynamicTemplateError, ImportError):
    """A script's ``require`` call could not load the named module"""


class VaultPathError(DynamicTemplateError, ValueError):
    """A path points outside the vault"""
