"""Template resolver mapping script links to script files"""

from dynamic_templates.obsidian.interfaces import ILinkResolver
from dynamic_templates.obsidian.template_system.base import Script
from dynamic_templates.utils.mixins import LoggerMixin


def missing_script_source(script_path: str) -> str:
    """Script body that fails the same way every time it runs."""
    return f"raise TemplateNotFoundError({script_path!r})\n"


class TemplateResolver(LoggerMixin):
    """Loads the script a reference names, relative to its note.

    Scripts are read fresh on each call so edits to a template show up on
    the next update without restarting anything.
    """

    def __init__(self, links: ILinkResolver):
        self.links = links

    async def resolve(self, source_path: str, script_path: str) -> Script:
        file_path = self.links.resolve_link(script_path, source_path)
        if file_path is None:
            self.logger.info(
                "Template not found",
                source_path=source_path,
                script_path=script_path,
            )
            return Script(
                script_path=script_path,
                source_text=missing_script_source(script_path),
                found=False,
            )

        try:
            source_text = await self.links.load_resource(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(
                "Template could not be read",
                script_path=script_path,
                file_path=str(file_path),
                error=str(e),
            )
            return Script(
                script_path=script_path,
                source_text=missing_script_source(script_path),
                found=False,
            )

        self.logger.debug(
            "Template resolved",
            source_path=source_path,
            script_path=script_path,
            file_path=str(file_path),
        )
        return Script(script_path=script_path, source_text=source_text, found=True)
