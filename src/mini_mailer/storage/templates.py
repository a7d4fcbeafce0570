# =============================================================================
# Template Store
# =============================================================================
# Named message templates: a header block, a body, and a short description.
#
# Templates are kept in a single JSON file (templates.json in the config
# directory) as a list of objects:
#
#   [
#     {"name": "Standard", "description": "...", "headers": "...", "body": "..."}
#   ]
#
# The file is small and rewritten in full on every change.
# =============================================================================

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Template:
    """
    A reusable message skeleton.

    Attributes:
        name: Unique template name.
        description: Short note shown in the template list.
        headers: Raw header lines (From:, To:, Subject:, ...).
        body: Message body.
    """
    name: str
    description: str = ""
    headers: str = ""
    body: str = ""

    def full_text(self) -> str:
        """Headers and body as a single compose buffer."""
        return f"{self.headers}\n{self.body}"


# Written the first time the store is loaded
DEFAULT_TEMPLATES = [
    Template(name="Standard", description="Default email template"),
]


class TemplateStore:
    """
    Loads and saves templates from a JSON file.

    Usage:
        >>> store = TemplateStore(Config.templates_path())
        >>> store.load()
        >>> store.upsert(Template(name="Hello", headers="To: a@b.com"))
        >>> store.save()

    Attributes:
        path: Location of templates.json.
        templates: Templates in display order.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.templates: list[Template] = []

    def load(self) -> list[Template]:
        """
        Load templates from disk.

        Creates the file with the default templates if it doesn't exist.

        Raises:
            TemplateError: If the file exists but can't be parsed.
        """
        if not self.path.exists():
            logger.info(f"No templates file, creating {self.path}")
            self.templates = [Template(**asdict(t)) for t in DEFAULT_TEMPLATES]
            self.save()
            return self.templates

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            self.templates = [
                Template(
                    name=item["name"],
                    description=item.get("description", ""),
                    headers=item.get("headers", ""),
                    body=item.get("body", ""),
                )
                for item in data
            ]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise TemplateError(f"Invalid templates file {self.path}: {e}") from e

        return self.templates

    def save(self) -> None:
        """Write all templates to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([asdict(t) for t in self.templates], f, indent=2)

    def names(self) -> list[str]:
        """Template names in display order."""
        return [t.name for t in self.templates]

    def get(self, name: str) -> Template | None:
        """Find a template by name."""
        for template in self.templates:
            if template.name == name:
                return template
        return None

    def upsert(self, template: Template) -> Template:
        """
        Add a template, or replace the one with the same name.

        Headers and body are stripped of surrounding whitespace.

        Raises:
            TemplateError: If the template has no name.
        """
        if not template.name.strip():
            raise TemplateError("Template name is required")

        template = Template(
            name=template.name,
            description=template.description,
            headers=template.headers.strip(),
            body=template.body.strip(),
        )

        for index, existing in enumerate(self.templates):
            if existing.name == template.name:
                self.templates[index] = template
                break
        else:
            self.templates.append(template)

        self.save()
        return template

    def delete(self, name: str) -> None:
        """
        Remove a template by name.

        Raises:
            TemplateError: If no template has that name.
        """
        template = self.get(name)
        if template is None:
            raise TemplateError(f"No template named {name!r}")

        self.templates.remove(template)
        self.save()


# =============================================================================
# Exceptions
# =============================================================================

class TemplateError(Exception):
    """Raised when templates can't be loaded or changed."""
    pass
