"""Render migrated articles to front-matter documents with Jinja2 templates."""

import json
import re
import tomllib
from pathlib import Path
from typing import Any

import structlog
import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from src.migration.output_paths import ensure_directory
from src.models.article import OutputDocument
from src.utils.exceptions import RenderError, TemplateLoadError

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TEMPLATE_NAME = "default_page.toml.j2"

# json.dumps leaves DEL, C1 controls and noncharacters unescaped; TOML and YAML reject them raw
UNESCAPED_CONTROL_PATTERN = re.compile("[\x7f-\x9f\ufffe\uffff]")


def quoted(value: Any) -> str:
    """Render a value as a double-quoted string valid in both TOML and YAML."""
    encoded = json.dumps("" if value is None else str(value), ensure_ascii=False)
    return UNESCAPED_CONTROL_PATTERN.sub(lambda m: f"\\u{ord(m.group(0)):04x}", encoded)


def format_tags(tags: list[str]) -> str:
    """Format tag names as a quoted, comma-separated inline sequence.

    Args:
        tags: Tag names in display order

    Returns:
        String such as '"a", "b"', or an empty string when there are no tags
    """
    return ", ".join(quoted(tag) for tag in tags)


def parse_front_matter(content: str) -> dict[str, Any] | None:
    """Parse the front matter block at the top of a rendered document.

    Supports TOML (fenced by +++) and YAML (fenced by ---) front matter.

    Args:
        content: Rendered document text

    Returns:
        Parsed front matter, or None if the document has no recognised fence

    Raises:
        ValueError: If the block is unterminated or cannot be parsed
    """
    for fence, parse in (("+++", tomllib.loads), ("---", yaml.safe_load)):
        if not content.startswith(f"{fence}\n"):
            continue
        end = content.find(f"\n{fence}", len(fence))
        if end == -1:
            raise ValueError(f"Front matter opened with {fence} is never closed")
        block = content[len(fence) + 1 : end]
        try:
            data = parse(block)
        except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Front matter is not valid: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("Front matter must be a mapping")
        return data
    return None


class DocumentRenderer:
    """Turn OutputDocuments into files using a named template.

    The template is loaded once at construction so a missing or broken
    template aborts the run before any article is processed.

    Example:
        >>> renderer = DocumentRenderer(template_name="default_page.yaml.j2")
        >>> renderer.write(document)
        PosixPath('output/news/world/42-hello-world.md')
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        template_name: str = DEFAULT_TEMPLATE_NAME,
    ) -> None:
        """Initialize the Jinja2 environment and load the template.

        Args:
            template_dir: Directory containing templates (default: bundled templates)
            template_name: Template file name within template_dir

        Raises:
            TemplateLoadError: If the template cannot be found or compiled
        """
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self.template_name = template_name

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.env.filters["quoted"] = quoted

        try:
            self.template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateLoadError(
                f"Template '{template_name}' not found in {self.template_dir}"
            ) from e
        except TemplateError as e:
            raise TemplateLoadError(f"Template '{template_name}' is invalid: {e}") from e

        logger.info(
            "template_loaded",
            template_dir=str(self.template_dir),
            template_name=template_name,
        )

    def build_context(self, document: OutputDocument) -> dict[str, Any]:
        """Assemble the template context for a document.

        Args:
            document: Document to render

        Returns:
            Context with article metadata, quoted tag string, tag list, body and draft flag
        """
        return {
            "article": document.article,
            "tags": format_tags(document.tags),
            "tag_list": list(document.tags),
            "body": document.body,
            "draft": document.draft,
        }

    def render(self, document: OutputDocument) -> str:
        """Render a document to text.

        Args:
            document: Document to render

        Returns:
            Rendered text (also stored on document.content)

        Raises:
            RenderError: If the template fails or produces malformed front matter
        """
        try:
            content = self.template.render(**self.build_context(document))
        except TemplateError as e:
            raise RenderError(
                f"Template '{self.template_name}' failed for article {document.article.id}: {e}"
            ) from e

        try:
            parse_front_matter(content)
        except ValueError as e:
            raise RenderError(f"Rendered article {document.article.id} is malformed: {e}") from e

        document.content = content
        return content

    def write(self, document: OutputDocument) -> Path:
        """Render a document and write it to its target path.

        Rendering happens fully in memory first, so a template failure never
        leaves a partial file behind. Existing files are overwritten.

        Args:
            document: Document to write

        Returns:
            Path of the written file

        Raises:
            RenderError: If rendering or writing fails
        """
        content = self.render(document)

        try:
            ensure_directory(document.path.parent)
            document.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise RenderError(f"Failed to write file {document.path}: {e}") from e

        return document.path
