"""Output path construction for migrated articles."""

from pathlib import Path, PurePosixPath

from src.models.article import Article
from src.utils.exceptions import OutputPathError


def build_output_path(output_root: Path, article: Article, extension: str = "md") -> Path:
    """Build the file path an article is written to.

    Format: <output_root>/<category>/<id>-<alias>.<extension>
    Example: output/news/world/42-hello-world.md

    Args:
        output_root: Root directory of the generated site content
        article: Article being migrated
        extension: File extension without the leading dot

    Returns:
        Target file path

    Raises:
        OutputPathError: If the category or alias would escape the output root
    """
    category = PurePosixPath(article.category or "")
    if category.is_absolute() or ".." in category.parts:
        raise OutputPathError(f"Unsafe category path {article.category!r} for article {article.id}")
    if "/" in article.alias or "\\" in article.alias or article.alias in ("", ".", ".."):
        raise OutputPathError(f"Unsafe alias {article.alias!r} for article {article.id}")

    filename = f"{article.id}-{article.alias}.{extension.lstrip('.')}"
    return Path(output_root).joinpath(*category.parts) / filename


def ensure_directory(directory: Path) -> Path:
    """Create a directory and its parents; an existing directory is not an error."""
    directory.mkdir(parents=True, exist_ok=True)
    return directory
