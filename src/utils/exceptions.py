"""Custom exception hierarchy for the migration tool."""


class MigrationError(Exception):
    """Base exception for all migration errors."""

    def __init__(self, message: str, is_retryable: bool = False) -> None:
        """Initialize exception.

        Args:
            message: Error message
            is_retryable: Whether the operation can be retried
        """
        super().__init__(message)
        self.message = message
        self.is_retryable = is_retryable


class ConfigurationError(MigrationError):
    """Configuration or environment setup error."""

    pass


class ContentStoreError(MigrationError):
    """Content store query or connection error."""

    pass


class ContentLoadError(ContentStoreError):
    """A content row could not be mapped to an article."""

    pass


class LinkResolutionError(MigrationError):
    """Internal link rewriting error."""

    pass


class DanglingLinkError(LinkResolutionError):
    """An internal link references an article that does not exist."""

    def __init__(self, article_id: int) -> None:
        """Initialize exception.

        Args:
            article_id: Identifier of the missing link target
        """
        super().__init__(f"Link target article {article_id} not found")
        self.article_id = article_id


class RenderError(MigrationError):
    """Output document rendering or writing error."""

    pass


class TemplateLoadError(RenderError):
    """Template resource could not be loaded."""

    pass


class OutputPathError(MigrationError):
    """Output path could not be built for an article."""

    pass
