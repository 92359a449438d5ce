"""Error types for rubric loading."""


class RubricLoadError(Exception):
    """Raised when a rubric file cannot be turned into rubric items."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: What went wrong.
            file_path: Path of the offending file, if any.
        """
        self.file_path = file_path
        prefix = f"{file_path}: " if file_path else ""
        super().__init__(f"{prefix}{message}")
