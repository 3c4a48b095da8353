from typing import Any, Optional


class ConfigurationError(Exception):
    """Raised when SVG settings or the pipeline config fail validation."""

    def __init__(self, message: str, source: Optional[str] = None, details: Optional[Any] = None):
        self.message = message
        self.source = source
        self.details = details
        full_message = f"{message}"
        if source:
            full_message += f" [File: {source}]"
        super().__init__(full_message)


class GeometryError(Exception):
    """Raised when resource timings cannot be laid out on a chart."""
    pass
