"""
Configuration for strictform.

``SchemaDialect`` describes what the target provider's structured-output
mode accepts; ``CompletionConfig`` holds the request-side defaults used by
``StructuredCompletion``.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..utils.logger import setup_logging
from .exceptions import ConfigurationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SchemaDialect:
    """
    Rules of the schema dialect a provider enforces.

    The defaults match OpenAI's strict structured outputs: every property
    is listed in ``required`` and optionality is expressed as a union with
    ``null``.
    """

    require_all_fields: bool = True
    """List nullable fields in ``required`` (optionality via ``null`` union)"""

    forbid_additional_properties: bool = True
    """Emit ``additionalProperties: false`` on every object"""

    strict: bool = True
    """Value of the ``strict`` flag in the ``response_format`` envelope"""

    @classmethod
    def openai_strict(cls) -> 'SchemaDialect':
        """Dialect for OpenAI strict structured outputs."""
        return cls()

    @classmethod
    def permissive(cls) -> 'SchemaDialect':
        """Dialect for providers with native optional/required semantics."""
        return cls(
            require_all_fields=False,
            forbid_additional_properties=False,
            strict=False,
        )


STRICT_DIALECT = SchemaDialect.openai_strict()


@dataclass
class CompletionConfig:
    """
    Request-side defaults for structured completions.
    """

    # === LLM Configuration ===
    model: str = "gpt-4o-mini"
    """Model identifier sent with each request"""

    temperature: float = 0.0
    """LLM temperature (0.0-2.0)"""

    max_tokens: int = 2000
    """Maximum tokens for LLM output"""

    # === Schema ===
    dialect: SchemaDialect = field(default_factory=SchemaDialect.openai_strict)
    """Schema dialect used for emission and decoding"""

    # === Logging Configuration ===
    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"""

    log_dir: Optional[str] = None
    """Directory for log files (None = no file logging)"""

    # === Validation ===
    def __post_init__(self):
        """Validate configuration values after initialization."""
        if not self.model:
            raise ConfigurationError("model must be a non-empty string")

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(f"temperature must be between 0.0 and 2.0, got {self.temperature}")

        if self.max_tokens <= 0:
            raise ConfigurationError(f"max_tokens must be positive, got {self.max_tokens}")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level}")

    def configure_logging(self, format_type: str = "console", include_timestamp: bool = True):
        """Apply ``log_level`` and ``log_dir`` to the package logger.

        Returns:
            The configured ``strictform`` logger.
        """
        return setup_logging(
            level=self.log_level,
            format_type=format_type,
            include_timestamp=include_timestamp,
            log_dir=self.log_dir,
        )

    @classmethod
    def for_development(cls) -> 'CompletionConfig':
        """Create configuration optimized for development."""
        return cls(
            max_tokens=1000,    # Cheaper iterations
            log_level="DEBUG"
        )

    @classmethod
    def for_production(cls) -> 'CompletionConfig':
        """Create configuration optimized for production."""
        return cls(
            temperature=0.0,    # Reproducible extraction
            max_tokens=4000,    # Room for large objects
            log_level="INFO"
        )
