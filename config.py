"""Application configuration."""
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class ReducerConfig:
    """Defaults for response reduction."""

    normalize: str = "none"  # "lower-trim" or "none"
    top_n: int = 10

    @classmethod
    def from_env(cls) -> "ReducerConfig":
        """Load config from environment variables."""
        return cls(
            normalize=os.getenv("OAS_INSIGHT_NORMALIZE", "none"),
            top_n=_env_int("OAS_INSIGHT_TOP_N", 10),
        )


@dataclass
class SchemaConfig:
    """Schema walking limits."""

    max_depth: int = 64

    @classmethod
    def from_env(cls) -> "SchemaConfig":
        """Load config from environment variables."""
        return cls(max_depth=_env_int("OAS_INSIGHT_MAX_SCHEMA_DEPTH", 64))


@dataclass
class AppConfig:
    """Application configuration."""

    output_dir: str = "./output"
    log_level: str = "WARNING"
    reducer: ReducerConfig = None
    schema: SchemaConfig = None

    def __post_init__(self):
        """Initialize default values."""
        if self.reducer is None:
            self.reducer = ReducerConfig.from_env()
        if self.schema is None:
            self.schema = SchemaConfig.from_env()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            output_dir=os.getenv("OAS_INSIGHT_OUTPUT_DIR", "./output"),
            log_level=os.getenv("OAS_INSIGHT_LOG_LEVEL", "WARNING").upper(),
            reducer=ReducerConfig.from_env(),
            schema=SchemaConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
