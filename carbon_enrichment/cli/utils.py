"""Shared CLI utilities.

Provides common functionality for all CLI commands.
"""

import functools
from pathlib import Path
from typing import Callable, Optional, TypeVar

import structlog
import typer

from carbon_enrichment.models.config import EnrichmentConfig
from carbon_enrichment.observability.logging import configure_logging
from carbon_enrichment.services.config_manager import ConfigManager
from carbon_enrichment.services.enrichment_service import EnrichmentService
from carbon_enrichment.services.transport import StaticRegistryTransport
from carbon_enrichment.utils.exceptions import ConfigValidationError

logger = structlog.get_logger()

# Type variable for decorator
F = TypeVar("F", bound=Callable)


def load_config(config_path: Optional[Path]) -> EnrichmentConfig:
    """Load and validate configuration, then configure logging from it.

    Args:
        config_path: Path to configuration file, or None for defaults.

    Returns:
        Validated EnrichmentConfig.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    if config_path is None:
        config = EnrichmentConfig()
    else:
        try:
            config = ConfigManager(config_path=str(config_path)).load_config()
        except (FileNotFoundError, ConfigValidationError) as e:
            typer.secho(f"Configuration Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    configure_logging(level=config.logging.level, json_output=config.logging.json_output)
    return config


def build_service(config: EnrichmentConfig, offline: bool = False) -> EnrichmentService:
    """Create the service; offline runs use the bundled static registry."""
    transport = StaticRegistryTransport(latency_seconds=0.05) if offline else None
    return EnrichmentService(config=config, transport=transport)


def handle_errors(func: F) -> F:
    """Decorator for consistent error handling.

    Catches exceptions and displays user-friendly error messages.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            logger.exception("command_failed")
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    return wrapper  # type: ignore[return-value]


def display_success(message: str) -> None:
    typer.secho(message, fg=typer.colors.GREEN)


def display_warning(message: str) -> None:
    typer.secho(message, fg=typer.colors.YELLOW)


def display_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)


def display_info(message: str) -> None:
    typer.secho(message, fg=typer.colors.CYAN)
