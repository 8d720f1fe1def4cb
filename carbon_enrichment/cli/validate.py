"""Validate command for configuration files.

Validates configuration file syntax, semantics and region data.
"""

from pathlib import Path

import typer

from carbon_enrichment.cli.utils import display_error, display_success, handle_errors
from carbon_enrichment.services.config_manager import ConfigManager
from carbon_enrichment.services.region_directory import RegionDirectory


@handle_errors
def validate_command(
    config_path: Path = typer.Argument(..., help="Config file to validate"),
):
    """Validate configuration file syntax and semantics."""
    try:
        config = ConfigManager(config_path=str(config_path)).load_config()
        regions = RegionDirectory.load(config.regions_path)
    except Exception as e:
        display_error(f"Validation failed: {e}")
        raise typer.Exit(code=1)

    display_success(
        f"Configuration is valid ({len(regions.region_ids)} regions: "
        f"{', '.join(regions.region_ids)})"
    )
