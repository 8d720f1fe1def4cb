"""Emission factor lookup command."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from carbon_enrichment.cli.utils import (
    build_service,
    display_warning,
    handle_errors,
    load_config,
)
from carbon_enrichment.models.emission_factors import EmissionFactorTable


@handle_errors
def factors_command(
    state: str = typer.Argument(..., help="State code, e.g. QLD"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
):
    """Show national emission factors for a state."""
    config = load_config(config_path)

    async def _run() -> EmissionFactorTable:
        async with build_service(config) as service:
            return await service.get_emission_factors(state)

    table = asyncio.run(_run())

    typer.echo(f"Emission factors for {table.state}:")
    typer.echo(f"  electricity: {table.electricity} kg CO2-e/kWh")
    typer.echo(f"  natural gas: {table.natural_gas}")
    typer.echo(f"  diesel:      {table.diesel}")
    typer.echo(f"  petrol:      {table.petrol}")

    if table.used_fallback:
        display_warning(
            f"Registry unavailable: using fallback dataset {table.dataset_version} "
            f"(as of {table.as_of}, {table.age_days()} days old)"
        )
