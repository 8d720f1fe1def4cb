"""Carbon enrichment CLI package.

Usage:
    carbon-enrich run ready_mix_25mpa steel_rebar_12mm --region brisbane
    carbon-enrich run ready_mix_25mpa --offline --json
    carbon-enrich factors QLD
    carbon-enrich validate config/enrichment_config.yaml
    carbon-enrich cache stats --config config/enrichment_config.yaml
"""

import typer

from carbon_enrichment.cli.cache import cache_app
from carbon_enrichment.cli.factors import factors_command
from carbon_enrichment.cli.run import run_command
from carbon_enrichment.cli.validate import validate_command

app = typer.Typer(help="Regional carbon enrichment for construction materials")

app.command(name="run")(run_command)
app.command(name="factors")(factors_command)
app.command(name="validate")(validate_command)

app.add_typer(cache_app, name="cache")

__all__ = [
    "app",
    "run_command",
    "factors_command",
    "validate_command",
    "cache_app",
]
