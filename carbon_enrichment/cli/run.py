"""Run command for batch enrichment.

Enriches one or more materials for a region and prints the results.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer

from carbon_enrichment.cli.utils import (
    build_service,
    display_error,
    display_info,
    display_success,
    handle_errors,
    load_config,
)
from carbon_enrichment.models.batch import BatchItemError, BatchResult, MaterialQuery
from carbon_enrichment.observability.metrics import get_metrics_text


def _print_result(result: BatchResult) -> None:
    for item in result.results:
        if isinstance(item, BatchItemError):
            display_error(
                f"  {item.material_id}: data unavailable ({item.error_type}: {item.message})"
            )
            continue

        record = item.material_record
        typer.echo(
            f"  {record.material_id} [{item.material_class.value}] "
            f"{record.carbon_rate} + {item.transport_penalty} = "
            f"{item.adjusted_carbon_rate:g} {record.unit} "
            f"(confidence {record.confidence_score:.0%}, {record.source_id})"
        )
        typer.echo(f"    suppliers: {', '.join(item.suppliers)}")

    stats = result.stats
    display_info(
        f"Cache hits: {stats.hits}  misses: {stats.misses}  "
        f"efficiency: {stats.efficiency_ratio:.0%}"
    )


@handle_errors
def run_command(
    materials: List[str] = typer.Argument(..., help="Material ids to enrich"),
    region: str = typer.Option("brisbane", "--region", "-r", help="Region id"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    offline: bool = typer.Option(
        False, "--offline", help="Use the bundled static material registry"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    show_metrics: bool = typer.Option(
        False, "--metrics", help="Print Prometheus metrics after the run"
    ),
):
    """Enrich materials with regional transport, supplier and climate data."""
    config = load_config(config_path)
    queries = [MaterialQuery(material_id=m, region_id=region) for m in materials]

    async def _run() -> BatchResult:
        async with build_service(config, offline=offline) as service:
            return await service.run_batch(queries)

    result = asyncio.run(_run())

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        display_success(
            f"Enriched {len(result.successes)}/{len(queries)} materials for {region}"
        )
        _print_result(result)

    if show_metrics:
        typer.echo(get_metrics_text().decode("utf-8"))
