"""CLI entry point.

Allows running the CLI as a module: python -m carbon_enrichment.cli
"""

from carbon_enrichment.cli import app

if __name__ == "__main__":
    app()
