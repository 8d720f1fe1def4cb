import os
from pathlib import Path
from string import Template
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from carbon_enrichment.models.config import EnrichmentConfig
from carbon_enrichment.utils.exceptions import ConfigValidationError

logger = structlog.get_logger()


class ConfigManager:
    """Loads and validates the enrichment client configuration"""

    def __init__(self, config_path: str = "config/enrichment_config.yaml"):
        self.config_path = Path(config_path)
        self.env_loaded = False
        self._config: Optional[EnrichmentConfig] = None

    def load_config(self) -> EnrichmentConfig:
        """Load and validate configuration"""
        if self._config:
            return self._config

        # 1. Load environment
        if not self.env_loaded:  # pragma: no cover
            load_dotenv()
            self.env_loaded = True

        # 2. Check file existence
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        # 3. Read YAML
        try:
            with open(self.config_path) as f:
                raw_content = f.read()
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        # 4. Substitute env vars
        try:
            template = Template(raw_content)
            substituted_content = template.safe_substitute(os.environ)
            config_data = yaml.safe_load(substituted_content) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Failed to parse YAML or substitute variables: {e}"
            )

        # 5. Validate with Pydantic
        try:
            self._config = EnrichmentConfig(**config_data)
        except (TypeError, ValidationError) as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        self._resolve_regions_path(self._config)
        logger.info(
            "config_loaded",
            path=str(self.config_path),
            batch_size=self._config.batch.batch_size,
            retry_attempts=self._config.retry.retry_attempts,
        )
        return self._config

    def _resolve_regions_path(self, config: EnrichmentConfig) -> None:
        """Relative region data paths are relative to the config file"""
        if config.regions_path is None:
            return
        regions_path = Path(config.regions_path)
        if not regions_path.is_absolute():
            config.regions_path = str(self.config_path.parent / regions_path)
