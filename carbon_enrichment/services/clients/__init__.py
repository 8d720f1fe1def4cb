from carbon_enrichment.services.clients.base import MaterialSource, RegistryClient
from carbon_enrichment.services.clients.emission_factors import EmissionFactorClient
from carbon_enrichment.services.clients.material_registry import (
    EPDRegisterClient,
    MaterialRegistryClient,
)
from carbon_enrichment.services.clients.project_backend import ProjectBackendClient

__all__ = [
    "MaterialSource",
    "RegistryClient",
    "MaterialRegistryClient",
    "EPDRegisterClient",
    "EmissionFactorClient",
    "ProjectBackendClient",
]
