from typing import Any, Dict, List

from carbon_enrichment.services.clients.base import RegistryClient


class ProjectBackendClient(RegistryClient):
    """Live project backend; reads are cached for minutes only

    Writes (POST/PUT/DELETE) are never cached.
    """

    @property
    def name(self) -> str:
        return "project_backend"

    # Projects

    async def get_projects(self) -> List[Dict[str, Any]]:
        data = await self._get("/projects")
        return data if isinstance(data, list) else []

    async def get_project(self, project_id: str) -> Dict[str, Any]:
        return await self._get(f"/projects/{project_id}")

    async def create_project(self, project_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/projects", project_data)

    async def update_project(
        self, project_id: str, project_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._put(f"/projects/{project_id}", project_data)

    async def delete_project(self, project_id: str) -> Any:
        return await self._delete(f"/projects/{project_id}")

    # Calculations

    async def calculate_project(self, project_data: Dict[str, Any]) -> Any:
        return await self._post("/calculations/project", project_data)

    async def calculate_materials(self, materials: List[Dict[str, Any]]) -> Any:
        return await self._post("/calculations/materials", materials)

    async def calculate_scopes(self, scopes_data: Dict[str, Any]) -> Any:
        """Scope 1/2/3 emissions for the submitted activity data"""
        return await self._post("/calculations/scopes", scopes_data)

    # Analysis and reporting

    async def analyze_compliance(self, project_id: str) -> Any:
        return await self._get(f"/analysis/compliance/{project_id}")

    async def compare_scenarios(
        self, project_id: str, scenarios: List[Dict[str, Any]]
    ) -> Any:
        return await self._post(
            f"/analysis/compare/{project_id}", {"scenarios": scenarios}
        )

    async def get_optimizations(self, project_id: str, level: str = "balanced") -> Any:
        return await self._get(f"/analysis/optimizations/{project_id}", {"level": level})

    async def generate_report(self, project_id: str, format: str = "pdf") -> Any:
        return await self._get(f"/reports/{project_id}", {"format": format})

    async def export_data(self, project_id: str, format: str = "json") -> Any:
        return await self._get(f"/export/{project_id}", {"format": format})
