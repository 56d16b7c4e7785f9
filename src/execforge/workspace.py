"""Main Workspace interface for execforge."""

from pathlib import Path
from typing import Any

from execforge.compiler.execution_builder import ExecutionCompiler
from execforge.config import ClientConfig
from execforge.executor.http_executor import ExecutionClient
from execforge.models.execution import DataResult, ExecutionConfiguration
from execforge.parser.loader import VisualizationRegistry


class Workspace:
    """Main interface for execforge.

    loads a directory of visualization definitions and compiles/executes
    them by name against one project.
    """

    def __init__(
        self,
        definitions_path: str | Path,
        config: ClientConfig | None = None,
        client: ExecutionClient | None = None,
    ) -> None:
        """Initialize the workspace.

        Args:
            definitions_path: Directory containing visualization YAML/JSON files.
            config: Client configuration, defaults to ClientConfig().
            client: Pre-built execution client, created from config if omitted.
        """
        self.definitions_path = Path(definitions_path)
        self.config = config or ClientConfig()
        self.registry = VisualizationRegistry()
        self.compiler = ExecutionCompiler()
        self.client = client or ExecutionClient(self.config)

        # load upfront - fail fast on broken definitions
        self.registry.load_directory(self.definitions_path)

    def get_execution_configuration(self, name: str) -> ExecutionConfiguration:
        """Compile a visualization without executing it."""
        return self.compiler.compile(self.registry.get_visualization(name))

    async def query(self, name: str, project_id: str | None = None) -> DataResult:
        """Compile and execute a visualization.

        Args:
            name: Visualization name.
            project_id: Project to execute in, defaults to the configured one.

        Returns:
            DataResult with headers and rows.
        """
        project_id = project_id or self.config.project_id
        if not project_id:
            raise ValueError("No project id given and none configured")

        vis = self.registry.get_visualization(name)
        return await self.client.get_data_for_visualization(project_id, vis)

    def list_visualizations(self) -> list[dict[str, Any]]:
        """List all loaded visualizations."""
        return [
            {
                "name": name,
                "title": vis.title,
                "type": vis.type,
                "measures": len(vis.buckets.measures),
                "categories": len(vis.buckets.categories),
                "filters": len(vis.buckets.filters),
            }
            for name, vis in self.registry.visualizations.items()
        ]

    def validate(self) -> list[str]:
        """Compile every visualization. Returns list of errors."""
        errors = []
        for name in self.registry.visualizations:
            try:
                self.get_execution_configuration(name)
            except ValueError as e:
                errors.append(f"Visualization '{name}': {e}")
        return errors

    async def close(self) -> None:
        """Close the http client."""
        await self.client.close()

    async def __aenter__(self) -> "Workspace":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
