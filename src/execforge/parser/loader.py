"""YAML/JSON loader and registry for visualization definitions.

visualization objects usually come out of the platform as json, but writing
them by hand is much nicer in yaml. yaml.safe_load reads both, so we don't
need two code paths.
"""

from pathlib import Path
from typing import Any

import yaml

from execforge.models.buckets import VisualizationObject

DEFINITION_SUFFIXES = ("*.yaml", "*.yml", "*.json")


class VisualizationRegistry:
    """Registry of named visualization objects loaded from files.

    a file holds either a `visualizations:` list or one bare visualization
    object, which gets named after the file if it has no name of its own.
    """

    def __init__(self) -> None:
        self.visualizations: dict[str, VisualizationObject] = {}
        self._sources: dict[str, Path] = {}  # name -> file it came from, for error messages

    def load_directory(self, path: Path) -> None:
        """Load all definition files from a directory, recursively."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Definitions directory not found: {path}")

        files = sorted(f for pattern in DEFINITION_SUFFIXES for f in path.glob(f"**/{pattern}"))
        if not files:
            raise ValueError(f"No YAML or JSON files found in {path}")

        for definition_file in files:
            self.load_file(definition_file)

    def load_file(self, path: Path) -> None:
        """Parse a single definition file. empty files are skipped."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            return

        if isinstance(data, dict) and "visualizations" in data:
            entries = data["visualizations"] or []
        else:
            entries = [data]

        for entry in entries:
            vis = self._parse_visualization(entry, path)
            name = vis.name or path.stem
            self._register(name, vis.model_copy(update={"name": name}), path)

    def _parse_visualization(self, data: Any, path: Path) -> VisualizationObject:
        if not isinstance(data, dict):
            raise ValueError(f"Visualization in {path} must be a mapping")

        # objects exported from the platform come wrapped in
        # {"visualization": {"meta": {...}, "content": {...}}}
        if "visualization" in data:
            wrapped = data["visualization"]
            meta = wrapped.get("meta", {})
            data = {
                "name": meta.get("identifier"),
                "title": meta.get("title"),
                **wrapped.get("content", {}),
            }

        return VisualizationObject.model_validate(data)

    def _register(self, name: str, vis: VisualizationObject, path: Path) -> None:
        if name in self.visualizations:
            raise ValueError(
                f"Duplicate visualization '{name}' in {path} "
                f"(already defined in {self._sources[name]})"
            )
        self.visualizations[name] = vis
        self._sources[name] = path

    def get_visualization(self, name: str) -> VisualizationObject:
        """Get a visualization by name."""
        if name not in self.visualizations:
            raise KeyError(f"Unknown visualization: {name}")
        return self.visualizations[name]
