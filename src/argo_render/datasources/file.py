import json
from pathlib import Path

import yaml

from argo_render.datasources import Datasource, DatasourceError, Value
from argo_render.workspace import Workspace


class FileDatasource(Datasource):
    """
    Reads YAML or JSON files from the workspace. Keys with a leading separator are rooted at the workspace, other
    keys are relative to the workspace's base directory.

    Files are parsed on every lookup because earlier pipeline stages may have rendered them.
    """

    PARSERS = {
        ".yaml": yaml.safe_load,
        ".yml": yaml.safe_load,
        ".json": json.loads,
    }

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._workspace.root})"

    def get(self, key: str) -> Value:
        parser = self.PARSERS.get(Path(key).suffix.lower())
        if parser is None:
            raise DatasourceError(f"unsupported file format {key}: use .json, .yaml, or .yml")

        path = self._workspace.resolve(key)
        try:
            content = self._workspace.read_text(path)
        except OSError as exc:
            raise DatasourceError(f"read file {key}: {exc}") from exc

        try:
            return parser(content)
        except (yaml.YAMLError, ValueError) as exc:
            raise DatasourceError(f"parse file {key}: {exc}") from exc
