import os
from pathlib import Path

from loguru import logger

from argo_render.templating.engine import TemplateEngine, TemplateRenderError
from argo_render.tools.command import run_tool
from argo_render.workspace import Workspace

TEMPLATE_SUFFIXES = (".tmpl.yaml", ".tmpl.yml")


def is_template_file(path: Path) -> bool:
    return path.name.endswith(TEMPLATE_SUFFIXES)


class OverlayPreprocessor:
    """
    Expands every template file (`*.tmpl.yaml`, `*.tmpl.yml`) below a directory before it is handed to Kustomize.
    The rendered content replaces the template in the workspace; the first failing file aborts the whole pass.
    """

    def __init__(self, engine: TemplateEngine, workspace: Workspace) -> None:
        self._engine = engine
        self._workspace = workspace

    def process(self, directory: Path) -> list[Path]:
        """
        Returns:
            The template files that were rendered.
        """

        if not directory.is_dir():
            raise NotADirectoryError(f"Kustomize path '{directory}' is not a directory")

        rendered: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if not is_template_file(path):
                    continue
                logger.debug("Rendering overlay template '{}'", path)
                try:
                    content = self._workspace.read_text(path)
                except OSError as exc:
                    raise TemplateRenderError(str(path), f"read file: {exc}") from exc
                self._workspace.write_text(path, self._engine.render(str(path), content))
                rendered.append(path)

        logger.info("Rendered {} overlay template(s) in '{}'", len(rendered), directory)
        return rendered


class KustomizeBuilder:
    """
    Wrapper for `kustomize build`.
    """

    def __init__(self, executable: str = "kustomize") -> None:
        self.executable = executable

    def build(self, path: Path) -> str:
        logger.info("Building Kustomize overlay '{}'", path)
        return run_tool([self.executable, "build", str(path)])
