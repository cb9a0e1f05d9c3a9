import os
from pathlib import Path

from loguru import logger

from argo_render.config import ConfigError, HelmConfig
from argo_render.tools.command import run_tool

RELEASE_NAME_ENV = "ARGOCD_APP_NAME"
NAMESPACE_ENV = "ARGOCD_APP_NAMESPACE"


class HelmRenderer:
    """
    Wrapper for `helm template`. The release name and namespace fall back to the environment variables that ArgoCD
    sets for config management plugins.
    """

    def __init__(self, executable: str = "helm") -> None:
        self.executable = executable

    def command(self, config: HelmConfig, chart: str, values: list[Path]) -> list[str]:
        release_name = config.release_name or os.environ.get(RELEASE_NAME_ENV, "")
        if not release_name:
            raise ConfigError(f"releaseName is required (set in config or {RELEASE_NAME_ENV} env)")

        # An empty namespace is allowed for namespace-agnostic charts.
        namespace = config.namespace or os.environ.get(NAMESPACE_ENV, "")

        command = [self.executable, "template", release_name, chart]
        if config.repo:
            command.extend(["--repo", config.repo])
            if config.version:
                command.extend(["--version", config.version])
        if namespace:
            command.extend(["--namespace", namespace])
        for file in values:
            command.extend(["--values", str(file)])
        return command

    def render(self, config: HelmConfig, chart: str, values: list[Path], output: Path) -> None:
        """
        Render the chart and write the manifests to *output*.
        """

        command = self.command(config, chart, values)
        logger.info("Rendering Helm chart '{}' to '{}'", chart, output)
        manifests = run_tool(command)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(manifests)
