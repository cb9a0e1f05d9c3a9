from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated

from databind.core import ConversionError
from databind.core.settings import Alias
from loguru import logger
import yaml

from argo_render.errors import ArgoRenderError
from argo_render.tools.typer import deser_yaml


class ConfigError(ArgoRenderError):
    """
    Raised when the application configuration is missing, malformed or incomplete.
    """


@dataclass(frozen=True)
class HelmConfig:
    """
    Describes how to render a Helm chart into a manifest file that the Kustomize overlay can then pick up.
    """

    chart: str = ""
    """
    The chart to render. If no `repo` is set, this is a path to a chart directory and is resolved like any other
    path in the configuration.
    """

    output: str = ""
    """
    The file to write the rendered manifests to.
    """

    repo: str | None = None
    """
    The URL of the chart repository.
    """

    version: str | None = None
    """
    The chart version. Only used together with `repo`.
    """

    release_name: Annotated[str | None, Alias("releaseName")] = None
    """
    The Helm release name. Falls back to the `ARGOCD_APP_NAME` environment variable.
    """

    namespace: str | None = None
    """
    The release namespace. Falls back to the `ARGOCD_APP_NAMESPACE` environment variable.
    """

    values: list[str] = field(default_factory=list)
    """
    Value files to pass to Helm. They are expanded as templates before Helm reads them.
    """


@dataclass(frozen=True)
class KustomizeConfig:
    path: str = ""
    """
    The directory to run `kustomize build` in.
    """


@dataclass(frozen=True)
class AppConfig:
    """
    The contents of an `app.yaml` file, describing a single render job.
    """

    FILENAME = "app.yaml"

    kustomize: KustomizeConfig | None = None
    helm: HelmConfig | None = None

    def validate(self) -> None:
        if self.kustomize is None:
            raise ConfigError("kustomize section is required")
        if not self.kustomize.path:
            raise ConfigError("kustomize.path is required")

        if self.helm is not None:
            if not self.helm.chart:
                raise ConfigError("helm.chart is required when helm is specified")
            if not self.helm.output:
                raise ConfigError("helm.output is required when helm is specified")

    @staticmethod
    def load(file: Path) -> "AppConfig":
        """
        Load and validate the configuration from the given file.
        """

        logger.debug("Loading application configuration from '{}'", file)
        try:
            config = deser_yaml(AppConfig, file)
        except OSError as exc:
            raise ConfigError(f"read config {file}: {exc}") from exc
        except (yaml.YAMLError, ConversionError) as exc:
            raise ConfigError(f"parse config {file}: {exc}") from exc

        try:
            config.validate()
        except ConfigError as exc:
            raise ConfigError(f"validate config {file}: {exc}") from exc

        return config
