from pathlib import Path

from loguru import logger

from argo_render.config import AppConfig, HelmConfig
from argo_render.datasources import Datasource
from argo_render.datasources.file import FileDatasource
from argo_render.helm import HelmRenderer
from argo_render.kustomize import KustomizeBuilder, OverlayPreprocessor
from argo_render.templating.engine import TemplateEngine, TemplateRenderError
from argo_render.workspace import Workspace


class Pipeline:
    """
    Renders the manifests of a single application.

    A run copies the repository into a temporary workspace, expands the Helm value files, renders the Helm chart
    (if configured), expands the Kustomize overlay's template files, builds the overlay and, if enabled, expands the
    combined output once more. The workspace is removed when the run ends, successful or not.

    The *terraform* datasource should be created per run, as it caches the state documents it fetches.
    """

    POST_RENDER_TEMPLATE_NAME = "postrender"

    def __init__(
        self,
        terraform: Datasource | None = None,
        enable_post_render: bool = False,
        helm: HelmRenderer | None = None,
        kustomize: KustomizeBuilder | None = None,
    ) -> None:
        self.terraform = terraform
        self.enable_post_render = enable_post_render
        self.helm = helm or HelmRenderer()
        self.kustomize = kustomize or KustomizeBuilder()

    def new_engine(self, workspace: Workspace) -> TemplateEngine:
        engine = TemplateEngine()
        engine.register_datasource("file", FileDatasource(workspace))
        if self.terraform is not None:
            engine.register_datasource("terraform", self.terraform)
        return engine

    def run(self, config: AppConfig, repo_root: Path, config_file: Path) -> str:
        """
        Args:
            config: The application configuration.
            repo_root: The root of the repository to copy into the workspace.
            config_file: The path of the configuration file relative to *repo_root*. Relative paths in the
                configuration are resolved relative to its directory.
        Returns:
            The rendered manifests.
        """

        config.validate()
        assert config.kustomize is not None

        with Workspace.create(repo_root, config_file) as workspace:
            logger.info("Prepared workspace '{}'", workspace.root)
            engine = self.new_engine(workspace)

            if config.helm is not None:
                self._render_helm(engine, workspace, config.helm)

            overlay = workspace.resolve(config.kustomize.path)
            OverlayPreprocessor(engine, workspace).process(overlay)
            workspace.flush()
            output = self.kustomize.build(overlay)

            if self.enable_post_render:
                logger.info("Running post-render template pass")
                output = engine.render(self.POST_RENDER_TEMPLATE_NAME, output)

            return output

    def _render_helm(self, engine: TemplateEngine, workspace: Workspace, helm: HelmConfig) -> None:
        values = [workspace.resolve(file) for file in helm.values]
        for file in values:
            logger.debug("Rendering Helm values file '{}'", file)
            try:
                content = workspace.read_text(file)
            except OSError as exc:
                raise TemplateRenderError(str(file), f"read file: {exc}") from exc
            workspace.write_text(file, engine.render(str(file), content))
        workspace.flush()

        # Without a repository, the chart is a local directory.
        chart = helm.chart if helm.repo else str(workspace.resolve(helm.chart))
        self.helm.render(helm, chart, values, workspace.resolve(helm.output))
