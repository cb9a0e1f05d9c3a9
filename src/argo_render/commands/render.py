from pathlib import Path
import sys

from loguru import logger
from typer import Option

from argo_render.config import AppConfig
from argo_render.datasources import Datasource
from argo_render.errors import ArgoRenderError
from argo_render.pipeline import Pipeline
from argo_render.tools.fs import find_git_root

from . import app


@app.command()
def render(
    config: Path = Option(Path(AppConfig.FILENAME), "--config", "-c", help="Path to the application config file."),
    enable_terraform: bool = Option(
        False,
        envvar="ARGO_RENDER_ENABLE_TERRAFORM",
        help="Enable the `terraform` datasource, which reads Terraform state from S3. Requires AWS credentials.",
    ),
    enable_post_render: bool = Option(
        False,
        envvar="ARGO_RENDER_ENABLE_POST_RENDER",
        help="Expand the final Kustomize output as a template once more.",
    ),
) -> None:
    """
    Render the application's manifests and print them to stdout.
    """

    try:
        output = _render(config.absolute(), enable_terraform, enable_post_render)
    except (ArgoRenderError, OSError) as exc:
        logger.error("{}", exc)
        sys.exit(1)

    sys.stdout.write(output)


def _render(config_file: Path, enable_terraform: bool, enable_post_render: bool) -> str:
    app_config = AppConfig.load(config_file)
    repo_root = find_git_root(config_file.parent)
    logger.debug("Found repository root '{}'", repo_root)

    terraform: Datasource | None = None
    if enable_terraform:
        from argo_render.datasources.terraform import new_s3_datasource

        terraform = new_s3_datasource()

    pipeline = Pipeline(terraform=terraform, enable_post_render=enable_post_render)
    return pipeline.run(app_config, repo_root, config_file.relative_to(repo_root))
