"""
Render the Kubernetes manifests of an application from a Helm chart and a Kustomize overlay, with templated values
pulled from files and remote Terraform state. Designed to run as an ArgoCD ConfigManagementPlugin.
"""

from enum import Enum
import sys

from loguru import logger
from typer import Option

from argo_render.tools.typer import new_typer

app = new_typer(help=__doc__)

from . import render  # noqa: F401,E402


class LogLevel(str, Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@app.callback()
def _callback(
    log_level: LogLevel = Option(LogLevel.INFO, "--log-level", "-l", help="The log level to use."),
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level.name)


def main() -> None:
    app()
