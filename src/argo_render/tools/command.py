from dataclasses import dataclass
import shlex
import subprocess
from pathlib import Path

from loguru import logger

from argo_render.errors import ArgoRenderError


@dataclass
class ToolError(ArgoRenderError):
    """
    Raised when an external tool (such as `helm` or `kustomize`) could not be run or exited with a non-zero status.
    """

    command: list[str]
    statuscode: int | None = None
    reason: str | None = None

    def __str__(self) -> str:
        message = f"Command `{shlex.join(self.command)}` failed"
        if self.statuscode is not None:
            message += f" with status code {self.statuscode}"
        if self.reason:
            message += f": {self.reason}"
        return message


def run_tool(command: list[str], cwd: Path | None = None) -> str:
    """
    Run an external tool and block until it exits. The standard error stream is passed through to our own so that
    the operator can see the tool's diagnostics, the standard output is captured and returned.
    """

    logger.debug("Running command: $ {}", shlex.join(command))
    try:
        status = subprocess.run(command, cwd=cwd, stdout=subprocess.PIPE, text=True)
    except OSError as exc:
        raise ToolError(command, reason=str(exc)) from exc
    if status.returncode != 0:
        raise ToolError(command, status.returncode)
    return status.stdout
