from pathlib import Path
from typing import Literal, overload


@overload
def find_upwards(name: str, cwd: Path | None = None, required: Literal[False] = False) -> Path | None: ...


@overload
def find_upwards(name: str, cwd: Path | None = None, required: Literal[True] = True) -> Path: ...


def find_upwards(name: str, cwd: Path | None = None, required: bool = True) -> Path | None:
    """
    Find a file or directory with the given *name* in the given *cwd* or any of its parent directories.
    """

    if cwd is None:
        cwd = Path.cwd()
    cwd = cwd.absolute()

    for directory in [cwd] + list(cwd.parents):
        candidate = directory / name
        if candidate.exists():
            return candidate

    if required:
        raise FileNotFoundError(f"Could not find '{name}' in '{cwd}' or any of its parent directories.")

    return None


def find_git_root(cwd: Path | None = None) -> Path:
    """
    Return the root directory of the Git repository that contains *cwd*.
    """

    return find_upwards(".git", cwd, required=True).parent


def resolve_path(path: str | Path, root: Path, base: Path | None = None) -> Path:
    """
    Resolve *path* the way paths in an `app.yaml` are interpreted: a path with a leading separator is rooted at
    *root*, any other path is relative to *base* (or to the process working directory if no *base* is given).
    """

    path = str(path)
    if path.startswith("/"):
        return root / path.lstrip("/")
    if base is None:
        return Path(path)
    return base / path
