from contextlib import contextmanager
import os
from pathlib import Path
import shutil
from tempfile import TemporaryDirectory
from typing import Iterator

from loguru import logger

from argo_render.tools.fs import resolve_path


class Workspace:
    """
    An isolated copy of the source repository that a single render job operates in.

    Paths from the application configuration are resolved with #resolve(): a path with a leading separator is rooted
    at the workspace, any other path is relative to the #base_dir (the directory of the `app.yaml` inside the copy).

    Rendered templates are staged in memory with #write_text() and only written to disk by #flush(), which the
    pipeline calls right before an external tool needs to see them. #read_text() always returns the latest content,
    staged or not.
    """

    IGNORE = (".git",)

    def __init__(self, root: Path, base_dir: Path | None = None) -> None:
        self.root = root
        self.base_dir = base_dir
        self._staged: dict[Path, str] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.root})"

    @classmethod
    @contextmanager
    def create(cls, source_dir: Path, config_file: Path) -> Iterator["Workspace"]:
        """
        Copy *source_dir* into a fresh temporary directory and yield a workspace for it. The *config_file* is given
        relative to *source_dir* and determines the workspace's base directory. The temporary directory is removed
        when the context exits, regardless of errors.
        """

        with TemporaryDirectory(prefix="argo-render-") as tmp:
            root = Path(tmp)
            logger.debug("Copying '{}' to workspace '{}'", source_dir, root)
            shutil.copytree(
                source_dir,
                root,
                ignore=shutil.ignore_patterns(*cls.IGNORE),
                ignore_dangling_symlinks=True,
                dirs_exist_ok=True,
            )
            yield cls(root, (root / config_file).parent)
            logger.debug("Removing workspace '{}'", root)

    def resolve(self, path: str | Path) -> Path:
        return resolve_path(path, self.root, self.base_dir)

    def _key(self, path: Path) -> Path:
        return Path(os.path.normpath(path.absolute()))

    def read_text(self, path: Path) -> str:
        key = self._key(path)
        if key in self._staged:
            return self._staged[key]
        return path.read_text()

    def write_text(self, path: Path, content: str) -> None:
        self._staged[self._key(path)] = content

    def staged(self) -> list[Path]:
        return list(self._staged)

    def flush(self) -> None:
        """
        Write all staged files to disk.
        """

        for path, content in self._staged.items():
            logger.trace("Writing '{}'", path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        self._staged.clear()
