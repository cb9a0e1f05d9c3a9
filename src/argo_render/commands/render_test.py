from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner, Result

from argo_render.commands import app


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    (tmp_path / ".git").mkdir()
    (tmp_path / "apps" / "demo" / "overlay").mkdir(parents=True)
    (tmp_path / "apps" / "demo" / "app.yaml").write_text("kustomize:\n  path: overlay\n")
    (tmp_path / "apps" / "demo" / "overlay" / "cm.tmpl.yaml").write_text("value: @<< 6 * 7 >>@\n")
    return tmp_path


def invoke(repo: Path, *args: str) -> Result:
    config = repo / "apps" / "demo" / "app.yaml"
    return CliRunner().invoke(app, ["--log-level", "critical", "render", "--config", str(config), *args])


def test__render__prints_manifests(repo: Path) -> None:
    def fake_build(path: Path) -> str:
        return (path / "cm.tmpl.yaml").read_text()

    with patch("argo_render.kustomize.KustomizeBuilder.build", side_effect=fake_build):
        result = invoke(repo)

    assert result.exit_code == 0, result.output
    assert result.stdout == "value: 42\n"


def test__render__invalid_config_exits_with_error(repo: Path) -> None:
    (repo / "apps" / "demo" / "app.yaml").write_text("kustomize: {}\n")
    with patch("argo_render.kustomize.KustomizeBuilder.build") as build:
        result = invoke(repo)
    assert result.exit_code == 1
    assert result.stdout == ""
    build.assert_not_called()


def test__render__terraform_datasource_is_created_when_enabled(repo: Path) -> None:
    with (
        patch("argo_render.datasources.terraform.new_s3_datasource") as new_s3_datasource,
        patch("argo_render.kustomize.KustomizeBuilder.build", return_value=""),
    ):
        result = invoke(repo, "--enable-terraform")
    assert result.exit_code == 0, result.output
    new_s3_datasource.assert_called_once_with()
