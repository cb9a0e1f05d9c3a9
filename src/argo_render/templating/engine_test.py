from unittest.mock import MagicMock

import pytest

from argo_render.datasources import Datasource, DatasourceError
from argo_render.templating.engine import TemplateEngine, TemplateRenderError


class DictDatasource(Datasource):
    def __init__(self, data: dict) -> None:
        self.data = data

    def get(self, key: str) -> dict:
        if key not in self.data:
            raise DatasourceError(f"no such key: {key}")
        return self.data[key]


@pytest.fixture
def engine() -> TemplateEngine:
    engine = TemplateEngine()
    engine.register_datasource("config", DictDatasource({"app": {"replicas": 3, "zones": ["a", "b"]}}))
    return engine


def test__TemplateEngine__render_datasource_lookup(engine: TemplateEngine) -> None:
    assert engine.render("t", 'replicas: @<< datasource("config", "app").replicas >>@\n') == "replicas: 3\n"


def test__TemplateEngine__render_leaves_helm_and_jinja_syntax_alone(engine: TemplateEngine) -> None:
    content = "name: {{ .Release.Name }}\n{% raw %}x{% endraw %}\n{# comment #}\n"
    assert engine.render("t", content) == content


def test__TemplateEngine__render_blocks_comments_and_helpers(engine: TemplateEngine) -> None:
    content = (
        "@<# zones of the app #>@"
        '@<% for zone in datasource("config", "app").zones %>@- @<< zone | upper | quote >>@\n@<% endfor %>@'
        'config: @<< datasource("config", "app") | to_json | b64encode >>@\n'
        'missing: @<< none | default("fallback", true) >>@\n'
    )
    assert engine.render("t", content) == (
        '- "A"\n- "B"\nconfig: eyJyZXBsaWNhcyI6IDMsICJ6b25lcyI6IFsiYSIsICJiIl19\nmissing: fallback\n'
    )


def test__TemplateEngine__render_nindent_to_yaml(engine: TemplateEngine) -> None:
    content = 'app:@<< datasource("config", "app") | to_yaml | nindent(2) >>@\n'
    assert engine.render("t", content) == "app:\n  replicas: 3\n  zones:\n  - a\n  - b\n"


def test__TemplateEngine__render_missing_datasource_fails(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateRenderError, match="datasource not found: missing"):
        engine.render("values.yaml", 'a: @<< datasource("missing", "x") >>@')


def test__TemplateEngine__render_datasource_error_fails(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateRenderError, match="render values.yaml: execute template: no such key: nope"):
        engine.render("values.yaml", 'a: @<< datasource("config", "nope") >>@')


def test__TemplateEngine__render_syntax_error_fails(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateRenderError, match="parse template"):
        engine.render("broken.yaml", "a: @<< datasource( >>@")


def test__TemplateEngine__render_undefined_fails(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateRenderError, match="execute template"):
        engine.render("t", "a: @<< undefined_name >>@")


def test__TemplateEngine__render_has_no_context(engine: TemplateEngine) -> None:
    datasource = MagicMock(spec=Datasource)
    datasource.get.return_value = "value"
    engine.register_datasource("mock", datasource)
    assert engine.render("t", '@<< datasource("mock", "k") >>@') == "value"
    datasource.get.assert_called_once_with("k")


def test__TemplateEngine__render_keeps_trailing_newline(engine: TemplateEngine) -> None:
    assert engine.render("t", "a: 1\n\n") == "a: 1\n\n"


def test__TemplateEngine__render_booleans_in_yaml_spelling() -> None:
    engine = TemplateEngine()
    engine.register_datasource("terraform", DictDatasource({"b/k": {"tls": True, "debug": False}}))
    content = (
        'env: "@<< datasource("terraform", "b/k").tls >>@"\n'
        'debug: @<< datasource("terraform", "b/k").debug >>@\n'
    )
    assert engine.render("t", content) == 'env: "true"\ndebug: false\n'
