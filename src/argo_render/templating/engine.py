import json
from typing import Any

import jinja2
from loguru import logger

from argo_render.datasources import Datasource, DatasourceError, Value
from argo_render.errors import ArgoRenderError
from argo_render.templating.helpers import get_helpers


class DatasourceNotFoundError(DatasourceError):
    """
    Raised when a template looks up a datasource that is not registered.
    """


class TemplateRenderError(ArgoRenderError):
    """
    Raised when a template cannot be parsed or evaluated. The template name is usually the path of the file.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"render {name}: {message}")
        self.name = name


class TemplateEngine:
    """
    Expands templates with a set of registered datasources. Templates use Jinja2 syntax with delimiters that do not
    collide with Helm or Jinja2 templates that may already be present in the same files:

        replicas: @<< datasource("file", "/config.yaml").replicas >>@
        @<% for zone in datasource("terraform", "states/prod.tfstate").zones %>@
        - @<< zone >>@
        @<% endfor %>@
        @<# a comment #>@

    No context object is passed to templates; values are pulled in with `datasource(name, key)` only.
    """

    VARIABLE_START = "@<<"
    VARIABLE_END = ">>@"
    BLOCK_START = "@<%"
    BLOCK_END = "%>@"
    COMMENT_START = "@<#"
    COMMENT_END = "#>@"

    def __init__(self) -> None:
        self.datasources: dict[str, Datasource] = {}
        self._env = jinja2.Environment(
            variable_start_string=self.VARIABLE_START,
            variable_end_string=self.VARIABLE_END,
            block_start_string=self.BLOCK_START,
            block_end_string=self.BLOCK_END,
            comment_start_string=self.COMMENT_START,
            comment_end_string=self.COMMENT_END,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
            finalize=self._finalize,
        )
        helpers = get_helpers()
        self._env.filters.update(helpers)
        self._env.globals.update(helpers)
        self._env.globals["datasource"] = self._datasource

    @staticmethod
    def _finalize(value: Any) -> Any:
        # Booleans print the way YAML and JSON spell them.
        if isinstance(value, bool):
            return json.dumps(value)
        return value

    def register_datasource(self, name: str, datasource: Datasource) -> None:
        logger.debug("Registering datasource '{}': {}", name, datasource)
        self.datasources[name] = datasource

    def _datasource(self, name: str, key: str) -> Value:
        datasource = self.datasources.get(name)
        if datasource is None:
            raise DatasourceNotFoundError(f"datasource not found: {name}")
        logger.trace("Looking up '{}' in datasource '{}'", key, name)
        return datasource.get(key)

    def render(self, name: str, content: str) -> str:
        """
        Expand *content* and return the result.

        Raises:
            TemplateRenderError: If the template is malformed or fails to evaluate, including when a datasource
                lookup fails.
        """

        try:
            template = self._env.from_string(content)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateRenderError(name, f"parse template: line {exc.lineno}: {exc.message}") from exc

        try:
            return template.render()
        except Exception as exc:
            raise TemplateRenderError(name, f"execute template: {exc}") from exc
