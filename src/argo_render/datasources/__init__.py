from abc import ABC, abstractmethod
from typing import Any

from argo_render.errors import ArgoRenderError

Value = dict[str, Any] | list[Any] | str | int | float | bool | None
"""
A JSON-like value as returned by a datasource.
"""


class DatasourceError(ArgoRenderError):
    """
    Raised when a datasource cannot produce a value for a key.
    """


class Datasource(ABC):
    """
    A named source of structured values that can be looked up by key from within templates.

    Looking up the same key multiple times during a render job must yield the same value.
    """

    @abstractmethod
    def get(self, key: str) -> Value:
        """
        Retrieve the value for a key.

        Raises:
            DatasourceError: If the value cannot be retrieved or decoded.
        """
