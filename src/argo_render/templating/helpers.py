"""
General-purpose helpers available in every template, in addition to the Jinja2 built-in filters (`default`,
`upper`, `lower`, `trim`, `indent`, `join`, `replace`, ...).
"""

import base64
from datetime import datetime, timezone
import hashlib
import json
import os
import re
import secrets
from typing import Any

import yaml
from jinja2 import Undefined


class Helpers:
    """
    Every public static method is registered both as a filter and as a global function.
    """

    @staticmethod
    def to_yaml(value: Any) -> str:
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip("\n")

    @staticmethod
    def to_json(value: Any) -> str:
        return json.dumps(value)

    @staticmethod
    def from_yaml(value: str) -> Any:
        return yaml.safe_load(value)

    @staticmethod
    def from_json(value: str) -> Any:
        return json.loads(value)

    @staticmethod
    def b64encode(value: str) -> str:
        return base64.b64encode(str(value).encode("utf-8")).decode("ascii")

    @staticmethod
    def b64decode(value: str) -> str:
        return base64.b64decode(str(value).encode("ascii")).decode("utf-8")

    @staticmethod
    def sha256sum(value: str) -> str:
        return hashlib.sha256(str(value).encode("utf-8")).hexdigest()

    @staticmethod
    def quote(value: Any) -> str:
        return json.dumps(str(value))

    @staticmethod
    def squote(value: Any) -> str:
        return "'" + str(value).replace("'", "''") + "'"

    @staticmethod
    def nindent(value: str, width: int = 2) -> str:
        """
        Indent every line of *value* and prepend a newline, for embedding multi-line values in YAML.
        """

        prefix = " " * width
        return "\n" + "\n".join(prefix + line if line else line for line in str(value).splitlines())

    @staticmethod
    def required(value: Any, message: str = "a required value is missing") -> Any:
        if value is None or isinstance(value, Undefined) or value == "":
            raise ValueError(message)
        return value

    @staticmethod
    def regex_replace(value: str, pattern: str, replacement: str) -> str:
        return re.sub(pattern, replacement, str(value))

    @staticmethod
    def split(value: str, separator: str | None = None) -> list[str]:
        return str(value).split(separator)

    @staticmethod
    def env(name: str, default: str = "") -> str:
        return os.environ.get(name, default)

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def date(value: datetime, fmt: str = "%Y-%m-%dT%H:%M:%SZ") -> str:
        return value.strftime(fmt)

    @staticmethod
    def random_password(length: int = 32) -> str:
        return secrets.token_urlsafe(length)


def get_helpers() -> dict[str, Any]:
    return {key: getattr(Helpers, key) for key in dir(Helpers) if not key.startswith("_")}
