import json
from typing import Any

from loguru import logger

from argo_render.datasources import Datasource, DatasourceError, Value
from argo_render.datasources.terraform.fetcher import StateFetcher
from argo_render.datasources.terraform.types import TypeDecodeError, parse_type


class StateDecodeError(DatasourceError):
    """
    Raised when a Terraform state document cannot be decoded.
    """


class RemoteTerraformState(Datasource):
    """
    Serves the outputs of a remote Terraform state as plain values. The key identifies the state document (for
    the S3 fetcher `<bucket>/<path/to/terraform.tfstate>`), the result maps every output name to its value.

    Either all outputs are decoded or the lookup fails as a whole.
    """

    def __init__(self, fetcher: StateFetcher) -> None:
        self._fetcher = fetcher

    def get(self, key: str) -> Value:
        data = self._fetcher.fetch(key)

        try:
            state = json.loads(data)
        except ValueError as exc:
            raise StateDecodeError(f"failed to parse Terraform state {key}: {exc}") from exc
        if not isinstance(state, dict):
            raise StateDecodeError(f"failed to parse Terraform state {key}: expected an object")

        outputs = state.get("outputs") or {}
        if not isinstance(outputs, dict):
            raise StateDecodeError(f"failed to parse Terraform state {key}: 'outputs' must be an object")

        result: dict[str, Value] = {}
        for name, output in outputs.items():
            result[name] = self._decode_output(key, name, output)

        logger.debug("Decoded {} output(s) from Terraform state '{}'", len(result), key)
        return result

    @staticmethod
    def _decode_output(key: str, name: str, output: Any) -> Value:
        if not isinstance(output, dict) or "type" not in output:
            raise StateDecodeError(f"failed to decode output {name!r} of {key}: missing type")
        try:
            return parse_type(output["type"]).decode(output.get("value"), name)
        except TypeDecodeError as exc:
            raise StateDecodeError(f"failed to decode output {name!r} of {key}: {exc}") from exc
