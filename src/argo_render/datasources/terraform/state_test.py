import json
from pathlib import Path

import pytest

from argo_render.datasources.terraform.fetcher import StateFetcher
from argo_render.datasources.terraform.state import RemoteTerraformState, StateDecodeError

TESTDATA = Path(__file__).parent / "testdata"


class ConstFetcher(StateFetcher):
    def __init__(self, content: bytes) -> None:
        self.content = content

    def fetch(self, key: str) -> bytes:
        return self.content


def make_state(outputs: dict) -> RemoteTerraformState:
    return RemoteTerraformState(ConstFetcher(json.dumps({"version": 4, "outputs": outputs}).encode()))


def test__RemoteTerraformState__get_decodes_state_file() -> None:
    state = RemoteTerraformState(ConstFetcher((TESTDATA / "state.json").read_bytes()))

    assert state.get("it doesn't matter") == {
        "cluster_id": 1,
        "cluster_name": "hoba",
        "k8s_version": "1.33.4",
        "kubeconfig": "kubeconfig_content",
        "kubeconfig_data": {
            "client_certificate": "client_certificate_content",
            "client_key": "client_key_content",
            "cluster_ca_certificate": "client_ca_content",
            "cluster_name": "hoba",
            "endpoint": "https://172.16.12.200:6443",
            "host": "172.16.12.200",
            "port": 6443,
        },
    }


def test__RemoteTerraformState__get_string_number_and_object_outputs() -> None:
    state = make_state(
        {
            "name": {"value": "prod", "type": "string"},
            "replicas": {"value": 3, "type": "number"},
            "database": {
                "value": {"host": "db.internal", "port": 5432, "tls": True},
                "type": ["object", {"host": "string", "port": "number", "tls": "bool"}],
            },
        }
    )

    result = state.get("bucket/prod.tfstate")

    assert result == {
        "name": "prod",
        "replicas": 3,
        "database": {"host": "db.internal", "port": 5432, "tls": True},
    }
    assert isinstance(result, dict)
    assert isinstance(result["name"], str)
    assert isinstance(result["replicas"], int)
    assert isinstance(result["database"], dict)


def test__RemoteTerraformState__get_json_encoded_type_descriptor() -> None:
    state = make_state({"zones": {"value": ["a", "b"], "type": '["list","string"]'}})
    assert state.get("bucket/key") == {"zones": ["a", "b"]}


def test__RemoteTerraformState__get_without_outputs() -> None:
    assert RemoteTerraformState(ConstFetcher(b'{"version": 4}')).get("bucket/key") == {}


def test__RemoteTerraformState__get_fails_as_a_whole() -> None:
    state = make_state(
        {
            "good": {"value": "ok", "type": "string"},
            "bad": {"value": "not-a-number", "type": "number"},
        }
    )
    with pytest.raises(StateDecodeError, match="output 'bad' of bucket/key"):
        state.get("bucket/key")


def test__RemoteTerraformState__get_missing_type() -> None:
    with pytest.raises(StateDecodeError, match="missing type"):
        make_state({"name": {"value": "prod"}}).get("bucket/key")


def test__RemoteTerraformState__get_malformed_document() -> None:
    with pytest.raises(StateDecodeError, match="failed to parse Terraform state bucket/key"):
        RemoteTerraformState(ConstFetcher(b"{not json")).get("bucket/key")
