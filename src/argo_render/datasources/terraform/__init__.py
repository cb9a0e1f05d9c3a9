from argo_render.datasources.terraform.fetcher import (
    CachingStateFetcher,
    S3StateFetcher,
    StateFetcher,
    StateFetchError,
)
from argo_render.datasources.terraform.state import RemoteTerraformState, StateDecodeError

__all__ = [
    "CachingStateFetcher",
    "RemoteTerraformState",
    "S3StateFetcher",
    "StateDecodeError",
    "StateFetchError",
    "StateFetcher",
    "new_s3_datasource",
]


def new_s3_datasource() -> RemoteTerraformState:
    """
    Create the Terraform datasource used for a render job: S3 as the backend, with a per-job cache in front of it.
    """

    return RemoteTerraformState(CachingStateFetcher(S3StateFetcher.from_environment()))
