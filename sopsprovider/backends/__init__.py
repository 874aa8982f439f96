"""AWS adapters: S3 source objects and secret destinations."""

from sopsprovider.backends.object_store import S3ObjectStore
from sopsprovider.backends.parameter_store import SsmParameterStore
from sopsprovider.backends.secret_store import SecretsManagerStore

__all__ = [
    "S3ObjectStore",
    "SecretsManagerStore",
    "SsmParameterStore",
]
