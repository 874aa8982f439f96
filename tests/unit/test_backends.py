"""Unit tests for the S3, Secrets Manager and SSM adapters."""

from __future__ import annotations

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from sopsprovider.backends import S3ObjectStore, SecretsManagerStore, SsmParameterStore
from sopsprovider.backends.parameter_store import kms_key_id_from_arn
from sopsprovider.shared.config import ProviderConfig
from sopsprovider.shared.errors import FetchError, ParameterWriteError

_REGION = "us-east-1"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", _REGION)


@pytest.fixture()
def config() -> ProviderConfig:
    return ProviderConfig(aws_region=_REGION)


class TestS3ObjectStore:
    @mock_aws
    def test_fetch_returns_payload(self, config: ProviderConfig) -> None:
        s3 = boto3.client("s3", region_name=_REGION)
        s3.create_bucket(Bucket="bucket")
        s3.put_object(Bucket="bucket", Key="secrets.yaml", Body=b"a: ENC[...]")

        payload = S3ObjectStore(config).fetch("bucket", "secrets.yaml", "yaml")

        assert payload.body == b"a: ENC[...]"
        assert payload.location.bucket == "bucket"
        assert payload.location.key == "secrets.yaml"
        assert payload.declared_format == "yaml"

    @mock_aws
    def test_missing_object_raises_fetch_error(self, config: ProviderConfig) -> None:
        boto3.client("s3", region_name=_REGION).create_bucket(Bucket="bucket")

        with pytest.raises(FetchError, match="s3://bucket/missing.yaml"):
            S3ObjectStore(config).fetch("bucket", "missing.yaml")

    @mock_aws
    def test_missing_bucket_raises_fetch_error(self, config: ProviderConfig) -> None:
        with pytest.raises(FetchError):
            S3ObjectStore(config).fetch("nope", "secrets.yaml")


class TestSecretsManagerStore:
    @mock_aws
    def test_put_secret_string_overwrites(self, config: ProviderConfig) -> None:
        sm = boto3.client("secretsmanager", region_name=_REGION)
        arn = sm.create_secret(Name="my/secret", SecretString="old")["ARN"]

        store = SecretsManagerStore(config)
        store.put_secret_string(arn, '{"key":"abc"}')
        store.put_secret_string("my/secret", '{"key":"def"}')

        assert sm.get_secret_value(SecretId=arn)["SecretString"] == '{"key":"def"}'

    @mock_aws
    def test_missing_secret_raises_client_error(
        self, config: ProviderConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        with pytest.raises(ClientError):
            SecretsManagerStore(config).put_secret_string("missing", "value")

        assert not [r for r in caplog.records if r.name == "sopsprovider.backends.secret_store"]


class TestSsmParameterStore:
    @mock_aws
    def test_put_secure_string(self, config: ProviderConfig) -> None:
        store = SsmParameterStore(config)
        store.put_secure_string("/app/password", "first")
        store.put_secure_string("/app/password", "second")

        ssm = boto3.client("ssm", region_name=_REGION)
        param = ssm.get_parameter(Name="/app/password", WithDecryption=True)["Parameter"]
        assert param["Value"] == "second"
        assert param["Type"] == "SecureString"

    def test_key_id_is_derived_from_arn(self, config: ProviderConfig) -> None:
        client = MagicMock()
        store = SsmParameterStore(config, client=client)

        store.put_secure_string("/p", "v", "arn:aws:kms:eu-central-1:111122223333:key/1234-abcd")

        client.put_parameter.assert_called_once_with(
            Name="/p", Value="v", Type="SecureString", Overwrite=True, KeyId="1234-abcd"
        )

    def test_client_error_is_wrapped(self, config: ProviderConfig) -> None:
        client = MagicMock()
        client.put_parameter.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException"}}, "PutParameter"
        )

        with pytest.raises(ParameterWriteError, match="/p"):
            SsmParameterStore(config, client=client).put_secure_string("/p", "v")


class TestKmsKeyIdFromArn:
    @pytest.mark.parametrize(
        ("arn", "expected"),
        [
            ("arn:aws:kms:eu-central-1:111122223333:key/1234", "1234"),
            ("key/123", "123"),
            ("alias-without-slash", None),
            ("", None),
            (None, None),
        ],
    )
    def test_derivation(self, arn, expected) -> None:
        assert kms_key_id_from_arn(arn) == expected
