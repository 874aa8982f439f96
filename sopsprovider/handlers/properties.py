"""Validation models for custom-resource ``ResourceProperties``.

CloudFormation stringifies every property value, so booleans may arrive as
``"true"``/``"false"`` and ``Mappings`` arrives as a JSON string.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sopsprovider.shared.config import normalise_boolean
from sopsprovider.shared.constants import VALID_DECLARED_FILE_TYPES
from sopsprovider.shared.errors import ConfigurationError
from sopsprovider.sops.mapper import MappingEntry, parse_mappings

PropertiesT = TypeVar("PropertiesT", bound=BaseModel)


class SourceFileProperties(BaseModel):
    """Location and format of the encrypted file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kms_key_arn: str | None = Field(None, alias="KMSKeyArn")
    s3_bucket: str = Field(..., alias="S3Bucket", min_length=1)
    s3_path: str = Field(..., alias="S3Path", min_length=1)
    file_type: str | None = Field(None, alias="FileType")
    # Only present so that a changed file triggers an Update
    source_hash: str | None = Field(None, alias="SourceHash")

    @field_validator("kms_key_arn", "file_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("file_type")
    @classmethod
    def _check_file_type(cls, value: str | None) -> str | None:
        if value is not None and value not in VALID_DECLARED_FILE_TYPES:
            raise ValueError(
                f"Invalid FileType '{value}'. Must be one of: {sorted(VALID_DECLARED_FILE_TYPES)}"
            )
        return value


class SecretsManagerProperties(SourceFileProperties):
    """Properties of ``Custom::SopsSecretsManager``."""

    secret_arn: str | None = Field(None, alias="SecretArn")
    secret_name: str | None = Field(None, alias="SecretName")
    mappings: str | dict[str, Any] | None = Field(None, alias="Mappings")
    whole_file: bool = Field(False, alias="WholeFile")

    @field_validator("secret_arn", "secret_name", mode="before")
    @classmethod
    def _blank_target_to_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("whole_file", mode="before")
    @classmethod
    def _normalise_whole_file(cls, value: Any) -> bool:
        if value is None:
            return False
        return normalise_boolean(value)

    @model_validator(mode="after")
    def _check_exclusive_options(self) -> "SecretsManagerProperties":
        if self.secret_arn and self.secret_name:
            raise ValueError("Cannot set both SecretArn and SecretName")
        if not self.secret_arn and not self.secret_name:
            raise ValueError("Must set one of SecretArn or SecretName")

        entries = parse_mappings(self.mappings)
        if entries and self.whole_file:
            raise ValueError("Cannot set Mappings and set WholeFile to true")
        if not entries and not self.whole_file:
            raise ValueError("Must set Mappings or set WholeFile to true")
        return self

    @property
    def secret_id(self) -> str:
        """ARN or name of the target secret, whichever was given."""
        return self.secret_arn or self.secret_name or ""

    @property
    def mapping_entries(self) -> dict[str, MappingEntry]:
        return parse_mappings(self.mappings)


class SsmParameterProperties(SourceFileProperties):
    """Properties of ``Custom::SopsSSMParameter``."""

    sops_path: list[str] = Field(..., alias="SopsPath", min_length=1)
    parameter_name: str = Field(..., alias="SopsSSMParameter", min_length=1)


def parse_properties(model: type[PropertiesT], raw: dict[str, Any]) -> PropertiesT:
    """Validate ``raw`` against ``model``.

    Raises:
        ConfigurationError: If validation fails.
    """
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'properties'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid resource properties: {messages}") from exc
