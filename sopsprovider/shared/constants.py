"""Shared constants used across the provider Lambda functions."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# CloudFormation request types
# ---------------------------------------------------------------------------
REQUEST_CREATE = "Create"
REQUEST_UPDATE = "Update"
REQUEST_DELETE = "Delete"

VALID_REQUEST_TYPES = frozenset({REQUEST_CREATE, REQUEST_UPDATE, REQUEST_DELETE})

# ---------------------------------------------------------------------------
# Physical resource id prefixes
# ---------------------------------------------------------------------------
SECRET_PHYSICAL_ID_PREFIX = "secretdata_"
SSM_PHYSICAL_ID_PREFIX = "ssm_secretdata_"

# ---------------------------------------------------------------------------
# sops invocation
# ---------------------------------------------------------------------------
FILE_TYPE_YAML = "yaml"
FILE_TYPE_JSON = "json"

VALID_DECLARED_FILE_TYPES = frozenset({FILE_TYPE_YAML, FILE_TYPE_JSON})

# Extensions that sops does not accept verbatim as an --input-type
FILE_TYPE_ALIASES = {"yml": FILE_TYPE_YAML}

SOPS_DECRYPT_FLAG = "-d"
SOPS_STDIN_PATH = "/dev/stdin"

# Field holding the file contents when a file was encrypted as a whole
WHOLE_FILE_DATA_KEY = "data"

# ---------------------------------------------------------------------------
# Mapping encodings
# ---------------------------------------------------------------------------
ENCODING_STRING = "string"
ENCODING_JSON = "json"

# ---------------------------------------------------------------------------
# SSM
# ---------------------------------------------------------------------------
SSM_PARAMETER_TYPE = "SecureString"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_SOPS_BINARY = "sops"
DEFAULT_DECRYPT_TIMEOUT_SECONDS = 240.0
DEFAULT_AWS_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_AWS_READ_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"
