"""Run the sops binary to decrypt a file fetched from S3.

The encrypted bytes are piped to ``sops -d ... /dev/stdin`` and the
decrypted document is read back from stdout as JSON.  The process is run
exactly once per call and always bounded by a timeout.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any

from sopsprovider.shared.constants import (
    DEFAULT_DECRYPT_TIMEOUT_SECONDS,
    DEFAULT_SOPS_BINARY,
    FILE_TYPE_ALIASES,
    FILE_TYPE_JSON,
    SOPS_DECRYPT_FLAG,
    SOPS_STDIN_PATH,
)
from sopsprovider.shared.errors import DecodeFailed, DecryptionFailed, DecryptionTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class S3ObjectRef:
    bucket: str
    key: str


@dataclass(frozen=True)
class EncryptedPayload:
    """Raw encrypted file contents plus where they came from."""

    body: bytes
    location: S3ObjectRef
    declared_format: str | None = None


def determine_file_type(key: str, declared_format: str | None, whole_file: bool) -> str:
    """Pick the sops ``--input-type``.

    An explicitly declared format wins, whole files are always JSON, and
    otherwise the extension of the S3 key is used.
    """
    if declared_format:
        return declared_format
    if whole_file:
        return FILE_TYPE_JSON
    extension = key.rsplit(".", 1)[-1]
    return FILE_TYPE_ALIASES.get(extension, extension)


def build_sops_args(file_type: str, kms_key_arn: str | None = None) -> list[str]:
    args = [SOPS_DECRYPT_FLAG, "--input-type", file_type, "--output-type", "json"]
    if kms_key_arn:
        args.extend(["--kms", kms_key_arn])
    args.append(SOPS_STDIN_PATH)
    return args


class Decryptor:
    """Decrypts payloads with a sops binary."""

    def __init__(
        self,
        *,
        binary: str = DEFAULT_SOPS_BINARY,
        timeout_seconds: float = DEFAULT_DECRYPT_TIMEOUT_SECONDS,
    ) -> None:
        self._binary = binary
        self._timeout = timeout_seconds

    @property
    def binary(self) -> str:
        return self._binary

    def decrypt(
        self,
        payload: EncryptedPayload,
        kms_key_arn: str | None = None,
        *,
        whole_file: bool = False,
    ) -> Any:
        """Decrypt ``payload`` and return the parsed document.

        Raises:
            DecryptionFailed: sops exited non-zero or could not be started.
            DecryptionTimeout: sops did not finish in time.
            DecodeFailed: stdout was not valid JSON.
        """
        file_type = determine_file_type(payload.location.key, payload.declared_format, whole_file)
        command = [self._binary, *build_sops_args(file_type, kms_key_arn)]
        logger.info("Running sops command: %s", command)

        stdout = self._run(command, payload.body)

        try:
            return json.loads(stdout)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeFailed("sops output is not valid JSON") from exc

    def _run(self, command: list[str], body: bytes) -> bytes:
        try:
            proc = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise DecryptionFailed(None, str(exc)) from exc

        with proc:
            try:
                stdout, stderr = proc.communicate(input=body, timeout=self._timeout)
            except subprocess.TimeoutExpired as exc:
                proc.kill()
                proc.communicate()
                logger.error("sops timed out after %ss, process killed", self._timeout)
                raise DecryptionTimeout(self._timeout) from exc
            except BaseException:
                # Interrupted: never leave sops running behind us
                proc.kill()
                raise

        stderr_text = stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            logger.error(
                "sops exited with code %d: %s", proc.returncode, stderr_text.strip()
            )
            raise DecryptionFailed(proc.returncode, stderr_text)

        if stderr_text.strip():
            logger.warning("sops exited cleanly, but stderr was not empty: %s", stderr_text.strip())
        else:
            logger.info("sops exited cleanly")
        return stdout
