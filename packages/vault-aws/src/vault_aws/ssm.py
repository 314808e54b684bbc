"""
SSM Parameter Store backend for secret material.

PutParameter with Overwrite=False is the compare-and-set that keeps a
second bootstrap from replacing recorded key material: SSM rejects the
write with ParameterAlreadyExists, surfaced as SecretAlreadyExistsError.
"""

from dataclasses import dataclass
from typing import Any

import boto3
from botocore.exceptions import ClientError

from vault_aws.aws import BOTO_CONFIG, error_code, run_sync
from vault_protocols import SecretAlreadyExistsError

SECURE_STRING = "SecureString"
STRING = "String"


@dataclass
class ParameterStore:
    """
    SecretStoreProtocol implementation backed by SSM Parameter Store.

    Values are stored as SecureString: with the given key when one is
    passed, with the account's AWS-managed key otherwise. Set
    secure_by_default=False to store unencrypted String parameters when no
    key is given.

    Attributes:
        ssm: boto3 "ssm" client.
        secure_by_default: Encrypt values written without an explicit key.
    """

    ssm: Any
    secure_by_default: bool = True

    @classmethod
    def from_session(cls, session: boto3.Session) -> "ParameterStore":
        return cls(ssm=session.client("ssm", config=BOTO_CONFIG))

    async def put(
        self,
        name: str,
        value: str,
        overwrite: bool = False,
        encryption_key: str | None = None,
        description: str = "",
    ) -> int:
        kwargs: dict[str, Any] = {
            "Name": name,
            "Value": value,
            "Overwrite": overwrite,
        }
        if encryption_key:
            kwargs["Type"] = SECURE_STRING
            kwargs["KeyId"] = encryption_key
        else:
            kwargs["Type"] = SECURE_STRING if self.secure_by_default else STRING
        if description:
            kwargs["Description"] = description

        try:
            response = await run_sync(self.ssm.put_parameter, **kwargs)
        except ClientError as e:
            if error_code(e) == "ParameterAlreadyExists":
                raise SecretAlreadyExistsError(name) from e
            raise
        return int(response["Version"])

    async def get(self, name: str) -> tuple[str, int]:
        response = await run_sync(
            self.ssm.get_parameter, Name=name, WithDecryption=True
        )
        parameter = response["Parameter"]
        return parameter["Value"], int(parameter["Version"])
