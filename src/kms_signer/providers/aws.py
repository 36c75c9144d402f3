import asyncio
import logging

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from kms_signer.config import AwsKmsCredentials
from kms_signer.exceptions import KeyNotFoundError, OracleError
from kms_signer.providers.base import SigningOracle

logger = logging.getLogger(__name__)

# ECDSA_SHA_256 is the algorithm KMS pairs with ECC_SECG_P256K1 keys
SIGNING_ALGORITHM = "ECDSA_SHA_256"
MESSAGE_TYPE = "DIGEST"


class AwsKmsOracle(SigningOracle):
    """AWS KMS implementation."""

    def __init__(self, credentials: AwsKmsCredentials, client: BaseClient | None = None):
        self.credentials = credentials
        self.client = client or self._create_client()

    def _create_client(self) -> BaseClient:
        """Create AWS KMS client."""
        session = boto3.session.Session(
            aws_access_key_id=self.credentials.access_key_id,
            aws_secret_access_key=self.credentials.secret_access_key,
            aws_session_token=self.credentials.session_token,
            region_name=self.credentials.region,
        )
        return session.client("kms", endpoint_url=self.credentials.endpoint_url)

    async def get_public_key(self) -> bytes:
        """Get the public key from AWS KMS in DER format."""
        logger.debug("Fetching public key for KMS key %s", self.credentials.key_id)
        try:
            response = await asyncio.to_thread(self.client.get_public_key, KeyId=self.credentials.key_id)
        except (BotoCoreError, ClientError) as e:
            raise self._wrap_error("Failed to get public key", e) from e

        public_key = response.get("PublicKey") if response else None
        if not public_key:
            msg = "No public key in KMS response"
            raise OracleError(msg)
        return bytes(public_key)

    async def sign_digest(self, digest: bytes) -> bytes | None:
        """Sign a digest with the KMS key."""
        logger.debug("Requesting KMS signature from key %s", self.credentials.key_id)
        try:
            response = await asyncio.to_thread(
                self.client.sign,
                KeyId=self.credentials.key_id,
                Message=digest,
                SigningAlgorithm=SIGNING_ALGORITHM,
                MessageType=MESSAGE_TYPE,
            )
        except (BotoCoreError, ClientError) as e:
            raise self._wrap_error("Failed to sign digest", e) from e

        if not response or response.get("Signature") is None:
            return None
        return bytes(response["Signature"])

    @staticmethod
    def _wrap_error(prefix: str, error: Exception) -> OracleError:
        if isinstance(error, ClientError) and error.response.get("Error", {}).get("Code") == "NotFoundException":
            return KeyNotFoundError(f"{prefix}: {error!s}")
        return OracleError(f"{prefix}: {error!s}")
