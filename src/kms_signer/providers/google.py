import asyncio
import logging

from google.api_core import exceptions as google_exceptions
from google.cloud import kms

from kms_signer.config import GoogleKmsConfig
from kms_signer.der import pem_to_der
from kms_signer.exceptions import KeyNotFoundError, OracleError
from kms_signer.providers.base import SigningOracle

logger = logging.getLogger(__name__)


class GoogleKmsOracle(SigningOracle):
    """Google Cloud KMS implementation."""

    def __init__(self, config: GoogleKmsConfig, client: kms.KeyManagementServiceClient | None = None):
        self.config = config
        self.client = client or self._create_client()
        self.key_path = config.key_version_path

    def _create_client(self) -> kms.KeyManagementServiceClient:
        """Create Google Cloud KMS client."""
        if self.config.service_account_path:
            return kms.KeyManagementServiceClient.from_service_account_json(self.config.service_account_path)
        return kms.KeyManagementServiceClient()

    async def get_public_key(self) -> bytes:
        """Get the public key from Google Cloud KMS in DER format."""
        logger.debug("Fetching public key for %s", self.key_path)
        try:
            response = await asyncio.to_thread(self.client.get_public_key, request={"name": self.key_path})
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap_error("Failed to get public key", e) from e

        if not response or not response.pem:
            msg = "No PEM data in response"
            raise OracleError(msg)
        return pem_to_der(response.pem)

    async def sign_digest(self, digest: bytes) -> bytes | None:
        """Sign a digest with the Cloud KMS key."""
        logger.debug("Requesting KMS signature from %s", self.key_path)
        try:
            response = await asyncio.to_thread(
                self.client.asymmetric_sign,
                request={"name": self.key_path, "digest": {"sha256": digest}},
            )
        except google_exceptions.GoogleAPIError as e:
            raise self._wrap_error("Failed to sign digest", e) from e

        if not response or not response.signature:
            return None
        return bytes(response.signature)

    @staticmethod
    def _wrap_error(prefix: str, error: Exception) -> OracleError:
        if isinstance(error, google_exceptions.NotFound):
            return KeyNotFoundError(f"{prefix}: {error!s}")
        return OracleError(f"{prefix}: {error!s}")
