import asyncio
import logging

from botocore.client import BaseClient
from eth_account import Account
from eth_account._utils.legacy_transactions import (
    encode_transaction,  # noqa: PLC2701
    serializable_unsigned_transaction_from_dict,  # noqa: PLC2701
)
from eth_account.messages import SignableMessage, _hash_eip191_message, encode_defunct, encode_typed_data
from eth_account.typed_transactions import TypedTransaction
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from google.cloud import kms
from hexbytes import HexBytes

from kms_signer.base import BaseAccount
from kms_signer.config import AwsKmsCredentials, GoogleKmsConfig
from kms_signer.der import decode_signature
from kms_signer.exceptions import ConfigurationError, OracleCallFailure, SigningError
from kms_signer.providers.aws import AwsKmsOracle
from kms_signer.providers.base import SigningOracle
from kms_signer.providers.google import GoogleKmsOracle
from kms_signer.types.ethereum_types import MSG_HASH_LENGTH, Signature, Transaction
from kms_signer.utils import V_OFFSET, determine_recovery_id, normalize_signature, public_key_to_address

logger = logging.getLogger(__name__)

# EIP-155
CHAIN_ID_OFFSET = 35


class KmsAccount(BaseAccount):
    """
    Ethereum account whose key lives in a remote KMS.

    The oracle is created once and reused for every request. The address is
    derived from the KMS public key on first use and cached for the lifetime
    of the account.

    Example:
        >>> account = KmsAccount.from_aws(AwsKmsCredentials(key_id="alias/eth-signer"))
        >>> signature = await account.sign_message("Hello Ethereum!")
    """

    def __init__(self, oracle: SigningOracle, strict_recovery: bool = False):
        self._oracle = oracle
        self._strict_recovery = strict_recovery
        self._address: ChecksumAddress | None = None
        self._address_lock = asyncio.Lock()

    @classmethod
    def from_aws(
        cls, credentials: AwsKmsCredentials, client: BaseClient | None = None, strict_recovery: bool = False
    ) -> "KmsAccount":
        """Create account backed by an AWS KMS key."""
        return cls(AwsKmsOracle(credentials, client=client), strict_recovery=strict_recovery)

    @classmethod
    def from_google(
        cls,
        config: GoogleKmsConfig,
        client: kms.KeyManagementServiceClient | None = None,
        strict_recovery: bool = False,
    ) -> "KmsAccount":
        """Create account backed by a Google Cloud KMS key."""
        return cls(GoogleKmsOracle(config, client=client), strict_recovery=strict_recovery)

    @property
    def oracle(self) -> SigningOracle:
        """KMS signing oracle backing this account."""
        return self._oracle

    @property
    def address(self) -> ChecksumAddress | None:
        """Cached address, None until ``get_address`` has run."""
        return self._address

    async def get_address(self) -> ChecksumAddress:
        """Get Ethereum address derived from the KMS public key."""
        if self._address is None:
            async with self._address_lock:
                if self._address is None:
                    public_key = await self._oracle.get_public_key()
                    self._address = public_key_to_address(public_key)
                    logger.debug("Derived address %s from KMS public key", self._address)
        return self._address

    async def sign_digest(self, digest: bytes) -> Signature:
        """
        Sign a message hash using KMS.

        Args:
            digest: 32-byte hash to sign

        Returns:
            Signature: Canonical (low-s) signature with v in {27, 28}

        Raises:
            OracleCallFailure: If KMS returned no signature
            DecodeError: If KMS returned a malformed signature
        """
        digest = bytes(digest)
        if len(digest) != MSG_HASH_LENGTH:
            msg = "Invalid message hash length"
            raise ValueError(msg)

        der_signature = await self._oracle.sign_digest(digest)
        if not der_signature:
            raise OracleCallFailure()

        r, s = normalize_signature(*decode_signature(der_signature))
        address = await self.get_address()
        v = determine_recovery_id(digest, r, s, address, strict=self._strict_recovery)
        return Signature.from_rsv(r, s, v)

    async def sign_message(self, message: str | bytes) -> Signature:
        """
        Sign a message with the KMS key.

        Args:
            message: Text to sign, or raw bytes. Strings are always signed as UTF-8 text,
                even when they start with 0x; pass bytes to sign hex-encoded data.

        Returns:
            Signature: The v, r, s components of the signature

        Example:
            >>> signature = await account.sign_message("Hello Ethereum!")
        """
        if isinstance(message, str):
            signable = encode_defunct(text=message)
        elif isinstance(message, bytes):
            signable = encode_defunct(primitive=message)
        else:
            raise TypeError(f"Unsupported message type: {type(message)}")

        return await self._sign_signable(signable)

    async def sign_typed_data(
        self,
        domain_data: dict | None = None,
        message_types: dict | None = None,
        message_data: dict | None = None,
        full_message: dict | None = None,
    ) -> Signature:
        """Sign EIP-712 typed data, given either as parts or as a full message."""
        signable = encode_typed_data(
            domain_data=domain_data,
            message_types=message_types,
            message_data=message_data,
            full_message=full_message,
        )
        return await self._sign_signable(signable)

    async def _sign_signable(self, signable: SignableMessage) -> Signature:
        return await self.sign_digest(_hash_eip191_message(signable))

    async def sign_transaction(self, transaction: dict | Transaction) -> HexBytes:
        """
        Sign a legacy (EIP-155) or typed transaction.

        Args:
            transaction: Transaction to sign; ``chainId`` is required

        Returns:
            HexBytes: Serialized signed transaction

        Raises:
            ConfigurationError: If the transaction has no chainId
            SigningError: If the recovered sender differs from the ``from`` field
        """
        if isinstance(transaction, Transaction):
            tx_dict = transaction.to_dict()
        else:
            tx_dict = dict(transaction)

        if "chainId" not in tx_dict:
            msg = "chainId must be specified in transaction"
            raise ConfigurationError(msg)

        sender = tx_dict.pop("from", None)
        if tx_dict.get("to"):
            tx_dict["to"] = to_checksum_address(tx_dict["to"])

        unsigned_tx = serializable_unsigned_transaction_from_dict(tx_dict)
        signature = await self.sign_digest(unsigned_tx.hash())

        v, r, s = signature.vrs
        if isinstance(unsigned_tx, TypedTransaction):
            v -= V_OFFSET
        else:
            v = v - V_OFFSET + CHAIN_ID_OFFSET + 2 * tx_dict["chainId"]

        signed_tx = encode_transaction(unsigned_tx, (v, r, s))

        if sender and Account.recover_transaction(signed_tx).lower() != sender.lower():
            msg = "Recovered signer doesn't match sender!"
            raise SigningError(msg)

        return HexBytes(signed_tx)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self._address})"
