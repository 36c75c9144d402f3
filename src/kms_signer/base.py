from abc import ABC, abstractmethod

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from kms_signer.types.ethereum_types import Signature, Transaction


class BaseAccount(ABC):
    """Base class for KMS-backed Ethereum accounts."""

    @abstractmethod
    async def get_address(self) -> ChecksumAddress:
        """Get the Ethereum address associated with this account."""
        pass

    @abstractmethod
    async def sign_digest(self, digest: bytes) -> Signature:
        """Sign a 32-byte digest using the KMS key."""
        pass

    @abstractmethod
    async def sign_message(self, message: str | bytes) -> Signature:
        """Sign an EIP-191 personal message using the KMS key."""
        pass

    @abstractmethod
    async def sign_typed_data(
        self,
        domain_data: dict | None = None,
        message_types: dict | None = None,
        message_data: dict | None = None,
        full_message: dict | None = None,
    ) -> Signature:
        """Sign EIP-712 structured data using the KMS key."""
        pass

    @abstractmethod
    async def sign_transaction(self, transaction: dict | Transaction) -> HexBytes:
        """Sign an Ethereum transaction using the KMS key."""
        pass
