from abc import ABC, abstractmethod


class SigningOracle(ABC):
    """Base class for remote services holding a secp256k1 signing key."""

    @abstractmethod
    async def get_public_key(self) -> bytes:
        """Get the DER-encoded SubjectPublicKeyInfo of the signing key."""
        pass

    @abstractmethod
    async def sign_digest(self, digest: bytes) -> bytes | None:
        """Sign a 32-byte digest, returning the DER-encoded signature or None if none was produced."""
        pass
