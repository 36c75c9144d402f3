"""Cryptographic utilities."""

import logging

from eth_keys import KeyAPI
from eth_keys.exceptions import BadSignature
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_checksum_address

from kms_signer.der import SECP256K1_N, UNCOMPRESSED_POINT_LENGTH, UNCOMPRESSED_POINT_PREFIX, decode_public_key
from kms_signer.exceptions import RecoveryInconsistencyError

logger = logging.getLogger(__name__)

SECP256K1_HALF_N = SECP256K1_N // 2

# Ethereum recovery ids
V_OFFSET = 27
RECOVERY_IDS = (V_OFFSET, V_OFFSET + 1)


def derive_address(point: bytes) -> ChecksumAddress:
    """Derive the Ethereum address of an uncompressed public key point."""
    if len(point) != UNCOMPRESSED_POINT_LENGTH or point[0] != UNCOMPRESSED_POINT_PREFIX:
        msg = "Expected a 65-byte uncompressed public key point"
        raise ValueError(msg)
    return to_checksum_address(keccak(point[1:])[-20:])


def public_key_to_address(der_key: bytes) -> ChecksumAddress:
    """Derive the Ethereum address of a DER-encoded KMS public key."""
    return derive_address(decode_public_key(der_key))


def normalize_signature(r: int, s: int) -> tuple[int, int]:
    """Normalize a signature to its low-s form according to EIP-2."""
    if s > SECP256K1_HALF_N:
        s = SECP256K1_N - s
    return r, s


def recover_address(msg_hash: bytes, v: int, r: int, s: int) -> ChecksumAddress:
    """Recover the signer address for ``v`` in {27, 28}."""
    keys = KeyAPI()
    signature = keys.Signature(vrs=(v - V_OFFSET, r, s))
    return signature.recover_public_key_from_msg_hash(msg_hash).to_checksum_address()


def _matches(msg_hash: bytes, v: int, r: int, s: int, expected_address: str) -> bool:
    try:
        recovered = recover_address(msg_hash, v, r, s)
    except BadSignature:
        return False
    return recovered.lower() == expected_address.lower()


def determine_recovery_id(msg_hash: bytes, r: int, s: int, expected_address: str, strict: bool = False) -> int:
    """
    Find the recovery id that maps ``(r, s)`` back to ``expected_address``.

    A low-s signature has exactly two candidate public keys. Only v = 27 is
    tried; when it does not match, 28 is returned without recovering it
    unless ``strict`` is set.

    Args:
        msg_hash: The 32-byte digest that was signed
        r: Signature r component
        s: Canonical (low-s) signature s component
        expected_address: Address of the key that produced the signature
        strict: Also verify v = 28 and fail when neither candidate matches

    Returns:
        int: 27 or 28

    Raises:
        RecoveryInconsistencyError: In strict mode, when no candidate matches
    """
    first, second = RECOVERY_IDS
    if _matches(msg_hash, first, r, s, expected_address):
        logger.debug("Resolved recovery id %d", first)
        return first

    if strict and not _matches(msg_hash, second, r, s, expected_address):
        logger.warning("Signature does not recover to %s with any recovery id", expected_address)
        msg = f"Signature does not recover to {expected_address}"
        raise RecoveryInconsistencyError(msg)

    logger.debug("Resolved recovery id %d", second)
    return second
