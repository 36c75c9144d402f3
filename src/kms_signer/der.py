"""
DER decoding of KMS public keys and ECDSA signatures.

KMS services hand back a SubjectPublicKeyInfo (RFC 5480) for the key and an
ECDSA-Sig-Value (RFC 3279) for every signature:

    SubjectPublicKeyInfo ::= SEQUENCE {
        algorithm SEQUENCE { id-ecPublicKey OID, secp256k1 OID },
        subjectPublicKey BIT STRING }

    ECDSA-Sig-Value ::= SEQUENCE { r INTEGER, s INTEGER }

The ASN.1 primitives come from ``ecdsa.der``, which rejects negative integers
and integers padded with more than the single zero byte needed to keep them
positive.
"""

from ecdsa import der

from kms_signer.exceptions import DecodeError

# secp256k1 curve order
SECP256K1_N = int("fffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141", 16)

OID_EC_PUBLIC_KEY = (1, 2, 840, 10045, 2, 1)
OID_SECP256K1 = (1, 3, 132, 0, 10)

UNCOMPRESSED_POINT_PREFIX = 0x04
UNCOMPRESSED_POINT_LENGTH = 65


def decode_public_key(der_key: bytes) -> bytes:
    """
    Decode a DER SubjectPublicKeyInfo holding a secp256k1 key.

    Args:
        der_key: DER-encoded public key as returned by the KMS

    Returns:
        bytes: The 65-byte uncompressed point (``0x04 || X || Y``)

    Raises:
        DecodeError: If the structure, algorithm or point encoding is invalid
    """
    try:
        body, rest = der.remove_sequence(bytes(der_key))
        _ensure_consumed(rest, "public key")

        algorithm, point_data = der.remove_sequence(body)
        algorithm_oid, algorithm = der.remove_object(algorithm)
        curve_oid, algorithm = der.remove_object(algorithm)
        _ensure_consumed(algorithm, "algorithm identifier")

        point, point_data = der.remove_bitstring(point_data, expect_unused=0)
        _ensure_consumed(point_data, "public key body")
    except der.UnexpectedDER as error:
        msg = f"Invalid DER public key: {error}"
        raise DecodeError(msg) from error

    if algorithm_oid != OID_EC_PUBLIC_KEY:
        msg = f"Unsupported key algorithm: {'.'.join(map(str, algorithm_oid))}"
        raise DecodeError(msg)
    if curve_oid != OID_SECP256K1:
        msg = f"Unsupported curve: {'.'.join(map(str, curve_oid))}"
        raise DecodeError(msg)
    if len(point) != UNCOMPRESSED_POINT_LENGTH or point[0] != UNCOMPRESSED_POINT_PREFIX:
        msg = "Public key is not an uncompressed secp256k1 point"
        raise DecodeError(msg)

    return point


def decode_signature(der_sig: bytes) -> tuple[int, int]:
    """
    Decode a DER ECDSA-Sig-Value into its ``(r, s)`` integers.

    Raises:
        DecodeError: If the encoding is malformed or a component is outside ``[1, N-1]``
    """
    try:
        body, rest = der.remove_sequence(bytes(der_sig))
        _ensure_consumed(rest, "signature")

        r, body = der.remove_integer(body)
        s, body = der.remove_integer(body)
        _ensure_consumed(body, "signature body")
    except der.UnexpectedDER as error:
        msg = f"Invalid DER signature: {error}"
        raise DecodeError(msg) from error

    for name, value in (("r", r), ("s", s)):
        if not 0 < value < SECP256K1_N:
            msg = f"Signature component {name} is out of range"
            raise DecodeError(msg)

    return r, s


def pem_to_der(pem: str | bytes) -> bytes:
    """Unwrap a PEM public key into DER bytes."""
    try:
        return der.unpem(pem)
    except (der.UnexpectedDER, ValueError) as error:
        msg = f"Invalid PEM public key: {error}"
        raise DecodeError(msg) from error


def _ensure_consumed(rest: bytes, what: str) -> None:
    if rest:
        msg = f"Unexpected trailing data after {what}"
        raise der.UnexpectedDER(msg)
