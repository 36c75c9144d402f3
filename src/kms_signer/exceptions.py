KMS_CALL_FAILED = "KMS call failed"


class KmsSignerError(Exception):
    """Base exception for KMS signer operations."""

    pass


class ConfigurationError(KmsSignerError):
    """Invalid signer or transaction configuration."""

    pass


class DecodeError(KmsSignerError):
    """Malformed DER data returned by the signing oracle."""

    pass


class SigningError(KmsSignerError):
    """Error during signature operations."""

    pass


class RecoveryInconsistencyError(SigningError):
    """Neither recovery id reproduces the expected address."""

    pass


class OracleError(KmsSignerError):
    """The signing oracle was unreachable or rejected the request."""

    pass


class KeyNotFoundError(OracleError):
    """Key not found in KMS."""

    pass


class OracleCallFailure(OracleError):
    """The sign request returned no signature payload."""

    def __init__(self, msg: str = KMS_CALL_FAILED):
        super().__init__(msg)
