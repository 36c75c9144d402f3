from kms_signer.accounts.kms_account import KmsAccount
from kms_signer.config import AwsKmsCredentials, GoogleKmsConfig
from kms_signer.exceptions import (
    ConfigurationError,
    DecodeError,
    KeyNotFoundError,
    KmsSignerError,
    OracleCallFailure,
    OracleError,
    RecoveryInconsistencyError,
    SigningError,
)
from kms_signer.providers.aws import AwsKmsOracle
from kms_signer.providers.base import SigningOracle
from kms_signer.providers.google import GoogleKmsOracle
from kms_signer.types.ethereum_types import Signature, Transaction

__all__ = [
    "AwsKmsCredentials",
    "AwsKmsOracle",
    "ConfigurationError",
    "DecodeError",
    "GoogleKmsConfig",
    "GoogleKmsOracle",
    "KeyNotFoundError",
    "KmsAccount",
    "KmsSignerError",
    "OracleCallFailure",
    "OracleError",
    "RecoveryInconsistencyError",
    "Signature",
    "SigningError",
    "SigningOracle",
    "Transaction",
]
