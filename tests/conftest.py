import asyncio
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.util import sigencode_der
from eth_keys import keys
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from kms_signer.accounts.kms_account import KmsAccount
from kms_signer.der import SECP256K1_N
from kms_signer.providers.base import SigningOracle

# DER public key of a KMS secp256k1 key and the address it maps to
KMS_PUBLIC_KEY_DER = bytes.fromhex(
    "3056301006072a8648ce3d020106052b8104000a03420004"
    "f2de8ae7a9f594fb0d399abfb58639f43fb80960a1ed7c6e257c11e764d4759e"
    "1773a2c7ec7b913bec5d0e3a12bd7acd199f62e86de3f83b35bf6749fc1144ba"
)
KMS_ADDRESS = "0xe94e130546485b928c9c9b9a5e69eb787172952e"

# DER signature returned by KMS, with a high s value
KMS_SIGNATURE_DER = bytes.fromhex(
    "30450220"
    "3f25afdb7ed67094101cd71109261886db9abbf1ba20cc53aec20ba01c2e6baa"  # r
    "022100"
    "ab0de6d40f8960c252fc6f21e35e8369126fb19033f10953c42a61766635df82"  # s
)
KMS_SIGNATURE_R = int("3f25afdb7ed67094101cd71109261886db9abbf1ba20cc53aec20ba01c2e6baa", 16)
KMS_SIGNATURE_S_LOW = int("54f2192bf0769f3dad0390de1ca17c95a83f2b567b5796e7fba7fd166a0061bf", 16)

# Hardhat's first development key
TEST_PRIVATE_KEY = bytes.fromhex("ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80")
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_ADDRESS = "0xa5d3241a1591061f2a4bb69ca0215f66520e67cf"

TEST_MESSAGE = "Hello Ethereum!"

TEST_TYPED_DATA = {
    "types": {
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
        ],
        "Person": [
            {"name": "name", "type": "string"},
            {"name": "wallet", "type": "address"},
        ],
        "Mail": [
            {"name": "from", "type": "Person"},
            {"name": "to", "type": "Person"},
            {"name": "contents", "type": "string"},
        ],
    },
    "primaryType": "Mail",
    "domain": {
        "name": "Ether Mail",
        "version": "1",
        "chainId": 1,
        "verifyingContract": "0xCcCCccccCCCCcCCCCCCcCcCccCcCCCcCcccccccC",
    },
    "message": {
        "from": {"name": "Cow", "wallet": "0xCD2a3d9F938E13CD947Ec05AbC7FE734Df8DD826"},
        "to": {"name": "Bob", "wallet": "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB"},
        "contents": "Hello, Bob!",
    },
}


class LocalKeyOracle(SigningOracle):
    """In-process oracle producing real KMS-style DER output from a local key."""

    def __init__(self, private_key: bytes = TEST_PRIVATE_KEY, high_s: bool = False, public_key_der: bytes | None = None):
        self.private_key = keys.PrivateKey(private_key)
        self.high_s = high_s
        self.public_key_der = public_key_der
        self.public_key_calls = 0
        self.sign_calls = 0

    async def get_public_key(self) -> bytes:
        self.public_key_calls += 1
        await asyncio.sleep(0)
        if self.public_key_der is not None:
            return self.public_key_der
        verifying_key = VerifyingKey.from_string(self.private_key.public_key.to_bytes(), curve=SECP256k1)
        return verifying_key.to_der()

    async def sign_digest(self, digest: bytes) -> bytes | None:
        self.sign_calls += 1
        signature = self.private_key.sign_msg_hash(digest)
        s = SECP256K1_N - signature.s if self.high_s else signature.s
        return sigencode_der(signature.r, s, SECP256K1_N)


class StaticOracle(SigningOracle):
    """Oracle returning canned KMS responses."""

    def __init__(self, public_key: bytes = KMS_PUBLIC_KEY_DER, signature: bytes | None = KMS_SIGNATURE_DER):
        self.public_key = public_key
        self.signature = signature
        self.public_key_calls = 0
        self.sign_calls = 0

    async def get_public_key(self) -> bytes:
        self.public_key_calls += 1
        return self.public_key

    async def sign_digest(self, digest: bytes) -> bytes | None:
        self.sign_calls += 1
        return self.signature


@pytest.fixture
def test_address() -> ChecksumAddress:
    """Get the address of the local test key."""
    return to_checksum_address(TEST_ADDRESS)


@pytest.fixture
def kms_address() -> ChecksumAddress:
    """Get the address of the canned KMS public key."""
    return to_checksum_address(KMS_ADDRESS)


@pytest.fixture
def local_oracle() -> LocalKeyOracle:
    return LocalKeyOracle()


@pytest.fixture
def static_oracle() -> StaticOracle:
    return StaticOracle()


@pytest.fixture
def local_account(local_oracle: LocalKeyOracle) -> KmsAccount:
    """Create an account backed by the local key oracle."""
    return KmsAccount(local_oracle)


@pytest.fixture
def static_account(static_oracle: StaticOracle) -> KmsAccount:
    """Create an account backed by canned KMS responses."""
    return KmsAccount(static_oracle)


@pytest.fixture
def legacy_transaction_dict() -> Dict[str, Any]:
    """Create a legacy test transaction dictionary."""
    return {
        "chainId": 1337,
        "nonce": 0,
        "gasPrice": 300000000000,
        "gas": 21000,
        "to": OTHER_ADDRESS,
        "value": 1000000000000,
        "data": "0x",
    }


@pytest.fixture
def dynamic_fee_transaction_dict() -> Dict[str, Any]:
    """Create an EIP-1559 test transaction dictionary."""
    return {
        "chainId": 1,
        "nonce": 69,
        "maxFeePerGas": 20000000000,
        "maxPriorityFeePerGas": 3000000000,
        "gas": 21000,
        "to": TEST_ADDRESS,
        "value": 0,
        "data": "0x",
        "accessList": [],
    }


@pytest.fixture
def mock_aws_kms_client() -> MagicMock:
    """Create a mock boto3 KMS client."""
    mock_client = MagicMock()
    mock_client.get_public_key.return_value = {"KeyId": "test-key", "PublicKey": KMS_PUBLIC_KEY_DER}
    mock_client.sign.return_value = {"KeyId": "test-key", "Signature": KMS_SIGNATURE_DER}
    return mock_client
