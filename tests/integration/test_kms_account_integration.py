"""Integration tests against a real AWS KMS key."""
import os

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data

from kms_signer import AwsKmsCredentials, KmsAccount, Transaction

from conftest import TEST_ADDRESS, TEST_TYPED_DATA

# Skip all tests unless a KMS key is configured
pytestmark = pytest.mark.skipif(
    not os.getenv("AWS_KEY_ID", "").strip(),
    reason="Missing required environment variable: AWS_KEY_ID",
)


@pytest.fixture
def kms_account() -> KmsAccount:
    """Create real AWS KMS account."""
    return KmsAccount.from_aws(AwsKmsCredentials.from_env(), strict_recovery=True)


@pytest.mark.asyncio
async def test_account_initialization(kms_account: KmsAccount):
    """Test deriving the address of a real KMS key."""
    address = await kms_account.get_address()
    assert address.startswith("0x")
    assert len(address) == 42
    assert kms_account.address == address


@pytest.mark.asyncio
async def test_message_signing_and_verification(kms_account: KmsAccount):
    """Test signing and verifying messages with real AWS KMS."""
    message = "Hello Ethereum!"
    signature = await kms_account.sign_message(message)

    assert signature.v in (27, 28)
    assert len(signature.r) == 32
    assert len(signature.s) == 32

    recovered_address = Account.recover_message(encode_defunct(text=message), vrs=signature.vrs)
    assert recovered_address == await kms_account.get_address()


@pytest.mark.asyncio
async def test_typed_data_signing(kms_account: KmsAccount):
    signature = await kms_account.sign_typed_data(full_message=TEST_TYPED_DATA)

    recovered_address = Account.recover_message(encode_typed_data(full_message=TEST_TYPED_DATA), vrs=signature.vrs)
    assert recovered_address == await kms_account.get_address()


@pytest.mark.asyncio
async def test_transaction_signing(kms_account: KmsAccount):
    """Test that signed transactions recover to the KMS address."""
    address = await kms_account.get_address()
    tx = Transaction(
        chain_id=1337,
        nonce=0,
        max_fee_per_gas=20_000_000_000,
        max_priority_fee_per_gas=1_000_000_000,
        gas_limit=21000,
        to=TEST_ADDRESS,
        value=1,
        from_=address,
    )

    signed_tx = await kms_account.sign_transaction(tx)
    assert Account.recover_transaction(signed_tx) == address
