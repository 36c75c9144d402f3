import asyncio
import logging
import os

import dotenv
from eth_account import Account
from eth_account.messages import encode_defunct
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install

from kms_signer import AwsKmsCredentials, GoogleKmsConfig, KmsAccount, Transaction

# Install rich traceback handler
install()

# Initialize console for pretty printing
console = Console()


def create_account() -> KmsAccount:
    """Build an account for whichever KMS is configured in the environment."""
    if os.getenv("AWS_KEY_ID"):
        console.print("[bold blue]Creating AWS KMS Account[/bold blue]")
        return KmsAccount.from_aws(AwsKmsCredentials.from_env())
    console.print("[bold blue]Creating Google Cloud KMS Account[/bold blue]")
    return KmsAccount.from_google(GoogleKmsConfig.from_env())


async def main():
    dotenv.load_dotenv()
    logging.basicConfig(level=logging.DEBUG, handlers=[RichHandler(console=console)], format="%(message)s")
    logging.getLogger("botocore").setLevel(logging.WARNING)

    try:
        account = create_account()
        address = await account.get_address()
        console.print(f"[green]Account address: {address}[/green]")

        console.print("\n[bold blue]Testing Message Signing[/bold blue]")
        message = "Hello Ethereum!"
        signature = await account.sign_message(message)
        console.print(f"Message signature: {signature.to_hex()}")
        recovered = Account.recover_message(encode_defunct(text=message), vrs=signature.vrs)
        console.print(f"Recovered signer: {recovered}")

        console.print("\n[bold blue]Testing Transaction Signing[/bold blue]")
        tx = Transaction(
            chain_id=int(os.getenv("CHAIN_ID", "1337")),
            nonce=0,
            max_fee_per_gas=20_000_000_000,
            max_priority_fee_per_gas=1_000_000_000,
            gas_limit=21000,
            to="0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
            value=1,
            from_=address,
        )
        signed_tx = await account.sign_transaction(tx)
        console.print(f"Signed transaction: {signed_tx.hex()}")
    except Exception:
        console.print_exception()


if __name__ == "__main__":
    asyncio.run(main())
