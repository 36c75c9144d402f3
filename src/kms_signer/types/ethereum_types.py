from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MSG_HASH_LENGTH: int = 32
SIGNATURE_LENGTH: int = 65


class Signature(BaseModel):
    """Represents an Ethereum signature with v, r, s components."""

    v: int = Field(..., description="Recovery identifier")
    r: bytes = Field(..., description="R component of signature")
    s: bytes = Field(..., description="S component of signature")

    @field_validator("r", "s")
    @classmethod
    def validate_length(cls, v: bytes) -> bytes:
        if len(v) != MSG_HASH_LENGTH:
            msg = f"Length must be 32 bytes, got {len(v)} bytes"
            raise ValueError(msg)
        return v

    @field_validator("v")
    @classmethod
    def validate_v(cls, v: int) -> int:
        if v < 0:
            msg = "v must be non-negative"
            raise ValueError(msg)
        return v

    @classmethod
    def from_rsv(cls, r: int, s: int, v: int) -> "Signature":
        """Create signature from integer components."""
        return cls(v=v, r=r.to_bytes(MSG_HASH_LENGTH, "big"), s=s.to_bytes(MSG_HASH_LENGTH, "big"))

    @property
    def vrs(self) -> tuple[int, int, int]:
        """Signature as an eth-account style ``(v, r, s)`` tuple of ints."""
        return self.v, int.from_bytes(self.r, "big"), int.from_bytes(self.s, "big")

    def to_bytes(self) -> bytes:
        return self.r + self.s + bytes([self.v])

    def to_hex(self) -> str:
        """Convert signature to hex string."""
        return "0x" + self.to_bytes().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> "Signature":
        """Create signature from hex string."""
        if hex_str.startswith("0x"):
            hex_str = hex_str[2:]
        sig_bytes = bytes.fromhex(hex_str)
        if len(sig_bytes) != SIGNATURE_LENGTH:
            msg = f"Invalid signature length: {len(sig_bytes)}"
            raise ValueError(msg)
        return cls(v=sig_bytes[64], r=sig_bytes[0:32], s=sig_bytes[32:64])


class Transaction(BaseModel):
    """Represents a legacy (``gas_price``) or EIP-1559 (``max_fee_per_gas``) transaction."""

    model_config = ConfigDict(populate_by_name=True)

    chain_id: int = Field(..., gt=0, description="Chain ID")
    nonce: int = Field(..., ge=0, description="Transaction nonce")
    gas_limit: int = Field(..., gt=0, description="Gas limit")
    to: str | None = Field(None, description="Recipient address, empty for contract creation")
    value: int = Field(0, ge=0, description="Transaction value in Wei")
    data: str = Field("0x", description="Transaction data")
    gas_price: int | None = Field(None, gt=0, description="Gas price in Wei")
    max_fee_per_gas: int | None = Field(None, gt=0, description="Fee cap in Wei")
    max_priority_fee_per_gas: int | None = Field(None, ge=0, description="Priority fee in Wei")
    access_list: list[dict] | None = Field(None, description="EIP-2930 access list")
    from_: str | None = Field(None, alias="from", description="Sender address")

    @field_validator("to", "from_")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not is_address(v):
            msg = "Invalid Ethereum address"
            raise ValueError(msg)
        return to_checksum_address(v)

    @field_validator("data")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        if not v.startswith("0x"):
            v = "0x" + v
        try:
            bytes.fromhex(v[2:])
        except ValueError as error:
            msg = "Invalid hex string"
            raise ValueError(msg) from error
        return v

    @model_validator(mode="after")
    def validate_fees(self) -> "Transaction":
        dynamic = self.max_fee_per_gas is not None or self.max_priority_fee_per_gas is not None
        if self.gas_price is not None and dynamic:
            msg = "gas_price cannot be combined with EIP-1559 fee fields"
            raise ValueError(msg)
        if self.gas_price is None and (self.max_fee_per_gas is None or self.max_priority_fee_per_gas is None):
            msg = "Either gas_price or both max_fee_per_gas and max_priority_fee_per_gas are required"
            raise ValueError(msg)
        return self

    def to_dict(self) -> dict:
        """Convert transaction to dictionary format for eth-account."""
        tx_dict = {
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "gas": self.gas_limit,
            "value": self.value,
            "data": self.data,
        }
        if self.to is not None:
            tx_dict["to"] = self.to
        if self.gas_price is not None:
            tx_dict["gasPrice"] = self.gas_price
        else:
            tx_dict["maxFeePerGas"] = self.max_fee_per_gas
            tx_dict["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        if self.access_list is not None:
            tx_dict["accessList"] = self.access_list
        if self.from_ is not None:
            tx_dict["from"] = self.from_
        return tx_dict

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """
        Create transaction from an eth-account style dictionary.

        Args:
            data: Transaction data dictionary using camelCase keys

        Returns:
            Transaction: A new transaction instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        tx_data = data.copy()

        renames = {
            "chainId": "chain_id",
            "gas": "gas_limit",
            "gasPrice": "gas_price",
            "maxFeePerGas": "max_fee_per_gas",
            "maxPriorityFeePerGas": "max_priority_fee_per_gas",
            "accessList": "access_list",
        }
        for key, field in renames.items():
            if key in tx_data:
                tx_data[field] = tx_data.pop(key)
        tx_data.pop("type", None)

        return cls(**tx_data)
