import re
from enum import Enum
from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

from resolver.chains import Chain

HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")

BlockTag = Literal["latest", "earliest", "pending", "safe", "finalized"]
BlockNumberOrTag = Union[Annotated[int, Field(ge=0)], BlockTag]


class BlockRange(BaseModel):
    """
    Block number range, inclusive on both ends.

    Attributes
    ----------
    start : BlockNumberOrTag
        First block
    end : BlockNumberOrTag | None
        Last block; when omitted the range holds only ``start``
    """
    start: BlockNumberOrTag
    end: BlockNumberOrTag | None = None

    model_config = ConfigDict(frozen=True)


BlockId = Union[BlockNumberOrTag, BlockRange]


class NameOrAddress(BaseModel):
    """
    Raw address or a human-readable (ENS) name.

    Addresses are stored checksummed; anything not starting with ``0x`` is a name.

    Attributes
    ----------
    value : str
        Address or name
    """
    value: str

    model_config = ConfigDict(frozen=True)

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name or address must not be empty")
        if v.startswith("0x"):
            if not Web3.is_address(v.lower()):
                raise ValueError("Invalid Ethereum address format")
            return Web3.to_checksum_address(v.lower())
        return v

    @property
    def is_address(self) -> bool:
        return self.value.startswith("0x")

    @property
    def is_name(self) -> bool:
        return not self.is_address

    def __str__(self) -> str:
        return self.value


class AccountId(BaseModel):
    """Account entity identifier."""
    kind: Literal["account"] = "account"
    name_or_address: NameOrAddress

    model_config = ConfigDict(frozen=True)

    @field_validator("name_or_address", mode="before")
    @classmethod
    def wrap_string(cls, v):
        return {"value": v} if isinstance(v, str) else v

    def __str__(self) -> str:
        return str(self.name_or_address)


class TransactionId(BaseModel):
    """Transaction entity identifier."""
    kind: Literal["transaction"] = "transaction"
    hash: str

    model_config = ConfigDict(frozen=True)

    @field_validator("hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        if not HASH_RE.match(v):
            raise ValueError("Invalid transaction hash format")
        return v.lower()

    def __str__(self) -> str:
        return self.hash


class BlockEntityId(BaseModel):
    """Block entity identifier."""
    kind: Literal["block"] = "block"
    block_id: BlockId

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if isinstance(self.block_id, BlockRange):
            return f"{self.block_id.start}:{self.block_id.end}"
        return str(self.block_id)


EntityId = Annotated[
    Union[AccountId, TransactionId, BlockEntityId],
    Field(discriminator="kind")
]


class AccountField(str, Enum):
    """Columns that can be requested for an account."""
    ADDRESS = "address"
    NONCE = "nonce"
    BALANCE = "balance"
    CODE = "code"

    @classmethod
    def all_variants(cls) -> list["AccountField"]:
        return list(cls)


class TransactionField(str, Enum):
    """Columns that can be requested for a transaction."""
    TRANSACTION_TYPE = "type"
    HASH = "hash"
    FROM = "from"
    TO = "to"
    DATA = "data"
    VALUE = "value"
    GAS_PRICE = "gas_price"
    GAS = "gas"
    STATUS = "status"
    CHAIN_ID = "chain_id"
    V = "v"
    R = "r"
    S = "s"
    MAX_FEE_PER_BLOB_GAS = "max_fee_per_blob_gas"
    MAX_FEE_PER_GAS = "max_fee_per_gas"
    MAX_PRIORITY_FEE_PER_GAS = "max_priority_fee_per_gas"
    Y_PARITY = "y_parity"
    CHAIN = "chain"

    @property
    def attribute(self) -> str:
        """Attribute name on ``TransactionQueryResult``."""
        return _TRANSACTION_ATTRIBUTES.get(self, self.value)

    @classmethod
    def all_variants(cls) -> list["TransactionField"]:
        return list(cls)


_TRANSACTION_ATTRIBUTES = {
    TransactionField.TRANSACTION_TYPE: "transaction_type",
    TransactionField.FROM: "from_",
}


class AccountQueryResult(BaseModel):
    """
    Account row. Only requested fields are set.

    Attributes
    ----------
    address : str | None
        Checksummed address
    nonce : int | None
        Transaction count
    balance : int | None
        Balance in Wei
    code : str | None
        Deployed bytecode as hex
    """
    address: str | None = None
    nonce: int | None = None
    balance: int | None = None
    code: str | None = None

    model_config = ConfigDict(from_attributes=True)


class TransactionQueryResult(BaseModel):
    """
    Transaction row. Only requested fields are set.

    A requested field may still hold None (``to`` of a contract creation,
    ``status`` before the receipt exists); ``model_fields_set`` tells the two apart.
    """
    transaction_type: int | None = Field(default=None, alias="type")
    hash: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    data: str | None = None
    value: int | None = None
    gas_price: int | None = None
    gas: int | None = None
    status: bool | None = None
    chain_id: int | None = None
    v: int | None = None
    r: str | None = None
    s: str | None = None
    max_fee_per_blob_gas: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    y_parity: bool | None = None
    chain: Chain | None = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
