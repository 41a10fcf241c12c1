from typing import Annotated
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from resolver.entities import (
    AccountField,
    AccountId,
    AccountQueryResult,
    TransactionField,
    TransactionId,
    TransactionQueryResult,
)
from resolver.filters import TransactionFilter

AccountIdInput = Annotated[
    AccountId,
    BeforeValidator(lambda v: {"name_or_address": v} if isinstance(v, str) else v)
]
TransactionIdInput = Annotated[
    TransactionId,
    BeforeValidator(lambda v: {"hash": v} if isinstance(v, str) else v)
]


class AccountQueryRequest(BaseModel):
    """
    Request schema for an account query.

    Attributes
    ----------
    ids : list[AccountId]
        Addresses or ENS names
    fields : list[AccountField]
        Requested fields
    chains : list[str]
        Chain names or RPC URLs
    """
    ids: list[AccountIdInput] = Field(..., min_length=1, description="Addresses or ENS names")
    fields: list[AccountField] = Field(..., min_length=1, description="Requested fields")
    chains: list[str] = Field(
        default=["ethereum"],
        min_length=1,
        description="Chain names or RPC URLs"
    )

    model_config = ConfigDict(from_attributes=True)


class AccountQueryResponse(BaseModel):
    """
    Response schema for an account query.

    Attributes
    ----------
    results : list[AccountQueryResult]
        Rows, chain by chain
    total : int
        Number of rows
    """
    results: list[AccountQueryResult]
    total: int

    model_config = ConfigDict(from_attributes=True)


class TransactionQueryRequest(BaseModel):
    """
    Request schema for a transaction query.

    Attributes
    ----------
    ids : list[TransactionId] | None
        Transaction hashes
    filters : list[TransactionFilter]
        Block filter and field predicates
    fields : list[TransactionField]
        Requested fields
    chains : list[str]
        Chain names or RPC URLs
    """
    ids: list[TransactionIdInput] | None = Field(default=None, description="Transaction hashes")
    filters: list[TransactionFilter] = Field(default=[], description="Block filter and field predicates")
    fields: list[TransactionField] = Field(..., min_length=1, description="Requested fields")
    chains: list[str] = Field(
        default=["ethereum"],
        min_length=1,
        description="Chain names or RPC URLs"
    )

    model_config = ConfigDict(from_attributes=True)


class TransactionQueryResponse(BaseModel):
    """
    Response schema for a transaction query.

    Attributes
    ----------
    results : list[TransactionQueryResult]
        Rows, chain by chain
    total : int
        Number of rows
    """
    results: list[TransactionQueryResult]
    total: int

    model_config = ConfigDict(from_attributes=True)
