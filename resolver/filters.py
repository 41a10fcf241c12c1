import operator
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator
from web3 import Web3

from resolver.chains import Chain
from resolver.entities import (
    BlockId,
    EntityId,
    TransactionField,
    TransactionQueryResult,
)


class FilterOperator(str, Enum):
    """Comparison operators usable in a field predicate."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"


_OPERATORS: dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.EQ: operator.eq,
    FilterOperator.NEQ: operator.ne,
    FilterOperator.GT: operator.gt,
    FilterOperator.GTE: operator.ge,
    FilterOperator.LT: operator.lt,
    FilterOperator.LTE: operator.le,
}

EQUALITY_OPERATORS = {FilterOperator.EQ, FilterOperator.NEQ}

NUMERIC_FIELDS = {
    TransactionField.TRANSACTION_TYPE,
    TransactionField.VALUE,
    TransactionField.GAS_PRICE,
    TransactionField.GAS,
    TransactionField.CHAIN_ID,
    TransactionField.V,
    TransactionField.MAX_FEE_PER_BLOB_GAS,
    TransactionField.MAX_FEE_PER_GAS,
    TransactionField.MAX_PRIORITY_FEE_PER_GAS,
}
ADDRESS_FIELDS = {TransactionField.FROM, TransactionField.TO}
HEX_FIELDS = {
    TransactionField.HASH,
    TransactionField.DATA,
    TransactionField.R,
    TransactionField.S,
}
BOOL_FIELDS = {TransactionField.STATUS, TransactionField.Y_PARITY}


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Expected an integer, got {value!r}")
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"Expected a boolean, got {value!r}")


def _to_address(value: Any) -> str:
    if not isinstance(value, str) or not Web3.is_address(value.lower()):
        raise ValueError(f"Invalid Ethereum address {value!r}")
    return Web3.to_checksum_address(value.lower())


def _to_hex(value: Any) -> str:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"Expected a 0x-prefixed hex string, got {value!r}")
    return value.lower()


class FieldFilter(BaseModel):
    """
    Predicate over one projected transaction field.

    Numeric fields accept every operator, all other fields only ``eq`` and
    ``neq``. The value is normalized to the type the field holds.

    Attributes
    ----------
    field : TransactionField
        Field the predicate reads
    operator : FilterOperator
        Comparison to apply
    value : Any
        Right-hand side of the comparison
    """
    kind: Literal["field"] = "field"
    field: TransactionField
    operator: FilterOperator = FilterOperator.EQ
    value: Any

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def normalize_value(self) -> "FieldFilter":
        if self.field not in NUMERIC_FIELDS and self.operator not in EQUALITY_OPERATORS:
            raise ValueError(f"Field '{self.field.value}' supports only eq/neq")

        if self.field in NUMERIC_FIELDS:
            normalized = _to_int(self.value)
        elif self.field in ADDRESS_FIELDS:
            normalized = _to_address(self.value)
        elif self.field in HEX_FIELDS:
            normalized = _to_hex(self.value)
        elif self.field in BOOL_FIELDS:
            normalized = _to_bool(self.value)
        else:
            normalized = Chain(self.value)

        object.__setattr__(self, "value", normalized)
        return self

    def matches(self, result: TransactionQueryResult) -> bool:
        """
        Evaluate the predicate against a projected record.

        Parameters
        ----------
        result : TransactionQueryResult
            Record holding at least ``self.field``

        Returns
        -------
        bool
            False when the field is null, the comparison result otherwise
        """
        actual = getattr(result, self.field.attribute)
        if actual is None:
            return False
        if self.field in HEX_FIELDS:
            actual = actual.lower()
        return _OPERATORS[self.operator](actual, self.value)


class BlockIdFilter(BaseModel):
    """Selects the blocks whose transactions are scanned."""
    kind: Literal["block_id"] = "block_id"
    block_id: BlockId

    model_config = ConfigDict(frozen=True)


TransactionFilter = Annotated[
    Union[BlockIdFilter, FieldFilter],
    Field(discriminator="kind")
]


class TransactionQuery(BaseModel):
    """
    Transaction entity expression.

    Attributes
    ----------
    ids : list[EntityId] | None
        Explicit transaction ids
    filters : list[TransactionFilter]
        Block filter and field predicates
    fields : list[TransactionField]
        Requested output columns
    """
    ids: list[EntityId] | None = None
    filters: list[TransactionFilter] = []
    fields: list[TransactionField]

    model_config = ConfigDict(frozen=True)

    def has_ids(self) -> bool:
        return bool(self.ids)

    def has_block_filter(self) -> bool:
        return self.get_block_id_filter() is not None

    def get_block_id_filter(self) -> BlockId | None:
        """Block id of the first block filter, if any."""
        for f in self.filters:
            if isinstance(f, BlockIdFilter):
                return f.block_id
        return None

    @property
    def field_filters(self) -> list[FieldFilter]:
        return [f for f in self.filters if isinstance(f, FieldFilter)]

    def projected_fields(self) -> list[TransactionField]:
        """Requested fields followed by fields only the predicates need."""
        projected = list(dict.fromkeys(self.fields))
        for f in self.field_filters:
            if f.field not in projected:
                projected.append(f.field)
        return projected

    def filter(self, result: TransactionQueryResult) -> bool:
        return all(f.matches(result) for f in self.field_filters)
