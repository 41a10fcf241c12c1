import logging
from collections.abc import Mapping
from typing import Any, Callable
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound
from web3.types import BlockData, TxData

from core.concurrency import gather_all
from core.exceptions import (
    BlockTransactionsNotFullException,
    MismatchEntityAndEntityIdException,
    MissingTransactionHashOrFilterException,
)
from core.environment.config import Settings
from resolver.blocks import BlockService
from resolver.chains import Chain, ChainOrRpc
from resolver.entities import (
    BlockId,
    BlockRange,
    EntityId,
    TransactionField,
    TransactionId,
    TransactionQueryResult,
)
from resolver.filters import TransactionQuery
from resolver.services import Web3Service, rpc_call


def _hex(value: Any) -> str | None:
    return Web3.to_hex(value) if value is not None else None


def _y_parity(tx: TxData) -> bool | None:
    y_parity = tx.get("yParity")
    return bool(y_parity) if y_parity is not None else None


TRANSACTION_FIELD_EXTRACTORS: dict[TransactionField, Callable[[TxData], Any]] = {
    TransactionField.TRANSACTION_TYPE: lambda tx: tx.get("type"),
    TransactionField.HASH: lambda tx: _hex(tx["hash"]),
    TransactionField.FROM: lambda tx: tx["from"],
    TransactionField.TO: lambda tx: tx.get("to"),
    TransactionField.DATA: lambda tx: _hex(tx.get("input")),
    TransactionField.VALUE: lambda tx: tx["value"],
    TransactionField.GAS_PRICE: lambda tx: tx.get("gasPrice"),
    TransactionField.GAS: lambda tx: tx["gas"],
    TransactionField.CHAIN_ID: lambda tx: tx.get("chainId"),
    TransactionField.V: lambda tx: tx.get("v"),
    TransactionField.R: lambda tx: _hex(tx.get("r")),
    TransactionField.S: lambda tx: _hex(tx.get("s")),
    TransactionField.MAX_FEE_PER_BLOB_GAS: lambda tx: tx.get("maxFeePerBlobGas"),
    TransactionField.MAX_FEE_PER_GAS: lambda tx: tx.get("maxFeePerGas"),
    TransactionField.MAX_PRIORITY_FEE_PER_GAS: lambda tx: tx.get("maxPriorityFeePerGas"),
    TransactionField.Y_PARITY: _y_parity,
}


def _full_transactions(block: BlockData) -> list[TxData]:
    transactions = block["transactions"]
    if any(not isinstance(tx, Mapping) for tx in transactions):
        raise BlockTransactionsNotFullException(
            f"Block {block.get('number')} returned transaction hashes instead of bodies"
        )
    return list(transactions)


class TransactionResolver:
    """
    Resolves transaction queries across chains.

    Chains are processed one after another; within a chain transactions are
    fetched and projected concurrently. Any failure aborts the whole query.

    Parameters
    ----------
    web3_service : Web3Service
        Web3 service instance
    block_service : BlockService
        Block fetcher
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        web3_service: Web3Service,
        block_service: BlockService,
        settings: Settings,
        logger: logging.Logger
    ):
        self.web3_service = web3_service
        self.block_service = block_service
        self.settings = settings
        self.logger = logger

    async def resolve(
        self,
        query: TransactionQuery,
        chains: list[ChainOrRpc]
    ) -> list[TransactionQueryResult]:
        """
        Resolve a transaction query.

        Parameters
        ----------
        query : TransactionQuery
            Ids and/or filters plus requested fields
        chains : list[ChainOrRpc]
            Chains to query, in output order

        Returns
        -------
        list[TransactionQueryResult]
            Matching rows, grouped by chain in ``chains`` order

        Raises
        ------
        MissingTransactionHashOrFilterException
            If the query has neither ids nor a block filter
        MismatchEntityAndEntityIdException
            If an id is not a transaction id
        """
        if not query.has_ids() and not query.has_block_filter():
            raise MissingTransactionHashOrFilterException()

        hashes = self._transaction_hashes(query.ids) if query.has_ids() else None
        projected = query.projected_fields()

        all_results = []
        for chain in chains:
            client = self.web3_service.get_client(chain)

            if hashes is not None:
                transactions = await self._get_transactions_by_ids(hashes, client)
                block_id = query.get_block_id_filter()
                if block_id is not None:
                    transactions = await self._narrow_to_blocks(transactions, block_id, client)
            else:
                transactions = await self.get_transactions_by_block_id(
                    query.get_block_id_filter(), client
                )

            stamped_chain = None
            if TransactionField.CHAIN in projected:
                stamped_chain = await self.web3_service.get_chain(chain, client)

            records = await gather_all(
                (self._pick_transaction_fields(tx, projected, client, stamped_chain) for tx in transactions),
                limit=self.settings.max_concurrent_requests
            )

            matched = [
                self._requested_only(record, query.fields)
                for record in records
                if query.filter(record)
            ]
            self.logger.info(
                f"Chain {chain}: {len(transactions)} transactions fetched, {len(matched)} matched"
            )
            all_results.extend(matched)

        return all_results

    def _transaction_hashes(self, ids: list[EntityId]) -> list[str]:
        hashes = []
        for entity_id in ids:
            if not isinstance(entity_id, TransactionId):
                raise MismatchEntityAndEntityIdException(
                    f"Mismatch between Entity and EntityId, {entity_id} can't be resolved as a transaction id"
                )
            hashes.append(entity_id.hash)
        return hashes

    async def _get_transactions_by_ids(self, hashes: list[str], client: AsyncWeb3) -> list[TxData]:
        async def get_transaction(tx_hash: str) -> TxData | None:
            try:
                return await rpc_call(
                    client.eth.get_transaction(tx_hash),
                    f"eth_getTransactionByHash({tx_hash})"
                )
            except TransactionNotFound:
                self.logger.debug(f"Transaction {tx_hash} not found, skipping")
                return None

        transactions = await gather_all(
            (get_transaction(tx_hash) for tx_hash in hashes),
            limit=self.settings.max_concurrent_requests
        )
        return [tx for tx in transactions if tx is not None]

    async def _narrow_to_blocks(
        self,
        transactions: list[TxData],
        block_id: BlockId,
        client: AsyncWeb3
    ) -> list[TxData]:
        start, end = await self.block_service.resolve_block_bounds(block_id, client)
        return [
            tx for tx in transactions
            if tx.get("blockNumber") is not None and start <= tx["blockNumber"] <= end
        ]

    async def get_transactions_by_block_id(self, block_id: BlockId, client: AsyncWeb3) -> list[TxData]:
        """
        Get every transaction of the blocks a block id selects.

        Parameters
        ----------
        block_id : BlockId
            Single block number/tag or block range
        client : AsyncWeb3
            Web3 client

        Returns
        -------
        list[TxData]
            Full transactions in block order

        Raises
        ------
        BlockTransactionsNotFullException
            If a block came back with hashes instead of transaction bodies
        """
        if isinstance(block_id, BlockRange):
            block_numbers = await self.block_service.resolve_block_numbers(block_id, client)
            blocks = await self.block_service.batch_get_blocks(block_numbers, client, True)
            return [tx for block in blocks for tx in _full_transactions(block)]

        block = await self.block_service.get_block(block_id, client, True)
        return _full_transactions(block)

    async def _pick_transaction_fields(
        self,
        tx: TxData,
        fields: list[TransactionField],
        client: AsyncWeb3,
        chain: Chain | None
    ) -> TransactionQueryResult:
        values = {}
        for field in fields:
            if field == TransactionField.STATUS:
                values[field.attribute] = await self._get_status(tx, client)
            elif field == TransactionField.CHAIN:
                values[field.attribute] = chain
            else:
                values[field.attribute] = TRANSACTION_FIELD_EXTRACTORS[field](tx)
        return TransactionQueryResult(**values)

    async def _get_status(self, tx: TxData, client: AsyncWeb3) -> bool | None:
        tx_hash = _hex(tx["hash"])
        try:
            receipt = await rpc_call(
                client.eth.get_transaction_receipt(tx_hash),
                f"eth_getTransactionReceipt({tx_hash})"
            )
        except TransactionNotFound:
            return None

        status = receipt.get("status")
        if status is not None:
            return status == 1
        # pre-Byzantium receipts carry a post-state root instead of a status
        if receipt.get("root") is not None:
            return True
        return None

    @staticmethod
    def _requested_only(
        record: TransactionQueryResult,
        fields: list[TransactionField]
    ) -> TransactionQueryResult:
        return TransactionQueryResult(**{f.attribute: getattr(record, f.attribute) for f in fields})
