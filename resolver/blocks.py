import logging
from web3 import AsyncWeb3
from web3.exceptions import BlockNotFound
from web3.types import BlockData

from core.concurrency import gather_all
from core.environment.config import Settings
from core.exceptions import BlockNotFoundException, InvalidBlockRangeException
from resolver.entities import BlockId, BlockNumberOrTag, BlockRange
from resolver.services import rpc_call


class BlockService:
    """
    Fetches blocks and resolves block ids into concrete block numbers.

    Parameters
    ----------
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, settings: Settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger

    async def get_block(
        self,
        number: BlockNumberOrTag,
        client: AsyncWeb3,
        full: bool
    ) -> BlockData:
        """
        Fetch one block.

        Parameters
        ----------
        number : BlockNumberOrTag
            Block number or tag
        client : AsyncWeb3
            Web3 client
        full : bool
            Embed full transaction bodies instead of hashes

        Returns
        -------
        BlockData
            Block

        Raises
        ------
        BlockNotFoundException
            If the node has no such block
        """
        try:
            return await rpc_call(
                client.eth.get_block(number, full_transactions=full),
                f"eth_getBlockByNumber({number})"
            )
        except BlockNotFound:
            raise BlockNotFoundException(f"Block {number} not found")

    async def batch_get_blocks(
        self,
        numbers: list[int],
        client: AsyncWeb3,
        full: bool
    ) -> list[BlockData]:
        """
        Fetch many blocks concurrently.

        Parameters
        ----------
        numbers : list[int]
            Block numbers
        client : AsyncWeb3
            Web3 client
        full : bool
            Embed full transaction bodies instead of hashes

        Returns
        -------
        list[BlockData]
            Blocks in the order of ``numbers``
        """
        self.logger.info(f"Fetching {len(numbers)} blocks")
        return await gather_all(
            (self.get_block(number, client, full) for number in numbers),
            limit=self.settings.max_concurrent_requests
        )

    async def resolve_block_number(self, number: BlockNumberOrTag, client: AsyncWeb3) -> int:
        """Turn a block tag into the number it currently points at."""
        if isinstance(number, int):
            return number
        block = await self.get_block(number, client, False)
        return block["number"]

    async def resolve_block_numbers(self, block_range: BlockRange, client: AsyncWeb3) -> list[int]:
        """
        Expand a block range into block numbers.

        Parameters
        ----------
        block_range : BlockRange
            Range, ``end`` omitted means the single block ``start``
        client : AsyncWeb3
            Web3 client used to resolve tags

        Returns
        -------
        list[int]
            Ascending block numbers

        Raises
        ------
        InvalidBlockRangeException
            If start is after end
        """
        start, end = await self.resolve_block_bounds(block_range, client)
        return list(range(start, end + 1))

    async def resolve_block_bounds(self, block_id: BlockId, client: AsyncWeb3) -> tuple[int, int]:
        """
        Resolve a block id into its first and last block numbers.

        Parameters
        ----------
        block_id : BlockId
            Single block number/tag or block range
        client : AsyncWeb3
            Web3 client used to resolve tags

        Returns
        -------
        tuple[int, int]
            Inclusive bounds, equal for a single block

        Raises
        ------
        InvalidBlockRangeException
            If start is after end
        """
        if not isinstance(block_id, BlockRange):
            number = await self.resolve_block_number(block_id, client)
            return number, number

        start = await self.resolve_block_number(block_id.start, client)
        if block_id.end is None:
            return start, start

        end = await self.resolve_block_number(block_id.end, client)
        if start > end:
            raise InvalidBlockRangeException(f"Block range start {start} is after end {end}")
        return start, end

    async def resolve_block_id(self, block_id: BlockId, client: AsyncWeb3) -> list[int]:
        if isinstance(block_id, BlockRange):
            return await self.resolve_block_numbers(block_id, client)
        return [await self.resolve_block_number(block_id, client)]
