import pytest

from core.exceptions import BlockNotFoundException, InvalidBlockRangeException, RPCException
from resolver.entities import BlockRange

from conftest import tx_hash


class TestBlockService:
    """
    Unit tests for block fetching and block number resolution.
    """

    @pytest.mark.asyncio
    async def test_get_block_with_full_transactions(self, block_service, fake_web3):
        block = await block_service.get_block(100, fake_web3, True)

        assert block["number"] == 100
        assert len(block["transactions"]) == 3
        assert block["transactions"][0]["from"]

    @pytest.mark.asyncio
    async def test_get_block_hashes_only(self, block_service, fake_web3):
        block = await block_service.get_block(100, fake_web3, False)

        assert block["transactions"][0] == bytes.fromhex(tx_hash(1)[2:])

    @pytest.mark.asyncio
    async def test_missing_block(self, block_service, fake_web3):
        with pytest.raises(BlockNotFoundException):
            await block_service.get_block(5, fake_web3, True)

    @pytest.mark.asyncio
    async def test_provider_failure(self, block_service, fake_web3):
        fake_web3.eth.failing.add("get_block")

        with pytest.raises(RPCException):
            await block_service.get_block(100, fake_web3, True)

    @pytest.mark.asyncio
    async def test_batch_keeps_order(self, block_service, fake_web3):
        blocks = await block_service.batch_get_blocks([101, 100], fake_web3, True)

        assert [b["number"] for b in blocks] == [101, 100]

    @pytest.mark.asyncio
    async def test_resolve_block_numbers(self, block_service, fake_web3):
        assert await block_service.resolve_block_numbers(BlockRange(start=7, end=10), fake_web3) == [7, 8, 9, 10]
        assert await block_service.resolve_block_numbers(BlockRange(start=7), fake_web3) == [7]
        assert await block_service.resolve_block_numbers(BlockRange(start="latest"), fake_web3) == [101]

    @pytest.mark.asyncio
    async def test_resolve_block_id(self, block_service, fake_web3):
        assert await block_service.resolve_block_id(42, fake_web3) == [42]
        assert await block_service.resolve_block_id("finalized", fake_web3) == [101]

    @pytest.mark.asyncio
    async def test_resolve_block_bounds(self, block_service, fake_web3):
        assert await block_service.resolve_block_bounds(42, fake_web3) == (42, 42)
        assert await block_service.resolve_block_bounds(BlockRange(start=7), fake_web3) == (7, 7)
        assert await block_service.resolve_block_bounds(
            BlockRange(start=0, end="latest"), fake_web3
        ) == (0, 101)

    @pytest.mark.asyncio
    async def test_reversed_bounds_rejected(self, block_service, fake_web3):
        with pytest.raises(InvalidBlockRangeException):
            await block_service.resolve_block_bounds(BlockRange(start=9, end=3), fake_web3)
