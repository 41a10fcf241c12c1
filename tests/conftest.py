import logging
import os
from collections.abc import Mapping
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from web3 import Web3
from web3.datastructures import AttributeDict
from web3.exceptions import BlockNotFound, TransactionNotFound, Web3Exception


# Set test environment variables before imports
os.environ['ENS_CHAIN'] = 'ethereum'
os.environ['ANKR_API_KEY'] = ''
os.environ['MAX_CONCURRENT_REQUESTS'] = '8'

from core.environment.config import Settings  # noqa: E402
from resolver.account import AccountResolver  # noqa: E402
from resolver.blocks import BlockService  # noqa: E402
from resolver.ens import NameResolver  # noqa: E402
from resolver.services import Web3Service  # noqa: E402
from resolver.transaction import TransactionResolver  # noqa: E402


ALICE = Web3.to_checksum_address("0x" + "11" * 20)
BOB = Web3.to_checksum_address("0x" + "22" * 20)
CAROL = Web3.to_checksum_address("0x" + "33" * 20)

BLOCK_TAGS = {"latest", "earliest", "pending", "safe", "finalized"}


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def make_tx(
    n: int,
    block_number: int,
    sender: str = ALICE,
    to: str | None = BOB,
    value: int = 10**15,
    gas: int = 21000,
    gas_price: int = 5_000_000_000,
) -> AttributeDict:
    """Build a legacy transaction the way web3 returns it."""
    return AttributeDict({
        "hash": bytes.fromhex(tx_hash(n)[2:]),
        "blockNumber": block_number,
        "type": 0,
        "from": sender,
        "to": to,
        "input": b"",
        "value": value,
        "gas": gas,
        "gasPrice": gas_price,
        "chainId": 1,
        "v": 37,
        "r": b"\x01" * 32,
        "s": b"\x02" * 32,
    })


class FakeEth:
    """In-memory stand-in for ``AsyncWeb3.eth``."""

    def __init__(
        self,
        balances: dict | None = None,
        nonces: dict | None = None,
        codes: dict | None = None,
        transactions: list | None = None,
        receipts: dict | None = None,
        blocks: dict | None = None,
        latest: int | None = None,
        chain_id: int = 1,
        hashes_only: bool = False,
        failing: set | None = None,
    ):
        self.balances = balances or {}
        self.nonces = nonces or {}
        self.codes = codes or {}
        self.transactions = {Web3.to_hex(tx["hash"]): tx for tx in transactions or []}
        self.receipts = receipts or {}
        self.blocks = blocks or {}
        self.latest = latest if latest is not None else max(self.blocks, default=0)
        self._chain_id = chain_id
        self.hashes_only = hashes_only
        self.failing = failing or set()
        self.calls: list[tuple] = []

    def _record(self, method: str, *args):
        self.calls.append((method, *args))
        if method in self.failing:
            raise Web3Exception(f"{method} exploded")

    async def get_balance(self, address):
        self._record("get_balance", address)
        return self.balances.get(address, 0)

    async def get_transaction_count(self, address):
        self._record("get_transaction_count", address)
        return self.nonces.get(address, 0)

    async def get_code(self, address):
        self._record("get_code", address)
        return self.codes.get(address, b"")

    async def get_transaction(self, transaction_hash):
        self._record("get_transaction", transaction_hash)
        if transaction_hash not in self.transactions:
            raise TransactionNotFound(f"Transaction with hash: '{transaction_hash}' not found.")
        return self.transactions[transaction_hash]

    async def get_transaction_receipt(self, transaction_hash):
        self._record("get_transaction_receipt", transaction_hash)
        if transaction_hash not in self.receipts:
            raise TransactionNotFound(f"Transaction with hash: '{transaction_hash}' not found.")
        receipt = self.receipts[transaction_hash]
        if isinstance(receipt, Mapping):
            return receipt
        return AttributeDict({"status": receipt})

    async def get_block(self, block_identifier, full_transactions=False):
        self._record("get_block", block_identifier, full_transactions)
        number = self.latest if block_identifier in BLOCK_TAGS else block_identifier
        if number not in self.blocks:
            raise BlockNotFound(f"Block with id: '{block_identifier}' not found.")
        transactions = self.blocks[number]
        if not full_transactions or self.hashes_only:
            transactions = [tx["hash"] for tx in transactions]
        return AttributeDict({"number": number, "transactions": transactions})

    @property
    def chain_id(self):
        return self._get_chain_id()

    async def _get_chain_id(self):
        self._record("chain_id")
        return self._chain_id


class FakeEns:
    def __init__(
        self,
        names: dict | None = None,
        reachable: bool = True,
        error: Exception | None = None,
    ):
        self.names = names or {}
        self.reachable = reachable
        self.error = error
        self.calls: list[str] = []

    async def address(self, name):
        self.calls.append(name)
        if not self.reachable:
            raise Web3Exception("canonical RPC unreachable")
        if self.error is not None:
            raise self.error
        return self.names.get(name)


class FakeWeb3:
    def __init__(self, eth: FakeEth | None = None, ens: FakeEns | None = None):
        self.eth = eth or FakeEth()
        self.ens = ens or FakeEns()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("chain_query.tests")


@pytest.fixture
def web3_service(settings, logger) -> Web3Service:
    return Web3Service(settings=settings, logger=logger)


@pytest.fixture
def block_service(settings, logger) -> BlockService:
    return BlockService(settings=settings, logger=logger)


@pytest.fixture
def name_resolver(web3_service, settings, logger) -> NameResolver:
    return NameResolver(web3_service=web3_service, settings=settings, logger=logger)


@pytest.fixture
def account_resolver(name_resolver, settings, logger) -> AccountResolver:
    return AccountResolver(name_resolver=name_resolver, settings=settings, logger=logger)


@pytest.fixture
def transaction_resolver(web3_service, block_service, settings, logger) -> TransactionResolver:
    return TransactionResolver(
        web3_service=web3_service,
        block_service=block_service,
        settings=settings,
        logger=logger
    )


@pytest.fixture
def fake_web3() -> FakeWeb3:
    """
    Fake client with two blocks of transactions and one ENS name.

    Block 100 holds transactions 1-3, block 101 holds transactions 4-5.
    Transaction 5 has no receipt yet.
    """
    block_100 = [
        make_tx(1, 100),
        make_tx(2, 100, sender=BOB, to=CAROL, value=5 * 10**18, gas=50000),
        make_tx(3, 100, to=None, value=0, gas=1_000_000),
    ]
    block_101 = [
        make_tx(4, 101, gas=22000, gas_price=4_000_000_000),
        make_tx(5, 101, sender=CAROL),
    ]
    eth = FakeEth(
        balances={ALICE: 10**18, BOB: 0},
        nonces={ALICE: 7, BOB: 0},
        codes={CAROL: b"\x60\x80"},
        transactions=block_100 + block_101,
        receipts={tx_hash(1): 1, tx_hash(2): 0, tx_hash(3): 1, tx_hash(4): 1},
        blocks={100: block_100, 101: block_101},
    )
    ens = FakeEns(names={"alice.eth": ALICE})
    return FakeWeb3(eth=eth, ens=ens)


@pytest.fixture
def patched_clients(web3_service, fake_web3):
    """Route every ``get_client`` call of the service to ``fake_web3``."""
    with patch.object(web3_service, "get_client", return_value=fake_web3) as get_client:
        yield get_client


@pytest_asyncio.fixture
async def client(fake_web3):
    """
    Fixture for async test client with every chain served by ``fake_web3``.

    Parameters
    ----------
    fake_web3 : FakeWeb3
        Fake Web3 client

    Yields
    ------
    AsyncClient
        Async HTTP client for testing
    """
    with patch.object(Web3Service, "get_client", return_value=fake_web3):
        from main import app

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
