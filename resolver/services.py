import asyncio
import logging
from typing import Awaitable, TypeVar

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import BlockNotFound, TransactionNotFound, Web3Exception

from core.environment.config import Settings
from core.exceptions import RPCException
from resolver.chains import Chain, ChainOrRpc

T = TypeVar("T")


async def rpc_call(awaitable: Awaitable[T], description: str) -> T:
    """
    Await a provider call, wrapping transport and node failures.

    ``TransactionNotFound`` and ``BlockNotFound`` pass through untouched so
    callers decide whether missing data is an error.

    Parameters
    ----------
    awaitable : Awaitable[T]
        Pending provider call
    description : str
        What is being fetched, used in the error message

    Returns
    -------
    T
        Provider result

    Raises
    ------
    RPCException
        If the node or the transport fails
    """
    try:
        return await awaitable
    except (TransactionNotFound, BlockNotFound):
        raise
    except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise RPCException(f"RPC call failed ({description}): {e}") from e


class Web3Service:
    """
    Gateway from a network description to a Web3 client.

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
        self.web3_clients: dict[str, AsyncWeb3] = {}

    def get_rpc_url(self, chain: ChainOrRpc) -> str:
        """
        Get RPC URL for a network.

        Parameters
        ----------
        chain : ChainOrRpc
            Network name or raw RPC URL

        Returns
        -------
        str
            RPC URL
        """
        if chain.rpc_url is not None:
            return chain.rpc_url
        info = chain.chain.info
        return self.settings.get_rpc_url(chain.chain.value, info.default_rpc_url, info.ankr_path)

    def get_client(self, chain: ChainOrRpc) -> AsyncWeb3:
        """
        Get Web3 client for a network, one client per RPC URL.

        Parameters
        ----------
        chain : ChainOrRpc
            Network name or raw RPC URL

        Returns
        -------
        AsyncWeb3
            Web3 client instance
        """
        rpc_url = self.get_rpc_url(chain)
        if rpc_url not in self.web3_clients:
            self.logger.info(f"Creating Web3 client for {chain}")
            provider = AsyncWeb3.AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=self.settings.rpc_timeout)}
            )
            self.web3_clients[rpc_url] = AsyncWeb3(provider)
        return self.web3_clients[rpc_url]

    async def get_chain(self, chain: ChainOrRpc, client: AsyncWeb3) -> Chain:
        """
        Resolve the chain descriptor behind a network.

        Parameters
        ----------
        chain : ChainOrRpc
            Network name or raw RPC URL
        client : AsyncWeb3
            Client connected to that network

        Returns
        -------
        Chain
            Known chain

        Raises
        ------
        NetworkNotSupportedException
            If the node reports a chain id with no known chain
        """
        if chain.chain is not None:
            return chain.chain
        chain_id = await rpc_call(client.eth.chain_id, "eth_chainId")
        return Chain.from_chain_id(chain_id)
