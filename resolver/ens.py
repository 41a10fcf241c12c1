import asyncio
import logging

import aiohttp
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.exceptions import Web3Exception

from core.environment.config import Settings
from core.exceptions import EnsResolutionException
from resolver.chains import ChainOrRpc
from resolver.entities import NameOrAddress
from resolver.services import Web3Service


class NameResolver:
    """
    Resolves ENS names on the canonical chain.

    The canonical chain comes from settings and does not depend on the
    chains a query targets.

    Parameters
    ----------
    web3_service : Web3Service
        Web3 service instance
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, web3_service: Web3Service, settings: Settings, logger: logging.Logger):
        self.web3_service = web3_service
        self.settings = settings
        self.logger = logger

    async def to_address(self, name_or_address: NameOrAddress) -> ChecksumAddress:
        """
        Get the address behind a name or address.

        Parameters
        ----------
        name_or_address : NameOrAddress
            Address (returned as is) or ENS name

        Returns
        -------
        ChecksumAddress
            Checksummed address

        Raises
        ------
        EnsResolutionException
            If the canonical chain is unreachable or the name has no address
        """
        if name_or_address.is_address:
            return Web3.to_checksum_address(name_or_address.value)

        name = name_or_address.value
        try:
            client = self.web3_service.get_client(ChainOrRpc.parse(self.settings.ens_chain))
            address = await client.ens.address(name)
        except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            self.logger.warning(f"ENS resolution of {name} failed: {e}")
            raise EnsResolutionException(f"Unable to resolve ENS name {name}") from e

        if address is None:
            raise EnsResolutionException(f"ENS name {name} has no address")

        self.logger.debug(f"Resolved {name} to {address}")
        return address
