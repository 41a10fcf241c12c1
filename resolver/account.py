import logging
from typing import Any, Awaitable, Callable
from eth_typing import ChecksumAddress
from web3 import AsyncWeb3, Web3

from core.concurrency import gather_all
from core.environment.config import Settings
from core.exceptions import MismatchEntityAndEntityIdException
from resolver.ens import NameResolver
from resolver.entities import AccountField, AccountId, AccountQueryResult, EntityId
from resolver.services import rpc_call

AccountFetcher = Callable[[AsyncWeb3, ChecksumAddress], Awaitable[Any]]


async def _fetch_address(client: AsyncWeb3, address: ChecksumAddress) -> str:
    return address


async def _fetch_balance(client: AsyncWeb3, address: ChecksumAddress) -> int:
    return await rpc_call(client.eth.get_balance(address), f"eth_getBalance({address})")


async def _fetch_nonce(client: AsyncWeb3, address: ChecksumAddress) -> int:
    return await rpc_call(
        client.eth.get_transaction_count(address),
        f"eth_getTransactionCount({address})"
    )


async def _fetch_code(client: AsyncWeb3, address: ChecksumAddress) -> str:
    code = await rpc_call(client.eth.get_code(address), f"eth_getCode({address})")
    return Web3.to_hex(code)


ACCOUNT_FIELD_FETCHERS: dict[AccountField, AccountFetcher] = {
    AccountField.ADDRESS: _fetch_address,
    AccountField.NONCE: _fetch_nonce,
    AccountField.BALANCE: _fetch_balance,
    AccountField.CODE: _fetch_code,
}


class AccountResolver:
    """
    Resolves account ids into account rows.

    Parameters
    ----------
    name_resolver : NameResolver
        ENS resolver for names among the ids
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, name_resolver: NameResolver, settings: Settings, logger: logging.Logger):
        self.name_resolver = name_resolver
        self.settings = settings
        self.logger = logger

    async def resolve(
        self,
        entity_ids: list[EntityId],
        fields: list[AccountField],
        client: AsyncWeb3
    ) -> list[AccountQueryResult]:
        """
        Resolve every id concurrently, all or nothing.

        Parameters
        ----------
        entity_ids : list[EntityId]
            Account ids
        fields : list[AccountField]
            Requested fields
        client : AsyncWeb3
            Client of the chain being queried

        Returns
        -------
        list[AccountQueryResult]
            One row per id, in input order

        Raises
        ------
        MismatchEntityAndEntityIdException
            If any id is not an account id
        """
        self._check_account_ids(entity_ids)
        self.logger.info(f"Resolving {len(entity_ids)} accounts, fields: {[f.value for f in fields]}")
        return await gather_all(
            (self._get_account(entity_id, fields, client) for entity_id in entity_ids),
            limit=self.settings.max_concurrent_requests
        )

    async def _get_account(
        self,
        entity_id: AccountId,
        fields: list[AccountField],
        client: AsyncWeb3
    ) -> AccountQueryResult:
        address = await self.name_resolver.to_address(entity_id.name_or_address)

        values = {}
        for field in fields:
            values[field.value] = await ACCOUNT_FIELD_FETCHERS[field](client, address)

        return AccountQueryResult(**values)

    async def resolve_names(self, entity_ids: list[EntityId]) -> list[AccountId]:
        """
        Replace ENS names among the ids with the addresses they point at.

        Names resolve on the canonical chain, so a multi-chain query can do
        this once up front.

        Parameters
        ----------
        entity_ids : list[EntityId]
            Account ids

        Returns
        -------
        list[AccountId]
            Address-only account ids, in input order

        Raises
        ------
        MismatchEntityAndEntityIdException
            If any id is not an account id
        EnsResolutionException
            If a name cannot be resolved
        """
        self._check_account_ids(entity_ids)
        addresses = await gather_all(
            (self.name_resolver.to_address(entity_id.name_or_address) for entity_id in entity_ids),
            limit=self.settings.max_concurrent_requests
        )
        return [AccountId(name_or_address=address) for address in addresses]

    @staticmethod
    def _check_account_ids(entity_ids: list[EntityId]) -> None:
        for entity_id in entity_ids:
            if not isinstance(entity_id, AccountId):
                raise MismatchEntityAndEntityIdException(
                    f"Mismatch between Entity and EntityId, {entity_id} can't be resolved as an account id"
                )
