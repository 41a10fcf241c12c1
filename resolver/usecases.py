import logging
from resolver.account import AccountResolver
from resolver.chains import ChainOrRpc
from resolver.entities import AccountField, AccountId, TransactionField, TransactionId
from resolver.filters import TransactionFilter, TransactionQuery
from resolver.schemas import AccountQueryResponse, TransactionQueryResponse
from resolver.services import Web3Service
from resolver.transaction import TransactionResolver


class ResolveAccountsUseCase:
    """
    Use case for resolving accounts on one or more chains.

    Parameters
    ----------
    account_resolver : AccountResolver
        Account resolver
    web3_service : Web3Service
        Web3 service instance
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        account_resolver: AccountResolver,
        web3_service: Web3Service,
        logger: logging.Logger
    ):
        self.account_resolver = account_resolver
        self.web3_service = web3_service
        self.logger = logger

    async def __call__(
        self,
        ids: list[AccountId],
        fields: list[AccountField],
        chains: list[str]
    ) -> AccountQueryResponse:
        """
        Execute use case.

        ENS names are resolved once, then chains are queried one after
        another and their rows concatenated.

        Parameters
        ----------
        ids : list[AccountId]
            Account ids
        fields : list[AccountField]
            Requested fields
        chains : list[str]
            Chain names or RPC URLs

        Returns
        -------
        AccountQueryResponse
            Account rows
        """
        targets = [ChainOrRpc.parse(chain) for chain in chains]
        self.logger.info(f"Account query for {len(ids)} ids on {len(targets)} chains")
        resolved_ids = await self.account_resolver.resolve_names(ids)

        results = []
        for target in targets:
            client = self.web3_service.get_client(target)
            results.extend(await self.account_resolver.resolve(resolved_ids, fields, client))

        return AccountQueryResponse(results=results, total=len(results))


class ResolveTransactionsUseCase:
    """
    Use case for resolving transactions on one or more chains.

    Parameters
    ----------
    transaction_resolver : TransactionResolver
        Transaction resolver
    """

    def __init__(self, transaction_resolver: TransactionResolver):
        self.transaction_resolver = transaction_resolver

    async def __call__(
        self,
        ids: list[TransactionId] | None,
        filters: list[TransactionFilter],
        fields: list[TransactionField],
        chains: list[str]
    ) -> TransactionQueryResponse:
        """
        Execute use case.

        Parameters
        ----------
        ids : list[TransactionId] | None
            Transaction ids
        filters : list[TransactionFilter]
            Block filter and field predicates
        fields : list[TransactionField]
            Requested fields
        chains : list[str]
            Chain names or RPC URLs

        Returns
        -------
        TransactionQueryResponse
            Transaction rows
        """
        query = TransactionQuery(ids=ids, filters=filters, fields=fields)
        targets = [ChainOrRpc.parse(chain) for chain in chains]

        results = await self.transaction_resolver.resolve(query, targets)

        return TransactionQueryResponse(results=results, total=len(results))
