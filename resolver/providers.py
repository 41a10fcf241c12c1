from dishka import Provider, Scope, provide, FromComponent
from resolver.account import AccountResolver
from resolver.blocks import BlockService
from resolver.ens import NameResolver
from resolver.services import Web3Service
from resolver.transaction import TransactionResolver
from resolver.usecases import ResolveAccountsUseCase, ResolveTransactionsUseCase
from typing import Annotated
from core.environment.config import Settings
import logging


class ResolverProvider(Provider):
    """
    Provider for query resolution dependencies.
    """

    component = "resolver"

    @provide(scope=Scope.APP)
    def get_web3_service(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> Web3Service:
        """
        Provide Web3 service.

        Parameters
        ----------
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        Web3Service
            Web3 service instance
        """
        return Web3Service(settings=settings, logger=logger)

    @provide(scope=Scope.APP)
    def get_block_service(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> BlockService:
        return BlockService(settings=settings, logger=logger)

    @provide(scope=Scope.APP)
    def get_name_resolver(
        self,
        web3_service: Annotated[Web3Service, FromComponent("resolver")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> NameResolver:
        """
        Provide ENS name resolver bound to the canonical chain.

        Parameters
        ----------
        web3_service : Web3Service
            Web3 service instance
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        NameResolver
            Name resolver instance
        """
        return NameResolver(web3_service=web3_service, settings=settings, logger=logger)

    @provide(scope=Scope.APP)
    def get_account_resolver(
        self,
        name_resolver: Annotated[NameResolver, FromComponent("resolver")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> AccountResolver:
        return AccountResolver(name_resolver=name_resolver, settings=settings, logger=logger)

    @provide(scope=Scope.APP)
    def get_transaction_resolver(
        self,
        web3_service: Annotated[Web3Service, FromComponent("resolver")],
        block_service: Annotated[BlockService, FromComponent("resolver")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> TransactionResolver:
        return TransactionResolver(
            web3_service=web3_service,
            block_service=block_service,
            settings=settings,
            logger=logger
        )

    @provide(scope=Scope.REQUEST)
    def get_resolve_accounts_use_case(
        self,
        account_resolver: Annotated[AccountResolver, FromComponent("resolver")],
        web3_service: Annotated[Web3Service, FromComponent("resolver")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ResolveAccountsUseCase:
        """
        Provide resolve accounts use case.

        Parameters
        ----------
        account_resolver : AccountResolver
            Account resolver
        web3_service : Web3Service
            Web3 service instance
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ResolveAccountsUseCase
            Resolve accounts use case
        """
        return ResolveAccountsUseCase(
            account_resolver=account_resolver,
            web3_service=web3_service,
            logger=logger
        )

    @provide(scope=Scope.REQUEST)
    def get_resolve_transactions_use_case(
        self,
        transaction_resolver: Annotated[TransactionResolver, FromComponent("resolver")]
    ) -> ResolveTransactionsUseCase:
        """
        Provide resolve transactions use case.

        Parameters
        ----------
        transaction_resolver : TransactionResolver
            Transaction resolver

        Returns
        -------
        ResolveTransactionsUseCase
            Resolve transactions use case
        """
        return ResolveTransactionsUseCase(transaction_resolver=transaction_resolver)
