from fastapi import APIRouter
from dishka.integrations.fastapi import inject
from dishka import FromComponent
from typing import Annotated
from resolver.schemas import (
    AccountQueryRequest,
    AccountQueryResponse,
    TransactionQueryRequest,
    TransactionQueryResponse
)
from resolver.usecases import ResolveAccountsUseCase, ResolveTransactionsUseCase

router = APIRouter(
    prefix="/api/query",
    tags=["Query"]
)


@router.post(
    "/accounts",
    response_model=AccountQueryResponse,
    response_model_exclude_unset=True
)
@inject
async def query_accounts(
    request: AccountQueryRequest,
    use_case: Annotated[
        ResolveAccountsUseCase, FromComponent("resolver")
    ]
) -> AccountQueryResponse:
    """
    Resolve account ids into rows holding the requested fields.

    Parameters
    ----------
    request : AccountQueryRequest
        Request with ids, fields and chains
    use_case : ResolveAccountsUseCase
        Use case for resolving accounts

    Returns
    -------
    AccountQueryResponse
        Account rows
    """
    return await use_case(
        ids=request.ids,
        fields=request.fields,
        chains=request.chains
    )


@router.post(
    "/transactions",
    response_model=TransactionQueryResponse,
    response_model_exclude_unset=True
)
@inject
async def query_transactions(
    request: TransactionQueryRequest,
    use_case: Annotated[
        ResolveTransactionsUseCase, FromComponent("resolver")
    ]
) -> TransactionQueryResponse:
    """
    Resolve transactions by hash or block filter, then apply predicates.

    Parameters
    ----------
    request : TransactionQueryRequest
        Request with ids, filters, fields and chains
    use_case : ResolveTransactionsUseCase
        Use case for resolving transactions

    Returns
    -------
    TransactionQueryResponse
        Transaction rows
    """
    return await use_case(
        ids=request.ids,
        filters=request.filters,
        fields=request.fields,
        chains=request.chains
    )
