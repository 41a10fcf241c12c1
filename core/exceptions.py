from abc import ABC


class BaseCustomException(Exception, ABC):
    """
    Base class for all custom exceptions.
    """

    def __init__(self, message: str | None = None):
        self.message = message or self.get_default_message()
        super().__init__(self.message)

    def get_default_message(self) -> str:
        """
        Return default error message.

        Returns
        -------
        str
            Default error message
        """
        return "error.unknown"

    def get_status_code(self) -> int:
        """
        Return HTTP status code for exception.

        Returns
        -------
        int
            HTTP status code
        """
        return 500


class BadRequestException(BaseCustomException):
    """Bad request exception (400)."""

    def get_status_code(self) -> int:
        return 400


class NotFoundException(BaseCustomException):
    """Not found exception (404)."""

    def get_status_code(self) -> int:
        return 404


class NetworkNotSupportedException(BadRequestException):
    """Network not supported exception."""

    def get_default_message(self) -> str:
        return "error.network.not_supported"


class MismatchEntityAndEntityIdException(BadRequestException):
    """An entity id of the wrong kind was routed to a resolver."""

    def get_default_message(self) -> str:
        return "Mismatch between Entity and EntityId"


class MissingTransactionHashOrFilterException(BadRequestException):
    """Transaction query carries neither ids nor a block filter."""

    def get_default_message(self) -> str:
        return "Query should either provide tx hash or block number/range filter"


class EnsResolutionException(BadRequestException):
    """ENS name could not be resolved on the canonical chain."""

    def get_default_message(self) -> str:
        return "Unable to resolve ENS name"


class InvalidBlockRangeException(BadRequestException):
    """Block range start is after its end."""

    def get_default_message(self) -> str:
        return "error.block_range.invalid"


class BlockNotFoundException(NotFoundException):
    """Block not found exception."""

    def get_default_message(self) -> str:
        return "error.block.not_found"


class RPCException(BaseCustomException):
    """RPC error exception."""

    def get_default_message(self) -> str:
        return "error.rpc.failed"

    def get_status_code(self) -> int:
        return 502


class BlockTransactionsNotFullException(BaseCustomException):
    """Block resolver returned transaction hashes where bodies were requested."""

    def get_default_message(self) -> str:
        return "Block transactions should be full"
