from ..adapters.erc20 import ERC20Adapter
from ..domain.models import TokenDescriptor
from .exceptions import QueryError


class BalanceReader:
    """balanceOf at the latest block. Zero is a valid answer, not an error."""

    def __init__(self, erc20: ERC20Adapter):
        self._erc20 = erc20

    def read_balance(self, token: TokenDescriptor, owner: str) -> int:
        try:
            return self._erc20.balance_of(token.address, owner)
        except Exception as exc:
            raise QueryError(f"balanceOf({owner}) failed on {token.address}: {exc}", cause=exc) from exc
