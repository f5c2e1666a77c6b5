from web3 import Web3

ABI_ERC20 = [
    {"name":"balanceOf","outputs":[{"type":"uint256"}],"inputs":[{"type":"address","name":"account"}],"stateMutability":"view","type":"function"},
    {"name":"approve","outputs":[{"type":"bool"}],
     "inputs":[{"type":"address","name":"spender"},{"type":"uint256","name":"amount"}],
     "stateMutability":"nonpayable","type":"function"},
]


class ERC20Adapter:
    """Token reads + approve() call builder."""

    def __init__(self, w3: Web3):
        self.w3 = w3

    def contract(self, addr: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(addr), abi=ABI_ERC20)

    # ---------- reads ----------
    def balance_of(self, token: str, owner: str) -> int:
        return int(self.contract(token).functions.balanceOf(Web3.to_checksum_address(owner)).call())

    # ---------- writes (return ContractFunctions) ----------
    def fn_approve(self, token: str, spender: str, amount_raw: int):
        return self.contract(token).functions.approve(Web3.to_checksum_address(spender), int(amount_raw))
