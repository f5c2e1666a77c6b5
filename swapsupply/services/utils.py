from decimal import Decimal, ROUND_DOWN, localcontext
from typing import Any, Union

from hexbytes import HexBytes
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

Number = Union[Decimal, int, str, float]


def to_base_units(amount: Number, decimals: int) -> int:
    """
    Human amount -> integer base units (amount * 10**decimals).

    Floats go through str() first so 0.1 means "0.1" and not its binary
    approximation. Anything below one base unit is truncated.
    """
    with localcontext() as ctx:
        ctx.prec = 80
        try:
            scaled = Decimal(str(amount)) * (Decimal(10) ** int(decimals))
            return int(scaled.to_integral_value(rounding=ROUND_DOWN))
        except ArithmeticError:
            raise ValueError(f"amount {amount!r} cannot be expressed in base units") from None


def to_human(amount_raw: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = 80
        return Decimal(int(amount_raw)) / (Decimal(10) ** int(decimals))


def is_zero_address(addr: Any) -> bool:
    if not addr:
        return True
    try:
        return int(str(addr), 16) == 0
    except ValueError:
        return False


def to_json_safe(obj: Any) -> Any:
    """
    Recursively convert web3 / HexBytes-heavy structures into plain
    JSON-serializable primitives (dict, list, str, int, float, bool, None).

    - HexBytes -> "0x..." str
    - bytes    -> "0x..." str
    - Decimal  -> str (no float rounding)
    - dict     -> {k: to_json_safe(v)}
    - list/tuple -> [to_json_safe(v), ...]
    - everything else -> unchanged if natively serializable, else str(obj)
    """
    if isinstance(obj, HexBytes):
        return Web3.to_hex(obj)

    if isinstance(obj, (bytes, bytearray)):
        return "0x" + obj.hex()

    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj

    if isinstance(obj, Decimal):
        return str(obj)

    # AttributeDict (web3 receipts) behaves like a mapping
    if isinstance(obj, dict) or hasattr(obj, "items"):
        return {str(k): to_json_safe(v) for (k, v) in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [to_json_safe(v) for v in obj]

    return str(obj)
