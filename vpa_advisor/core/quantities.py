"""
Kubernetes resource quantity helpers
"""
import math
from typing import Optional, Union

from kubernetes.utils import parse_quantity

Quantity = Union[str, int, float]


def to_milli_value(quantity: Optional[Quantity]) -> int:
    """Quantity in thousandths (millicores for CPU), rounded up"""
    if quantity is None or quantity == "":
        return 0
    return int(math.ceil(parse_quantity(quantity) * 1000))


def to_value(quantity: Optional[Quantity]) -> int:
    """Quantity in base units (bytes for memory), rounded up"""
    if quantity is None or quantity == "":
        return 0
    return int(math.ceil(parse_quantity(quantity)))


def format_mebibytes(num_bytes: int) -> str:
    """Whole mebibytes, truncating: 2147483648 -> '2048Mi'"""
    return f"{num_bytes // 1024 // 1024}Mi"


def format_millicores(milli: int) -> str:
    """Render millicores as a CPU quantity string"""
    return f"{milli}m"
