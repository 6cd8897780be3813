"""
Fee selection.

Fee fields are a closed sum type: a transaction carries either a single
legacy gas price or an EIP-1559 priority/max pair. Which one is decided
solely by the endpoint's configured fee model.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from .endpoints import Endpoint, FeeModel

WEI_PER_GWEI = 10**9


@dataclass(frozen=True)
class LegacyFees:
    gas_price: int

    def to_dict(self) -> dict[str, int]:
        return {"gasPrice": self.gas_price}


@dataclass(frozen=True)
class DynamicFees:
    max_fee_per_gas: int
    max_priority_fee_per_gas: int

    def to_dict(self) -> dict[str, int]:
        return {
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
        }


FeeFields = Union[LegacyFees, DynamicFees]


@dataclass(frozen=True)
class FeeMagnitudes:
    """Configured fee magnitudes, in gwei."""
    priority_gwei: Decimal
    max_gwei: Decimal


def gwei_to_wei(amount: Union[int, str, Decimal]) -> int:
    """Convert a gwei amount to wei exactly; fractions below 1 wei are rejected."""
    wei = Decimal(amount) * WEI_PER_GWEI
    if wei != wei.to_integral_value():
        raise ValueError(f"{amount} gwei is not a whole number of wei")
    if wei < 0:
        raise ValueError(f"Fee must not be negative: {amount} gwei")
    return int(wei)


def select_fees(endpoint: Endpoint, magnitudes: FeeMagnitudes) -> FeeFields:
    """
    Choose fee fields for a transaction sent through ``endpoint``.

    Dynamic-fee endpoints get ``maxFeePerGas = priority + max`` with
    ``maxPriorityFeePerGas = priority``; every other endpoint gets a
    legacy ``gasPrice = priority + max``.
    """
    priority = gwei_to_wei(magnitudes.priority_gwei)
    total = priority + gwei_to_wei(magnitudes.max_gwei)

    if endpoint.fee_model is FeeModel.DYNAMIC:
        return DynamicFees(max_fee_per_gas=total, max_priority_fee_per_gas=priority)
    return LegacyFees(gas_price=total)


def describe_fees(fees: FeeFields) -> str:
    if isinstance(fees, DynamicFees):
        return (
            f"EIP-1559 transaction with max fee {Decimal(fees.max_fee_per_gas) / WEI_PER_GWEI} GWEI "
            f"(priority {Decimal(fees.max_priority_fee_per_gas) / WEI_PER_GWEI} GWEI)"
        )
    return f"legacy transaction with gas price {Decimal(fees.gas_price) / WEI_PER_GWEI} GWEI"
