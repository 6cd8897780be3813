from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FeeModel(str, Enum):
    LEGACY = "legacy"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class Endpoint:
    """
    A named JSON-RPC endpoint.

    Attributes:
        url: HTTPS JSON-RPC URL (identity of the endpoint)
        name: Display name used in logs
        fee_model: Which fee fields transactions sent here carry
    """
    url: str
    name: str = field(compare=False)
    fee_model: FeeModel = field(default=FeeModel.LEGACY, compare=False)

    def __str__(self) -> str:
        return self.name
