from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Asset:
    id: str  # provider id, e.g. "bitcoin"
    symbol: str
    name: str
    current_price: float
    market_cap: float
    volume_24h: float

    @property
    def display_symbol(self) -> str:
        return self.symbol.upper()
