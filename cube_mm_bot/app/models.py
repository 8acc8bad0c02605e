"""Domain models for quoting, simulated fills and signed requests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True, slots=True)
class Ticker:
    symbol: str
    bid: float
    ask: float
    volume: float


@dataclass(frozen=True, slots=True)
class Quote:
    mid: float
    buy_price: float
    sell_price: float


@dataclass(frozen=True, slots=True)
class TradeRecord:
    side: TradeSide
    price: float
    volume: float
    timestamp: datetime

    @property
    def notional(self) -> float:
        return self.price * self.volume


@dataclass(frozen=True, slots=True)
class LedgerStats:
    symbol: str
    num_trades: int = 0
    total_profit: float = 0.0
    total_buy_volume: float = 0.0
    total_sell_volume: float = 0.0
    total_buy_notional: float = 0.0
    total_sell_notional: float = 0.0
    average_buy_price: float = 0.0
    average_sell_price: float = 0.0
    last_trade: TradeRecord | None = None


@dataclass(frozen=True, slots=True)
class SignedHeaders:
    api_key: str
    signature: str
    timestamp: int

    def as_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "x-api-signature": self.signature,
            "x-api-timestamp": str(self.timestamp),
        }


# Wire enums of the order service.
ORDER_SIDE = {TradeSide.BUY: 0, TradeSide.SELL: 1}
TIME_IN_FORCE = {"immediate_or_cancel": 0, "good_for_session": 1, "fill_or_kill": 2}
ORDER_TYPE = {"limit": 0, "market_limit": 1, "market_with_protection": 2}
SELF_TRADE_PREVENTION = {"cancel_resting": 0, "cancel_aggressing": 1, "allow_self_trade": 2}
POST_ONLY = {"disabled": 0, "enabled": 1}


@dataclass(slots=True)
class OrderRequest:
    market_id: int
    price: int
    quantity: int
    side: TradeSide
    subaccount_id: int
    time_in_force: str = "good_for_session"
    order_type: str = "limit"
    self_trade_prevention: str = "cancel_resting"
    post_only: str = "disabled"
    cancel_on_disconnect: bool = False
    client_order_id: int = field(default_factory=lambda: uuid.uuid4().int >> 64)
    request_id: int = field(default_factory=lambda: uuid.uuid4().int >> 64)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body expected by the order service."""
        try:
            return {
                "clientOrderId": int(self.client_order_id),
                "requestId": int(self.request_id),
                "marketId": int(self.market_id),
                "price": int(self.price),
                "quantity": int(self.quantity),
                "side": ORDER_SIDE[TradeSide(self.side)],
                "timeInForce": TIME_IN_FORCE[self.time_in_force],
                "orderType": ORDER_TYPE[self.order_type],
                "subaccountId": int(self.subaccount_id),
                "selfTradePrevention": SELF_TRADE_PREVENTION[self.self_trade_prevention],
                "postOnly": POST_ONLY[self.post_only],
                "cancelOnDisconnect": bool(self.cancel_on_disconnect),
            }
        except KeyError as exc:
            raise ValueError(f"unsupported order field value: {exc}") from exc
