"""Data models for the settlement orchestrator."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class MarketPhase(StrEnum):
    """Where a market sits relative to expiry and settlement."""

    NOT_EXPIRED = "not_expired"
    EXPIRED_UNSETTLED = "expired_unsettled"
    EXPIRED_SETTLED = "expired_settled"


class MarketState(BaseModel):
    """On-chain market snapshot.

    Settlement fields exist only once the market is settled.
    """

    model_config = {"frozen": True}

    has_expired: bool
    is_settled: bool
    strike_price: int = Field(ge=0)
    settlement_price: int | None = Field(default=None, ge=0)
    settled_above_strike: bool | None = None
    answer_timestamp: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def settlement_fields_match_settled_flag(self) -> MarketState:
        fields = (self.settlement_price, self.settled_above_strike, self.answer_timestamp)
        if self.is_settled and any(v is None for v in fields):
            raise ValueError("settled market is missing settlement fields")
        if not self.is_settled and any(v is not None for v in fields):
            raise ValueError("unsettled market cannot carry settlement fields")
        return self

    @property
    def phase(self) -> MarketPhase:
        return classify_phase(self.has_expired, self.is_settled)


def classify_phase(has_expired: bool, is_settled: bool) -> MarketPhase:
    if not has_expired:
        return MarketPhase.NOT_EXPIRED
    if is_settled:
        return MarketPhase.EXPIRED_SETTLED
    return MarketPhase.EXPIRED_UNSETTLED


class Verdict(BaseModel):
    """Precondition evaluation result for an expired market."""

    phase: MarketPhase
    state: MarketState | None = None

    @property
    def needs_settlement(self) -> bool:
        return self.phase == MarketPhase.EXPIRED_UNSETTLED


class MarketStatus(BaseModel):
    """Read-only view of a deployed market."""

    network_key: str
    market_address: str
    seconds_until_expiry: int = 0
    state: MarketState

    @property
    def phase(self) -> MarketPhase:
        return self.state.phase


class SettlementOutcome(BaseModel):
    """Structured result of a settlement run."""

    network_key: str
    market_address: str
    already_settled: bool
    settlement_price: int
    strike_price: int
    settled_above_strike: bool
    answer_timestamp: int

    # Populated only when this run submitted the settlement transaction
    transaction_hash: str | None = None
    gas_used: int | None = None
    block_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"status": "settled", **self.model_dump(mode="json")}
