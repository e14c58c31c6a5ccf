"""
types.py — Shared Data Layer for Modeling Modules

Purpose:
- Define the canonical Quote record consumed by every engine
- Define assumption structs (DCF, DDM, LBO variants) and engine outputs
- Keep everything as plain dataclasses so results are JSON-serializable
  through `dataclasses.asdict`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pitchly.data.reference import Domain, ScenarioId


Year = int

NOT_AVAILABLE = "N/A"

# A value that the UI shows as "N/A" when it cannot be computed
MaybeNumber = Union[float, str]


class InvalidAssumptionError(ValueError):
    """Raised when an assumption set is internally inconsistent."""


# ============================================================================
# Quote
# ============================================================================


@dataclass(frozen=True)
class Quote:
    """
    Canonical per-company snapshot built from a ticker summary payload.

    Monetary fields are finite floats or None. `shares`, `net_debt` and
    `ev_ebitda` are derived by the quote builder.
    """
    ticker: str
    company_name: str
    exchange: Optional[str]
    domain: Domain
    price: Optional[float]
    market_cap: Optional[float]
    revenue: Optional[float]
    ebitda: Optional[float]
    tax_rate: float
    tax_rate_is_assumed: bool = False
    tax_rate_source: str = ""
    previous_close: Optional[float] = None
    open: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    pe_ratio: Optional[float] = None
    ps_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    roe: Optional[float] = None
    revenue_growth: Optional[float] = None
    shares: Optional[float] = None
    net_debt: Optional[float] = None
    ev_ebitda: Optional[float] = None
    interest_rate: float = 0.085
    logo_url: Optional[str] = None
    scenarios: List[Dict[str, Any]] = field(default_factory=list)
    last_updated: Optional[datetime] = None


@dataclass
class ModelInput:
    """A single slider-bound input. Only `value` participates in computation."""
    label: str
    value: float
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None


# ============================================================================
# DCF / DDM
# ============================================================================


@dataclass(frozen=True)
class StandardDcfAssumptions:
    """FCFF model inputs (non-financial companies)."""
    revenue_growth: float
    operating_margin: float
    tax_rate: float
    reinvestment_rate: float
    wacc: float
    terminal_growth: float

    @property
    def discount_rate(self) -> float:
        return self.wacc


@dataclass(frozen=True)
class RoeDcfAssumptions:
    """ROE-driven FCFE model inputs (Financials). reinvestment_rate is the retention ratio."""
    roe: float
    reinvestment_rate: float
    cost_of_equity: float
    terminal_growth: float

    @property
    def discount_rate(self) -> float:
        return self.cost_of_equity


DcfAssumptions = Union[StandardDcfAssumptions, RoeDcfAssumptions]


@dataclass
class DcfProjectionRow:
    """One forecast year. For the DDM variant free_cash_flow holds FCFE and revenue is None."""
    year: Year
    revenue: Optional[float]
    free_cash_flow: float


@dataclass
class DcfResult:
    """DCF/DDM valuation output."""
    model_type: str
    projections: List[DcfProjectionRow]
    present_value_of_cash_flows: float
    present_value_of_terminal_value: float
    enterprise_value: float
    equity_value: float
    per_share_value: MaybeNumber
    potential_upside: MaybeNumber
    revenue: MaybeNumber = NOT_AVAILABLE
    derived_revenue_note: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# LBO
# ============================================================================


@dataclass(frozen=True)
class LboAssumptions:
    """
    Base LBO inputs shared by every scenario.

    debt_financing is a fraction of purchase_price; holding_period is in
    whole years.
    """
    purchase_price: float
    debt_financing: float
    interest_rate: float
    ebitda_growth: float
    exit_multiple: float
    holding_period: int

    def validate(self) -> None:
        if not 0 < self.debt_financing < 1:
            raise InvalidAssumptionError(
                f"debt_financing must be between 0 and 1 (exclusive), got {self.debt_financing}"
            )
        if int(self.holding_period) != self.holding_period or not 3 <= self.holding_period <= 7:
            raise InvalidAssumptionError(
                f"holding_period must be a whole number of years between 3 and 7, got {self.holding_period}"
            )


@dataclass(frozen=True)
class RecapLboAssumptions(LboAssumptions):
    """Dividend / leveraged recap: a debt-funded dividend in recap_year."""
    recap_year: int = 3
    dividend_payout: float = 0.5

    def validate(self) -> None:
        super().validate()
        if not 2 <= self.recap_year <= self.holding_period - 1:
            raise InvalidAssumptionError(
                f"recap_year must be between 2 and {self.holding_period - 1}, got {self.recap_year}"
            )


@dataclass(frozen=True)
class MezzanineLboAssumptions(LboAssumptions):
    """Senior + PIK mezzanine tranche; mezzanine_financing is a fraction of purchase_price."""
    mezzanine_financing: float = 0.15
    mezzanine_interest_rate: float = 0.14

    def validate(self) -> None:
        super().validate()
        if self.mezzanine_financing > self.debt_financing:
            raise InvalidAssumptionError(
                f"mezzanine_financing ({self.mezzanine_financing}) cannot exceed "
                f"debt_financing ({self.debt_financing})"
            )


@dataclass
class LboProjectionRow:
    year: Year
    ebitda: float
    cash_flow: float
    ending_debt_balance: float


@dataclass
class LboResult:
    """LBO output. An all-zero result means the deal could not be modeled."""
    projections: List[LboProjectionRow]
    initial_senior_debt: float
    initial_mezzanine_debt: float
    initial_equity: float
    exit_equity_value: float
    total_dividends_paid: float
    irr: float
    moic: float

    @classmethod
    def empty(cls) -> "LboResult":
        return cls(
            projections=[],
            initial_senior_debt=0.0,
            initial_mezzanine_debt=0.0,
            initial_equity=0.0,
            exit_equity_value=0.0,
            total_dividends_paid=0.0,
            irr=0.0,
            moic=0.0,
        )

    @property
    def is_empty(self) -> bool:
        return not self.projections


# ============================================================================
# Peers
# ============================================================================


@dataclass
class Quartiles:
    q1: Optional[float] = None
    median: Optional[float] = None
    q3: Optional[float] = None


@dataclass
class PeerComparisonResult:
    base_ticker: str
    peers: List[str]
    multiples: List[str]
    quartiles: Dict[str, Quartiles]
    positions: Dict[str, Dict[str, str]]
    sentiment_badge: str
    commentary_text: str


# ============================================================================
# Scenario wrapper
# ============================================================================


@dataclass
class ScenarioResult:
    """Classifier output paired with the engine output it describes."""
    sentiment_badge: str
    commentary_text: str
    outputs: Any
    scenario_id: Optional[ScenarioId] = None
