"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
"""

from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from auction_tracker.api.entries import EntriesResponse, EntryModel, to_domain, to_response
from auction_tracker.calculations import amortization, engine, portfolio, summary, sweep
from auction_tracker.config import get_settings
from auction_tracker.models import AmortizationSystem, Category, PurchaseType, Scenario

router = APIRouter()


class PropertyRequest(BaseModel):
    """Entry collection plus the property/scenario to calculate."""

    entries: List[EntryModel] = []
    property_name: str
    scenario: Scenario = Scenario.projected
    today: Optional[date] = None


@router.post("/recompute", response_model=EntriesResponse)
async def recompute(inputs: PropertyRequest):
    """Recompute every derived field of a property/scenario."""
    settings = get_settings()
    entries = to_domain(inputs.entries)
    params = engine.simulation_params_for(entries, inputs.property_name, inputs.scenario, settings)
    entries = engine.recompute_all(
        entries, inputs.property_name, inputs.scenario, params, settings.write_tolerance
    )
    return to_response(entries, params)


class BreakdownModel(BaseModel):
    sale: float
    capital_employed: float
    fixed_costs: float
    duration_months: float
    costs: Dict[str, float]


class SummaryResponse(BaseModel):
    """Headline metrics of one scenario."""

    total_profit: float
    roi_total: float
    roi_monthly: float
    profit_per_share: float
    breakdown: BreakdownModel


@router.post("/summary", response_model=SummaryResponse)
async def calculate_summary(inputs: PropertyRequest):
    """Profit, ROI and cost breakdown of a property in one scenario."""
    result = summary.summarize(
        to_domain(inputs.entries), inputs.property_name, inputs.scenario, inputs.today
    )
    return SummaryResponse(**asdict(result))


class ComparisonResponse(BaseModel):
    projected: SummaryResponse
    executed: SummaryResponse
    deltas: Dict[str, float]


@router.post("/compare", response_model=ComparisonResponse)
async def calculate_comparison(inputs: PropertyRequest):
    """Projected vs executed summaries of a property."""
    result = summary.compare(to_domain(inputs.entries), inputs.property_name, inputs.today)
    return ComparisonResponse(**asdict(result))


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_interest_rate: float = 9.5
    term_months: int = 360
    amortization_system: AmortizationSystem = AmortizationSystem.sac
    total_months: int = 0
    month_offset: int = engine.BALANCE_SNAPSHOT_MONTH


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule and the position at ``month_offset``."""
    rows = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate_pct=inputs.annual_interest_rate,
        term_months=inputs.term_months,
        system=inputs.amortization_system,
        total_months=inputs.total_months,
    )
    snapshot = amortization.schedule(
        inputs.principal,
        inputs.annual_interest_rate,
        inputs.term_months,
        inputs.amortization_system,
        inputs.month_offset,
    )

    return {
        "schedule": rows,
        "total_interest": amortization.calculate_total_interest(rows),
        "total_principal": sum(row["principal"] for row in rows),
        "snapshot": asdict(snapshot),
    }


class SweepInput(BaseModel):
    """Input for the viability calculator and its sensitivity table."""

    name: str = "Simulação 1"
    months_to_sale: int = 12
    sale_value: float = 0.0
    broker_percent: float = 5.0
    bid: float = 0.0
    bid_increment: float = 5000.0
    auctioneer_percent: float = 5.0
    auctioneer_value: float = 0.0
    itbi_percent: float = 2.0
    itbi_value: float = 0.0
    registry_cost: float = 0.0
    deed_cost: float = 0.0
    renovation_cost: float = 0.0
    eviction_cost: float = 0.0
    monthly_condo: float = 0.0
    annual_property_tax: float = 0.0
    purchase_type: PurchaseType = PurchaseType.cash
    down_payment_percent: float = 20.0
    annual_interest_rate: float = 9.5
    term_months: int = 360
    amortization_system: AmortizationSystem = AmortizationSystem.sac
    capital_gains_percent: float = 15.0

    increment: Optional[float] = None
    row_count: Optional[int] = None


class ViabilityBreakdownModel(BaseModel):
    auctioneer_commission: float
    itbi: float
    registry_total: float
    preparation_total: float
    broker_commission: float
    income_tax: float
    payoff_balance: float
    installments_paid: float
    financing_cost: float


class SweepRowModel(BaseModel):
    bid: float
    net_profit: float
    roi_total: float
    roi_monthly: float
    capital_invested: float
    breakdown: ViabilityBreakdownModel


class SweepResponse(BaseModel):
    """Result at the entered bid plus the sensitivity table."""

    base: SweepRowModel
    rows: List[SweepRowModel]


@router.post("/sweep", response_model=SweepResponse)
async def calculate_sweep(inputs: SweepInput):
    """Evaluate the deal at the bid and at ``row_count`` increasing bids."""
    settings = get_settings()
    viability = sweep.ViabilityInputs(**inputs.model_dump(exclude={"increment", "row_count"}))
    row_count = inputs.row_count if inputs.row_count is not None else settings.sweep_row_count

    base = sweep.calculate_viability(viability)
    rows = sweep.sweep(viability, inputs.increment, row_count)
    return SweepResponse(
        base=SweepRowModel(**asdict(base)),
        rows=[SweepRowModel(**asdict(row)) for row in rows],
    )


class PortfolioRequest(BaseModel):
    """Entry collection plus dashboard filters."""

    entries: List[EntryModel] = []
    scenario: Scenario = Scenario.projected
    states: List[str] = []
    properties: List[str] = []
    purchase_types: List[PurchaseType] = []
    sold: List[bool] = []
    categories: List[Category] = []


@router.post("/portfolio")
async def calculate_portfolio(inputs: PortfolioRequest):
    """Revenue, costs, profit and per-property ROI across the portfolio."""
    filters = portfolio.PortfolioFilters(
        states=inputs.states,
        properties=inputs.properties,
        purchase_types=inputs.purchase_types,
        sold=inputs.sold,
        categories=inputs.categories,
    )
    kpis = portfolio.portfolio_kpis(to_domain(inputs.entries), inputs.scenario, filters)
    return asdict(kpis)
