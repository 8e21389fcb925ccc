"""
Entry editing API endpoints.

The service keeps no state: every request carries the entry collection it
operates on and receives the updated collection back.
"""

from dataclasses import asdict
from datetime import date
from typing import Iterable, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from auction_tracker.calculations import engine, resolver
from auction_tracker.config import get_settings
from auction_tracker import store
from auction_tracker.models import (
    AmortizationSystem,
    Category,
    FinancialEntry,
    PropertyStatus,
    PurchaseType,
    Scenario,
    SimulationParams,
    generate_id,
)

router = APIRouter()


class EntryModel(BaseModel):
    """Schema for one financial entry."""

    entry_id: str = Field(default_factory=generate_id)
    property_name: str
    scenario: Scenario
    category: Category
    label: str
    cash_flow: float = 0.0
    share_count: int = 1
    manual_override: bool = False
    applied_percentage: Optional[float] = None
    sale_duration_months: Optional[float] = None

    state: str = "SP"
    city: str = ""
    purchase_type: PurchaseType = PurchaseType.cash
    purchase_date: Optional[date] = None
    sale_date: Optional[date] = None
    sold: bool = False
    status: PropertyStatus = PropertyStatus.in_progress

    annual_interest_rate: Optional[float] = None
    term_months: Optional[int] = None
    amortization_system: Optional[AmortizationSystem] = None

    class Config:
        from_attributes = True


class SimulationParamsModel(BaseModel):
    """Schema for per-property engine parameters."""

    itbi_percent: float
    broker_percent: float
    auctioneer_percent: float
    down_payment_percent: float
    capital_gains_percent: float
    annual_interest_rate: float
    term_months: int
    amortization_system: AmortizationSystem


class EntriesResponse(BaseModel):
    """Updated entry collection, with the parameters used to recompute it."""

    entries: List[EntryModel]
    params: Optional[SimulationParamsModel] = None


def to_domain(entries: Iterable[EntryModel]) -> List[FinancialEntry]:
    return [FinancialEntry(**entry.model_dump()) for entry in entries]


def to_response(
    entries: Iterable[FinancialEntry], params: Optional[SimulationParams] = None
) -> EntriesResponse:
    return EntriesResponse(
        entries=[EntryModel.model_validate(entry) for entry in entries],
        params=SimulationParamsModel(**asdict(params)) if params is not None else None,
    )


class SetValueRequest(BaseModel):
    """Input for writing a line item."""

    entries: List[EntryModel] = []
    property_name: str
    scenario: Scenario
    label: str
    amount: Union[float, str]
    category: Optional[Category] = None
    is_automatic: bool = False
    new_percentage: Optional[float] = None
    recompute: bool = True


@router.post("/value", response_model=EntriesResponse)
async def set_entry_value(inputs: SetValueRequest):
    """Write an amount and, by default, recompute the property's derived fields."""
    settings = get_settings()
    try:
        entries = store.set_value(
            to_domain(inputs.entries),
            inputs.property_name,
            inputs.scenario,
            inputs.category,
            inputs.label,
            inputs.amount,
            is_automatic=inputs.is_automatic,
            new_percentage=inputs.new_percentage,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not inputs.recompute:
        return to_response(entries)

    params = engine.simulation_params_for(entries, inputs.property_name, inputs.scenario, settings)
    entries = engine.recompute_all(
        entries, inputs.property_name, inputs.scenario, params, settings.write_tolerance
    )
    return to_response(entries, params)


class ResolveRequest(BaseModel):
    """Input for reading the effective value of a line item."""

    entries: List[EntryModel] = []
    property_name: str
    scenario: Scenario
    label: str


class ResolveResponse(BaseModel):
    value: float
    source_scenario: Optional[Scenario] = None
    manual_override: bool = False


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_entry_value(inputs: ResolveRequest):
    """Effective value of a label, with executed falling back to projected."""
    entries = to_domain(inputs.entries)
    entry = resolver.resolve_entry(entries, inputs.property_name, inputs.scenario, inputs.label)
    if entry is None:
        return ResolveResponse(value=0.0)
    return ResolveResponse(
        value=entry.amount,
        source_scenario=entry.scenario,
        manual_override=entry.manual_override,
    )


class PercentageRequest(BaseModel):
    """Input for a percentage slider change."""

    entries: List[EntryModel] = []
    property_name: str
    scenario: Scenario
    kind: engine.PercentageKind
    percent: float


@router.post("/percentage", response_model=EntriesResponse)
async def set_entry_percentage(inputs: PercentageRequest):
    """Apply a percentage to its target field and recompute."""
    entries = to_domain(inputs.entries)
    params = engine.simulation_params_for(entries, inputs.property_name, inputs.scenario)
    entries, params = engine.set_percentage(
        entries, inputs.property_name, inputs.scenario, inputs.kind, inputs.percent, params
    )
    return to_response(entries, params)


class SimulationRequest(BaseModel):
    """Input for a financing parameter change."""

    entries: List[EntryModel] = []
    property_name: str
    scenario: Scenario
    key: str
    value: Union[float, str]


@router.post("/simulation", response_model=EntriesResponse)
async def change_simulation(inputs: SimulationRequest):
    """Change the interest rate, term or amortization system and recompute."""
    entries = to_domain(inputs.entries)
    params = engine.simulation_params_for(entries, inputs.property_name, inputs.scenario)
    try:
        entries, params = engine.change_simulation_parameter(
            entries, inputs.property_name, inputs.scenario, inputs.key, inputs.value, params
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return to_response(entries, params)
