"""
Domain models for auction investment tracking.

A property is not stored on its own: it is the grouping of every
``FinancialEntry`` that shares a ``property_name``. Property metadata is
duplicated on each entry and read from the first ("anchor") one.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Union

from auction_tracker.formatters import to_share_count


class Scenario(str, enum.Enum):
    """Projected (planned) vs executed (realized) numbers."""
    projected = "Projetado"
    executed = "Executado"


class Category(str, enum.Enum):
    """Expense category of a line item."""
    sale = "Venda"
    acquisition_cost = "Custo Aquisição"
    preparation_cost = "Custo Preparação"
    maintenance_cost = "Custo Manutenção Anual"


class PurchaseType(str, enum.Enum):
    cash = "À Vista"
    financed = "Financiado"


class AmortizationSystem(str, enum.Enum):
    sac = "SAC"
    price = "Price"


class PropertyStatus(str, enum.Enum):
    in_progress = "em_andamento"
    finished = "finalizado"


class Label(str, enum.Enum):
    """Known line items. The value is the label text stored on entries."""

    # Sale
    sale = "Venda"
    broker_commission = "Comissão Corretor"
    capital_gains_tax = "Imposto de Ganho de Capital"
    outstanding_balance = "Saldo Devedor"

    # Acquisition
    acquisition_value = "Valor Aquisição"
    down_payment = "Entrada"
    itbi = "ITBI"
    registry = "Registro"
    agent_fee = "Despachante"
    auctioneer_commission = "Comissão Leiloeiro"
    deed_fee = "Taxa Financiamento/Escritura"

    # Preparation
    renovation = "Reforma"
    vacancy = "Desocupação"
    debt = "Dívida"

    # Annual maintenance
    installment = "Prestação"
    condo = "Condomínio"
    property_tax = "IPTU"

    @property
    def category(self) -> Category:
        return LABEL_CATEGORIES[self]


LABEL_CATEGORIES: Dict[Label, Category] = {
    Label.sale: Category.sale,
    Label.broker_commission: Category.sale,
    Label.capital_gains_tax: Category.sale,
    Label.outstanding_balance: Category.sale,
    Label.acquisition_value: Category.acquisition_cost,
    Label.down_payment: Category.acquisition_cost,
    Label.itbi: Category.acquisition_cost,
    Label.registry: Category.acquisition_cost,
    Label.agent_fee: Category.acquisition_cost,
    Label.auctioneer_commission: Category.acquisition_cost,
    Label.deed_fee: Category.acquisition_cost,
    Label.renovation: Category.preparation_cost,
    Label.vacancy: Category.preparation_cost,
    Label.debt: Category.preparation_cost,
    Label.installment: Category.maintenance_cost,
    Label.condo: Category.maintenance_cost,
    Label.property_tax: Category.maintenance_cost,
}


@dataclass(frozen=True)
class CustomLabel:
    """User-defined line item ("Outros") with a user-chosen category."""

    name: str
    category: Category


LabelKey = Union[Label, CustomLabel, str]


def parse_label(text: str, category: Optional[Category] = None) -> Union[Label, CustomLabel]:
    """
    Map label text to a known label, or to a custom label.

    Args:
        text: Label text as stored on entries
        category: Category for custom labels (ignored for known labels)

    Raises:
        ValueError: If the text is not a known label and no category is given
    """
    if isinstance(text, (Label, CustomLabel)):
        return text
    try:
        return Label(text)
    except ValueError:
        if category is None:
            raise ValueError(f"Custom label '{text}' requires a category")
        return CustomLabel(name=text, category=Category(category))


def label_text(label: LabelKey) -> str:
    """Text under which a label is stored."""
    if isinstance(label, Label):
        return label.value
    if isinstance(label, CustomLabel):
        return label.name
    return str(label)


def label_category(label: LabelKey, category: Optional[Category] = None) -> Category:
    """Category for a label, preferring an explicitly supplied one."""
    if category is not None:
        return Category(category)
    return parse_label(label).category


class OverrideState(str, enum.Enum):
    """Per-field edit state: recomputed automatically, or pinned by the user."""
    auto = "auto"
    manual = "manual"


class EditSource(str, enum.Enum):
    """What caused a write to a field."""
    direct_edit = "direct_edit"
    percentage_edit = "percentage_edit"
    automatic = "automatic"
    parameter_reset = "parameter_reset"


OVERRIDE_TRANSITIONS: Dict[OverrideState, Dict[EditSource, OverrideState]] = {
    OverrideState.auto: {
        EditSource.direct_edit: OverrideState.manual,
        EditSource.percentage_edit: OverrideState.auto,
        EditSource.automatic: OverrideState.auto,
        EditSource.parameter_reset: OverrideState.auto,
    },
    OverrideState.manual: {
        EditSource.direct_edit: OverrideState.manual,
        EditSource.percentage_edit: OverrideState.auto,
        EditSource.automatic: OverrideState.manual,
        EditSource.parameter_reset: OverrideState.auto,
    },
}


def next_override_state(current: OverrideState, source: EditSource) -> OverrideState:
    return OVERRIDE_TRANSITIONS[current][source]


def generate_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class FinancialEntry:
    """One labeled monetary line item of a property in one scenario."""

    property_name: str
    scenario: Scenario
    category: Category
    label: str
    cash_flow: float = 0.0  # positive = inflow, negative = outflow
    share_count: int = 1
    manual_override: bool = False
    applied_percentage: Optional[float] = None
    sale_duration_months: Optional[float] = None  # executed scenario only

    # Property metadata, duplicated on every entry of the property
    state: str = "SP"
    city: str = ""
    purchase_type: PurchaseType = PurchaseType.cash
    purchase_date: Optional[date] = None
    sale_date: Optional[date] = None
    sold: bool = False
    status: PropertyStatus = PropertyStatus.in_progress

    # Financing simulation parameters
    annual_interest_rate: Optional[float] = None
    term_months: Optional[int] = None
    amortization_system: Optional[AmortizationSystem] = None

    entry_id: str = field(default_factory=generate_id)

    def __post_init__(self):
        object.__setattr__(self, "share_count", to_share_count(self.share_count))

    @property
    def share(self) -> float:
        """Co-investor slice of the cash flow (cota)."""
        return self.cash_flow / self.share_count

    @property
    def amount(self) -> float:
        return abs(self.cash_flow)

    @property
    def override_state(self) -> OverrideState:
        return OverrideState.manual if self.manual_override else OverrideState.auto


@dataclass(frozen=True)
class PropertyInfo:
    """Property-level metadata as seen from one scenario."""

    property_name: str
    scenario: Scenario
    state: str = "SP"
    city: str = ""
    purchase_type: PurchaseType = PurchaseType.cash
    purchase_date: Optional[date] = None
    sale_date: Optional[date] = None
    sold: bool = False
    share_count: int = 1
    status: PropertyStatus = PropertyStatus.in_progress
    annual_interest_rate: Optional[float] = None
    term_months: Optional[int] = None
    amortization_system: Optional[AmortizationSystem] = None


@dataclass(frozen=True)
class SimulationParams:
    """
    Per-property configuration for the derived-field engine.

    Percentages are expressed as percent (2.0 means 2%).
    """

    itbi_percent: float = 2.0
    broker_percent: float = 5.0
    auctioneer_percent: float = 5.0
    down_payment_percent: float = 5.0
    capital_gains_percent: float = 15.0
    annual_interest_rate: float = 9.5
    term_months: int = 360
    amortization_system: AmortizationSystem = AmortizationSystem.sac
