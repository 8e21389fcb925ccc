"""
Loan Amortization Calculations

Implements the two Brazilian amortization systems used for financed
auction purchases:

- SAC (Sistema de Amortização Constante): fixed amortization, declining
  installments.
- Price (French table): constant installment, matching Excel's PMT().

Rates are annual percentages (9.5 means 9.5% a year), converted to a
monthly rate of pct / 100 / 12.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Union

from auction_tracker.formatters import to_number
from auction_tracker.models import AmortizationSystem


@dataclass(frozen=True)
class AmortizationRow:
    """One month of a loan schedule."""

    period: int
    beginning_balance: float
    payment: float
    interest: float
    principal: float
    ending_balance: float


@dataclass(frozen=True)
class LoanSnapshot:
    """Loan position at a given month offset."""

    installment: float
    accrued_interest_to_date: float
    outstanding_balance: float
    total_paid_to_date: float = 0.0


ZERO_SNAPSHOT = LoanSnapshot(0.0, 0.0, 0.0, 0.0)


def monthly_rate(annual_rate_pct: float) -> float:
    """Monthly rate as decimal; negative or invalid rates count as zero."""
    rate = to_number(annual_rate_pct)
    if rate <= 0:
        return 0.0
    return rate / 100 / 12


def calculate_payment(principal: float, annual_rate_pct: float, term_months: int) -> float:
    """
    Calculate the constant (Price) monthly installment.

    Matches Excel's PMT() function. Falls back to straight-line
    principal / term when the rate is negligible, and to the interest-only
    limit ``principal * rate`` when the rate factor overflows.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Annual interest rate in percent
        term_months: Total term in months

    Returns:
        Monthly installment (positive number)
    """
    principal = to_number(principal)
    term_months = int(to_number(term_months))
    if principal <= 0 or term_months <= 0:
        return 0.0

    rate = monthly_rate(annual_rate_pct)
    if _straight_line(rate):
        return principal / term_months

    try:
        factor = (1 + rate) ** term_months
    except OverflowError:
        # factor / (factor - 1) tends to 1
        return principal * rate

    return principal * (rate * factor) / (factor - 1)


def _straight_line(rate: float) -> bool:
    """True when the monthly rate vanishes next to 1, so any power of (1 + rate) is 1."""
    return 1 + rate == 1


def iter_amortization(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
    system: Union[AmortizationSystem, str] = AmortizationSystem.sac,
) -> Iterator[AmortizationRow]:
    """
    Simulate a loan month by month until it is paid off.

    SAC has no closed form for a given month's interest, so both systems
    are simulated the same way. The balance never goes below zero: the last
    installment is clamped to whatever is left.
    """
    principal = to_number(principal)
    term_months = int(to_number(term_months))
    if principal <= 0 or term_months <= 0:
        return

    system = AmortizationSystem(system)
    rate = monthly_rate(annual_rate_pct)
    straight_line = _straight_line(rate)
    if straight_line:
        rate = 0.0

    constant_amortization = principal / term_months
    pmt = (
        calculate_payment(principal, annual_rate_pct, term_months)
        if system == AmortizationSystem.price
        else 0.0
    )
    balance = principal
    period = 0

    while balance > 0:
        period += 1
        interest = balance * rate

        if system == AmortizationSystem.sac or straight_line:
            principal_pmt = min(constant_amortization, balance)
        else:
            principal_pmt = min(pmt - interest, balance)
            # Floating point leaves a residue after the last Price installment
            if period >= term_months:
                principal_pmt = balance

        ending_balance = max(0.0, balance - principal_pmt)
        if ending_balance < 1e-9:
            ending_balance = 0.0

        yield AmortizationRow(
            period=period,
            beginning_balance=balance,
            payment=principal_pmt + interest,
            interest=interest,
            principal=principal_pmt,
            ending_balance=ending_balance,
        )

        balance = ending_balance


def schedule(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
    system: Union[AmortizationSystem, str],
    month_offset: int,
) -> LoanSnapshot:
    """
    Loan figures at a given month offset.

    Args:
        principal: Amount financed
        annual_rate_pct: Annual interest rate in percent
        term_months: Loan term in months
        system: SAC or Price
        month_offset: Number of installments already paid

    Returns:
        LoanSnapshot with the installment due in month ``month_offset``
        (month 1 when the offset is 0), interest and payments accumulated
        over months 1..offset, and the balance after ``month_offset``
        installments. All zeros for a non-positive principal or term.
    """
    principal = to_number(principal)
    term_months = int(to_number(term_months))
    month_offset = max(0, int(to_number(month_offset)))
    if principal <= 0 or term_months <= 0:
        return ZERO_SNAPSHOT

    installment = 0.0
    accrued_interest = 0.0
    total_paid = 0.0
    outstanding = principal
    target_month = max(1, month_offset)

    for row in iter_amortization(principal, annual_rate_pct, term_months, system):
        if row.period == target_month:
            installment = row.payment
        if row.period <= month_offset:
            accrued_interest += row.interest
            total_paid += row.payment
            outstanding = row.ending_balance
        if row.period >= target_month:
            break

    return LoanSnapshot(
        installment=installment,
        accrued_interest_to_date=accrued_interest,
        outstanding_balance=outstanding,
        total_paid_to_date=total_paid,
    )


def generate_amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
    system: Union[AmortizationSystem, str] = AmortizationSystem.sac,
    total_months: int = 0,
) -> List[Dict]:
    """
    Generate an amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Annual interest rate in percent
        term_months: Loan term in months
        system: SAC or Price
        total_months: Number of months to return (0 = until paid off)

    Returns:
        List of amortization rows
    """
    rows = []
    for row in iter_amortization(principal, annual_rate_pct, term_months, system):
        if total_months and row.period > total_months:
            break
        rows.append(
            {
                "period": row.period,
                "beginning_balance": round(row.beginning_balance, 2),
                "payment": round(row.payment, 2),
                "interest": round(row.interest, 2),
                "principal": round(row.principal, 2),
                "ending_balance": round(row.ending_balance, 2),
            }
        )
    return rows


def calculate_total_interest(schedule_rows: List[Dict]) -> float:
    """Calculate total interest paid over the rows of a schedule."""
    return sum(row["interest"] for row in schedule_rows)
