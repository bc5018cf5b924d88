# dhanji/core/finance.py
"""
Pure calculations over records already fetched from Supabase.

Nothing here performs I/O or mutates its inputs. Percentages and progress
values share one rule: a non-positive denominator is a caller error and
raises InvalidArgumentError instead of producing inf/NaN or a silent 0.
"""
import datetime
import math
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dhanji.core.errors import InvalidArgumentError
from dhanji.core.models import TRANSACTION_TYPES, Budget, Debt, Subscription, Transaction
from dhanji.utils.formatting import DateLike, to_date
from dhanji.utils.text_utils import capitalize_first

DUE_SOON_DAYS = 3


def js_round(value: float) -> int:
    """Rounds halves up (towards +inf), like JavaScript's Math.round."""
    return math.floor(value + 0.5)


def _require_positive(value: float, what: str) -> None:
    if not value > 0:
        raise InvalidArgumentError(f"{what} must be greater than zero, got {value!r}")


# --- Budgets ---
def budget_percentage(spent: float, limit: float) -> int:
    """Share of a budget used, as a whole percentage capped at 100.
    Ex: (9000, 10000) -> 90
    Ex: (15000, 10000) -> 100
    """
    _require_positive(limit, "Budget limit")
    return min(js_round(spent / limit * 100), 100)


def budget_ratio(budget: Budget) -> float:
    _require_positive(budget.limit, "Budget limit")
    return budget.spent / budget.limit


def budget_remaining(budget: Budget) -> float:
    # negative when overspent
    return budget.limit - budget.spent


def is_overspent(budget: Budget) -> bool:
    return budget.spent > budget.limit


def top_budgets(budgets: Iterable[Budget], n: int = 3) -> List[Budget]:
    """The n budgets closest to (or furthest past) their limit."""
    return sorted(budgets, key=budget_ratio, reverse=True)[:n]


# --- Debts ---
def debt_progress(total_amount: float, remaining_amount: float) -> float:
    """Percentage of a debt already paid off, clamped to 0..100.
    Ex: (50000, 20000) -> 60.0
    """
    _require_positive(total_amount, "Debt total amount")
    paid = total_amount - remaining_amount
    return max(0.0, min(100.0, paid / total_amount * 100))


def debt_paid(debt: Debt) -> float:
    return debt.total_amount - debt.remaining_amount


def total_debt(debts: Iterable[Debt]) -> float:
    """Sum of what is still owed across debts."""
    return math.fsum(debt.remaining_amount for debt in debts)


# --- Transactions ---
class TypeTotals:
    """Per-type sums of a list of transactions."""

    def __init__(self, income: float = 0.0, expense: float = 0.0,
                 saving: float = 0.0, investment: float = 0.0):
        self.income = income
        self.expense = expense
        self.saving = saving
        self.investment = investment

    @property
    def balance(self) -> float:
        return self.income - self.expense

    def as_dict(self) -> Dict[str, float]:
        return {
            "income": self.income,
            "expense": self.expense,
            "saving": self.saving,
            "investment": self.investment,
            "balance": self.balance,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, TypeTotals):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        return (f"TypeTotals(income={self.income}, expense={self.expense}, "
                f"saving={self.saving}, investment={self.investment})")


def totals_by_type(transactions: Iterable[Transaction]) -> TypeTotals:
    """
    Sums amounts per transaction type.

    math.fsum keeps the result exact to the last bit, so the totals do not
    depend on the order of the input.
    """
    amounts: Dict[str, List[float]] = {t: [] for t in TRANSACTION_TYPES}
    for transaction in transactions:
        if transaction.type in amounts:
            amounts[transaction.type].append(transaction.amount)
    return TypeTotals(**{t: math.fsum(values) for t, values in amounts.items()})


def type_breakdown(transactions: Iterable[Transaction]) -> List[Dict[str, object]]:
    """Total per type, in order of first appearance, labelled for charts."""
    amounts: Dict[str, List[float]] = {}
    for transaction in transactions:
        amounts.setdefault(transaction.type, []).append(transaction.amount)
    return [{"name": capitalize_first(t), "value": math.fsum(values)} for t, values in amounts.items()]


def sort_by_recency(transactions: Iterable[Transaction]) -> List[Transaction]:
    """
    Newest date first. Transactions on the same date are ordered by id,
    descending, on the assumption that later records get larger ids. That
    only holds for monotonic ids; random UUIDs make the tie-break arbitrary.
    """
    return sorted(transactions, key=lambda t: (t.date, t.id or ""), reverse=True)


def recent_transactions(transactions: Iterable[Transaction], n: int = 5) -> List[Transaction]:
    return sort_by_recency(transactions)[:n]


# --- Due dates ---
class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


def days_until_due(due: DateLike, today: Optional[DateLike] = None) -> int:
    """Whole days from today until the due date; negative once overdue.
    Both ends are taken at midnight, so the ceiling of the difference is the
    plain day count.
    """
    start = to_date(today) if today is not None else datetime.date.today()
    return (to_date(due) - start).days


def classify_days(days: int) -> DueStatus:
    if days < 0:
        return DueStatus.OVERDUE
    if days == 0:
        return DueStatus.DUE_TODAY
    if days <= DUE_SOON_DAYS:
        return DueStatus.DUE_SOON
    return DueStatus.UPCOMING


def classify_due(due: DateLike, today: Optional[DateLike] = None) -> DueStatus:
    return classify_days(days_until_due(due, today))


def due_label(days: int) -> str:
    if days < 0:
        return f"Overdue by {abs(days)} days"
    if days == 0:
        return "Due today"
    return f"Due in {days} days"


# --- Bills ---
class Bill:
    """A subscription charge or a debt payment, viewed as something to pay."""

    def __init__(self, id: Optional[str], title: str, amount: float,
                 due_date: datetime.date, type: str, source: str):
        self.id = id
        self.title = title
        self.amount = amount
        self.due_date = due_date
        self.type = type
        self.source = source

    @classmethod
    def from_subscription(cls, subscription: Subscription) -> "Bill":
        return cls(subscription.id, subscription.name, subscription.amount,
                   subscription.next_billing_date, "subscription", "subscription")

    @classmethod
    def from_debt(cls, debt: Debt) -> "Bill":
        return cls(debt.id, debt.name, debt.minimum_payment, debt.due_date, debt.type, "debt")

    def status(self, today: Optional[DateLike] = None) -> Tuple[int, DueStatus, str]:
        days = days_until_due(self.due_date, today)
        return days, classify_days(days), due_label(days)

    def __repr__(self) -> str:
        return f"Bill({self.title!r}, {self.amount}, due={self.due_date.isoformat()}, type={self.type!r})"


def upcoming_bills(subscriptions: Sequence[Subscription], debts: Sequence[Debt],
                   limit: Optional[int] = 3) -> List[Bill]:
    """Subscriptions and debts merged and ordered by due date, closest first."""
    bills = [Bill.from_subscription(s) for s in subscriptions] + [Bill.from_debt(d) for d in debts]
    bills.sort(key=lambda bill: bill.due_date)
    return bills if limit is None else bills[:limit]
