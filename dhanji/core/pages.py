# dhanji/core/pages.py
"""
Data for each screen of the app.

Every loader fetches the lists it needs through `dhanji.core.db`, runs them
through the calculations in `finance` and `analytics`, and returns plain
data ready to render. Loaders that need several lists fetch them one after
the other; if one fetch fails its part comes back empty while the others
still show.
"""
import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from dhanji.core import analytics, db, finance
from dhanji.core.errors import InvalidArgumentError
from dhanji.core.models import Budget, Debt
from dhanji.core.notifications import Notifier
from dhanji.utils.formatting import DateLike, format_currency
from dhanji.utils.text_utils import debt_type_label

logger = logging.getLogger(__name__)

# debt types with their own tab; "other" only shows under all debts
TRACKED_DEBT_TYPES = ("credit-card", "loan", "emi")


def budget_view(budget: Budget) -> Dict[str, Any]:
    return {
        "budget": budget,
        "percentage": finance.budget_percentage(budget.spent, budget.limit),
        "remaining": finance.budget_remaining(budget),
        "overspent": finance.is_overspent(budget),
        "label": f"{format_currency(budget.spent)} / {format_currency(budget.limit)}",
    }


def debt_view(debt: Debt) -> Dict[str, Any]:
    try:
        progress = finance.debt_progress(debt.total_amount, debt.remaining_amount)
    except InvalidArgumentError:
        logger.warning("Debt %s has a non-positive total; progress not shown", debt.id)
        progress = None
    return {
        "debt": debt,
        "progress": progress,
        "paid": finance.debt_paid(debt),
        "type_label": debt_type_label(debt.type),
    }


def bill_view(bill: finance.Bill, today: Optional[DateLike] = None) -> Dict[str, Any]:
    days, status, label = bill.status(today)
    return {"bill": bill, "days_until_due": days, "status": status, "label": label}


def load_dashboard(supabase_client: Client, notifier: Optional[Notifier] = None,
                   today: Optional[DateLike] = None) -> Dict[str, Any]:
    transactions = db.get_transactions(supabase_client, notifier)
    budgets = db.get_budgets(supabase_client, notifier)
    subscriptions = db.get_subscriptions(supabase_client, notifier)
    debts = db.get_debts(supabase_client, notifier)

    return {
        "totals": finance.totals_by_type(transactions).as_dict(),
        "recent_transactions": finance.recent_transactions(transactions, 5),
        "top_budgets": [budget_view(b) for b in finance.top_budgets(budgets, 3)],
        "upcoming_bills": [bill_view(b, today) for b in finance.upcoming_bills(subscriptions, debts, 3)],
    }


def load_transactions(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Any]:
    return finance.sort_by_recency(db.get_transactions(supabase_client, notifier))


def load_budgets(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Dict[str, Any]]:
    return [budget_view(b) for b in db.get_budgets(supabase_client, notifier)]


def load_bills(supabase_client: Client, notifier: Optional[Notifier] = None,
               today: Optional[DateLike] = None) -> Dict[str, Any]:
    subscriptions = db.get_subscriptions(supabase_client, notifier)
    debts = db.get_debts(supabase_client, notifier)
    return {
        "subscriptions": subscriptions,
        "debts": [debt_view(d) for d in debts],
        "total_debt": finance.total_debt(debts),
        "bills": [bill_view(b, today) for b in finance.upcoming_bills(subscriptions, debts, limit=None)],
    }


def load_debt_tracker(supabase_client: Client, notifier: Optional[Notifier] = None) -> Dict[str, Any]:
    """All debts with their total, plus the same view for each tabbed debt type."""
    debts = db.get_debts(supabase_client, notifier)
    by_type = {}
    for debt_type in TRACKED_DEBT_TYPES:
        of_type = [d for d in debts if d.type == debt_type]
        by_type[debt_type] = {
            "debts": [debt_view(d) for d in of_type],
            "total_debt": finance.total_debt(of_type),
        }
    return {
        "debts": [debt_view(d) for d in debts],
        "total_debt": finance.total_debt(debts),
        "by_type": by_type,
    }


def load_analytics(supabase_client: Client, notifier: Optional[Notifier] = None,
                   period: str = "month", today: Optional[DateLike] = None) -> Dict[str, Any]:
    transactions = db.get_transactions(supabase_client, notifier)
    return analytics.analyze(transactions, period, today)


def load_calendar(supabase_client: Client, month: DateLike,
                  notifier: Optional[Notifier] = None,
                  selected_day: Optional[DateLike] = None) -> Dict[str, Any]:
    transactions = db.get_transactions(supabase_client, notifier)
    return {
        "month": analytics.month_start(month).isoformat(),
        "daily_summaries": analytics.daily_summaries(transactions, month),
        "day_details": analytics.day_details(transactions, selected_day) if selected_day is not None else None,
    }
