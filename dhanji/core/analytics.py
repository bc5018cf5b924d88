# dhanji/core/analytics.py
import datetime
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from dhanji.core.errors import InvalidArgumentError
from dhanji.core.finance import sort_by_recency, totals_by_type, type_breakdown
from dhanji.core.models import Transaction
from dhanji.utils.formatting import DateLike, to_date

logger = logging.getLogger(__name__)

PERIODS = {
    "week": pd.DateOffset(days=7),
    "month": pd.DateOffset(months=1),
    "year": pd.DateOffset(years=1),
}

COLUMNS = ["id", "amount", "category", "description", "date", "type"]


def _today(today: Optional[DateLike]) -> datetime.date:
    return to_date(today) if today is not None else datetime.date.today()


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Builds a DataFrame with one row per transaction and dates at midnight."""
    df = pd.DataFrame([t.model_dump() for t in transactions], columns=COLUMNS)
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"]).dt.normalize()
    df["amount"] = df["amount"].astype(float)
    return df


def period_start(period: str, today: Optional[DateLike] = None) -> datetime.date:
    """
    First day included in a week/month/year window ending today.
    A month back from the 31st lands on the last day of the shorter month.
    """
    if period not in PERIODS:
        raise InvalidArgumentError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")
    return (pd.Timestamp(_today(today)) - PERIODS[period]).date()


def filter_by_period(df: pd.DataFrame, period: str, today: Optional[DateLike] = None) -> pd.DataFrame:
    start = pd.Timestamp(period_start(period, today))
    if df.empty:
        return df
    return df[df["date"] >= start]


def category_breakdown(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Expense total per category, largest first."""
    if df.empty:
        return []
    expenses = df[df["type"] == "expense"]
    if expenses.empty:
        return []
    per_category = expenses.groupby("category")["amount"].agg(math.fsum)
    per_category = per_category.sort_values(ascending=False, kind="stable")
    return [{"name": name, "value": float(value)} for name, value in per_category.items()]


def spending_trend(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Income and expense per calendar day, oldest day first.
    Every day with at least one transaction gets a row, even if it only holds
    savings or investments.
    """
    if df.empty:
        return []
    days = df["date"].dt.strftime("%Y-%m-%d")
    income = df[df["type"] == "income"].groupby(days)["amount"].agg(math.fsum)
    expense = df[df["type"] == "expense"].groupby(days)["amount"].agg(math.fsum)
    return [
        {"date": day, "income": float(income.get(day, 0.0)), "expense": float(expense.get(day, 0.0))}
        for day in sorted(days.unique())
    ]


def analyze(transactions: List[Transaction], period: str = "month",
            today: Optional[DateLike] = None) -> Dict[str, Any]:
    """
    Chart data for the analytics view.

    `category_data` and `spending_trend` only cover the selected period.
    `summary` and `income_vs_expense` cover every transaction given.
    """
    df = filter_by_period(transactions_frame(transactions), period, today)
    logger.debug("Analysing %d of %d transactions for period %s", len(df), len(transactions), period)
    return {
        "period": period,
        "category_data": category_breakdown(df),
        "spending_trend": spending_trend(df),
        "income_vs_expense": type_breakdown(transactions),
        "summary": totals_by_type(transactions).as_dict(),
    }


# --- Calendar ---
def month_start(month: DateLike) -> datetime.date:
    return to_date(month).replace(day=1)


def previous_month(month: DateLike) -> datetime.date:
    return (pd.Timestamp(month_start(month)) - pd.DateOffset(months=1)).date()


def next_month(month: DateLike) -> datetime.date:
    return (pd.Timestamp(month_start(month)) + pd.DateOffset(months=1)).date()


def daily_summaries(transactions: Iterable[Transaction], month: DateLike) -> Dict[str, float]:
    """Net amount (income minus expense) for every day of the month.
    Days without transactions are present with 0.0.
    """
    start = pd.Timestamp(month_start(month))
    end = start + pd.offsets.MonthEnd(0)
    days = pd.date_range(start, end, freq="D")
    summaries = {day.strftime("%Y-%m-%d"): 0.0 for day in days}

    df = transactions_frame(transactions)
    if df.empty:
        return summaries
    df = df[(df["date"] >= start) & (df["date"] <= end)]
    signed = df["amount"].where(df["type"] == "income", -df["amount"])
    signed = signed[df["type"].isin(["income", "expense"])]
    if signed.empty:
        return summaries
    per_day = signed.groupby(df.loc[signed.index, "date"].dt.strftime("%Y-%m-%d")).agg(math.fsum)
    for day, value in per_day.items():
        summaries[day] = float(value)
    return summaries


def day_details(transactions: Iterable[Transaction], day: DateLike) -> Dict[str, Any]:
    """Income, expense and net for one day, with that day's transactions."""
    target = to_date(day)
    on_day = [t for t in transactions if t.date == target]
    totals = totals_by_type(on_day)
    return {
        "date": target.isoformat(),
        "income": totals.income,
        "expense": totals.expense,
        "net": totals.balance,
        "transactions": sort_by_recency(on_day),
    }
