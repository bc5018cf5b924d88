# dhanji/core/charts.py
import io
import logging
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd

from dhanji.core import analytics
from dhanji.core.finance import type_breakdown
from dhanji.core.models import Budget, Transaction
from dhanji.utils.formatting import DateLike, format_currency

logger = logging.getLogger(__name__)

# Global chart look
plt.style.use('seaborn-v0_8-darkgrid')
plt.rcParams['font.family'] = 'sans-serif'
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['legend.fontsize'] = 10

COLORS = {
    'income': '#4ade80',
    'expense': '#f87171',
    'saving': '#60a5fa',
    'investment': '#c084fc',
    'balance': '#007bff',
    'limit': 'darkgreen',
    'slices': ['#8884d8', '#83a6ed', '#8dd1e1', '#82ca9d', '#a4de6c', '#d0ed57', '#ffc658'],
}

CURRENCY_AXIS = mticker.FuncFormatter(lambda value, _: format_currency(value))


def _to_png(fig) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=150)
    buf.seek(0)
    plt.close(fig)
    return buf


def generate_category_spending_chart(transactions: List[Transaction],
                                     budgets: Optional[List[Budget]] = None,
                                     period: str = "month",
                                     today: Optional[DateLike] = None) -> Union[io.BytesIO, None]:
    """Bar chart of expenses per category, with each category's budget limit drawn over its bar."""
    df = analytics.filter_by_period(analytics.transactions_frame(transactions), period, today)
    category_data = analytics.category_breakdown(df)
    if not category_data:
        return None

    names = [item['name'] for item in category_data]
    values = [item['value'] for item in category_data]
    limits = {budget.category: budget.limit for budget in budgets or []}

    fig, ax = plt.subplots(figsize=(12, 7))
    bars = ax.bar(names, values, color=COLORS['slices'], label='Spent')
    ax.set_title('Spending by Category vs. Budget', fontweight='bold')
    ax.set_ylabel('Amount')
    ax.set_xlabel('Category')
    ax.tick_params(axis='x', labelrotation=45)
    ax.bar_label(bars, labels=[format_currency(v) for v in values], fontsize=8, padding=3)

    limit_label = 'Budget limit'
    for i, name in enumerate(names):
        limit = limits.get(name)
        if limit is None or limit <= 0:
            continue
        bar_x = bars[i].get_x()
        bar_width = bars[i].get_width()
        ax.hlines(limit, bar_x, bar_x + bar_width, colors=COLORS['limit'],
                  linestyles='--', label=limit_label)
        limit_label = '_nolegend_'
        if values[i] > limit:
            ax.text(bar_x + bar_width / 2, max(values[i], limit), 'EXCEEDED!',
                    ha='center', va='bottom', color='red', fontsize=9, weight='bold')

    ax.yaxis.set_major_formatter(CURRENCY_AXIS)
    handles, labels = ax.get_legend_handles_labels()
    unique = dict(zip(labels, handles))
    ax.legend(unique.values(), unique.keys())
    fig.tight_layout()
    return _to_png(fig)


def generate_trend_chart(transactions: List[Transaction], period: str = "month",
                         today: Optional[DateLike] = None) -> Union[io.BytesIO, None]:
    """Line chart of daily income and expense over the selected period."""
    df = analytics.filter_by_period(analytics.transactions_frame(transactions), period, today)
    trend = analytics.spending_trend(df)
    if not trend:
        return None

    trend_df = pd.DataFrame(trend).set_index('date')
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.plot(trend_df.index, trend_df['income'], marker='o', color=COLORS['income'], label='Income')
    ax.plot(trend_df.index, trend_df['expense'], marker='o', color=COLORS['expense'], label='Expense')
    ax.set_title(f'Income vs. Expense ({period})', fontweight='bold')
    ax.set_xlabel('Date')
    ax.set_ylabel('Amount')
    ax.tick_params(axis='x', labelrotation=45)
    ax.yaxis.set_major_formatter(CURRENCY_AXIS)
    ax.legend()
    fig.tight_layout()
    return _to_png(fig)


def generate_type_breakdown_chart(transactions: List[Transaction]) -> Union[io.BytesIO, None]:
    """Pie chart of totals per transaction type."""
    breakdown = [item for item in type_breakdown(transactions) if item['value'] > 0]
    if not breakdown:
        return None

    labels = [item['name'] for item in breakdown]
    values = [item['value'] for item in breakdown]
    colors = [COLORS.get(label.lower(), '#9CA3AF') for label in labels]

    fig, ax = plt.subplots(figsize=(8, 8))
    wedges, _ = ax.pie(values, colors=colors, startangle=90)
    ax.axis('equal')
    ax.set_title('Where the Money Goes', fontweight='bold')
    ax.legend(wedges, [f"{label}: {format_currency(value)}" for label, value in zip(labels, values)],
              title='Type', loc='center left', bbox_to_anchor=(1, 0, 0.5, 1))
    fig.tight_layout()
    return _to_png(fig)


def generate_balance_chart(transactions: List[Transaction]) -> Union[io.BytesIO, None]:
    """Monthly income, expense and balance bars."""
    df = analytics.transactions_frame(transactions)
    if df.empty:
        return None
    df = df[df['type'].isin(['income', 'expense'])]
    if df.empty:
        return None

    df = df.assign(month=df['date'].dt.to_period('M'))
    monthly = df.groupby(['month', 'type'])['amount'].sum().unstack(fill_value=0)
    monthly = monthly.reindex(columns=['income', 'expense'], fill_value=0)
    monthly['balance'] = monthly['income'] - monthly['expense']
    monthly = monthly.sort_index()

    fig, ax = plt.subplots(figsize=(12, 7))
    monthly.plot(kind='bar', ax=ax,
                 color=[COLORS['income'], COLORS['expense'], COLORS['balance']])
    ax.set_title('Monthly Balance: Income vs. Expense', fontweight='bold')
    ax.set_ylabel('Amount')
    ax.set_xlabel('Month')
    ax.tick_params(axis='x', labelrotation=45)
    ax.legend(['Income', 'Expense', 'Balance'], title='Type')
    ax.yaxis.set_major_formatter(CURRENCY_AXIS)
    fig.tight_layout()
    return _to_png(fig)
