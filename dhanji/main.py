# dhanji/main.py
import logging
import os
import sys
from typing import Optional

from supabase import Client

from dhanji.config import LOG_LEVEL
from dhanji.core import db, pages
from dhanji.core.errors import AuthenticationError
from dhanji.core.notifications import Notification, Notifier
from dhanji.core.session import AuthSession
from dhanji.utils.formatting import format_currency, format_short_date

logger = logging.getLogger(__name__)


class AppContext:
    """Everything one running instance shares: the client, the notifier and the session."""

    def __init__(self, supabase_client: Client, notifier: Notifier, session: AuthSession):
        self.supabase_client = supabase_client
        self.notifier = notifier
        self.session = session

    def close(self) -> None:
        self.session.close()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_context(supabase_client: Optional[Client] = None) -> AppContext:
    """Composition root: creates the shared objects once and wires them together."""
    client = supabase_client or db.get_supabase_client()
    notifier = Notifier()
    session = AuthSession(client, notifier)
    session.start()
    return AppContext(client, notifier, session)


def _print_notification(notification: Notification) -> None:
    stream = sys.stderr if notification.is_error else sys.stdout
    print(f"[{notification.title}] {notification.description}", file=stream)


def print_dashboard(context: AppContext) -> None:
    dashboard = pages.load_dashboard(context.supabase_client, context.notifier)
    totals = dashboard["totals"]
    print(f"Income:      {format_currency(totals['income'])}")
    print(f"Expenses:    {format_currency(totals['expense'])}")
    print(f"Savings:     {format_currency(totals['saving'])}")
    print(f"Investments: {format_currency(totals['investment'])}")

    if dashboard["top_budgets"]:
        print("\nBudgets:")
        for view in dashboard["top_budgets"]:
            print(f"  {view['budget'].category}: {view['label']} ({view['percentage']}%)")

    if dashboard["upcoming_bills"]:
        print("\nUpcoming bills:")
        for view in dashboard["upcoming_bills"]:
            bill = view["bill"]
            print(f"  {bill.title} {format_currency(bill.amount)} on "
                  f"{format_short_date(bill.due_date)}: {view['label']}")


def main() -> int:
    configure_logging()
    context = build_context()
    context.notifier.subscribe(_print_notification)

    email = os.getenv("DHANJI_EMAIL")
    password = os.getenv("DHANJI_PASSWORD")
    if not context.session.is_authenticated and email and password:
        context.session.login(email, password)

    try:
        print_dashboard(context)
    except AuthenticationError:
        logger.error("Not signed in. Set DHANJI_EMAIL and DHANJI_PASSWORD to log in.")
        return 1
    finally:
        context.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
