import datetime
import random
import unittest

from dhanji.core import finance
from dhanji.core.errors import InvalidArgumentError
from dhanji.core.finance import Bill, DueStatus, TypeTotals
from dhanji.core.models import Budget, Debt, Subscription, Transaction

TODAY = datetime.date(2025, 7, 15)


def tx(id, amount, type="expense", category="Food", date=TODAY):
    return Transaction(id=id, amount=amount, category=category, date=date, type=type)


class TestBudgetPercentage(unittest.TestCase):
    def test_percentage(self):
        self.assertEqual(finance.budget_percentage(9000, 10000), 90)
        self.assertEqual(finance.budget_percentage(0, 10000), 0)
        self.assertEqual(finance.budget_percentage(10000, 10000), 100)

    def test_percentage_capped_at_100(self):
        self.assertEqual(finance.budget_percentage(15000, 10000), 100)

    def test_percentage_rounds_half_up(self):
        self.assertEqual(finance.budget_percentage(2, 3), 67)
        self.assertEqual(finance.budget_percentage(3, 8), 38)
        self.assertEqual(finance.budget_percentage(1, 3), 33)

    def test_percentage_is_monotonic_in_spent(self):
        previous = -1
        for spent in range(0, 12001, 250):
            current = finance.budget_percentage(spent, 10000)
            self.assertGreaterEqual(current, previous)
            self.assertLessEqual(current, 100)
            previous = current

    def test_non_positive_limit_raises(self):
        with self.assertRaises(InvalidArgumentError):
            finance.budget_percentage(100, 0)
        with self.assertRaises(ValueError):
            finance.budget_percentage(100, -5)

    def test_remaining_and_overspent(self):
        budget = Budget(category="Food", limit=10000, spent=10500)
        self.assertEqual(finance.budget_remaining(budget), -500)
        self.assertTrue(finance.is_overspent(budget))
        self.assertFalse(finance.is_overspent(Budget(category="Food", limit=10000, spent=10000)))

    def test_top_budgets(self):
        budgets = [
            Budget(id="a", category="Food", limit=1000, spent=100),
            Budget(id="b", category="Fuel", limit=1000, spent=900),
            Budget(id="c", category="Rent", limit=20000, spent=20000),
            Budget(id="d", category="Fun", limit=500, spent=250),
        ]
        self.assertEqual([b.id for b in finance.top_budgets(budgets)], ["c", "b", "d"])
        self.assertEqual(len(finance.top_budgets(budgets[:2])), 2)


class TestDebtProgress(unittest.TestCase):
    def test_progress(self):
        self.assertEqual(finance.debt_progress(50000, 20000), 60.0)
        self.assertEqual(finance.debt_progress(50000, 50000), 0.0)
        self.assertEqual(finance.debt_progress(50000, 0), 100.0)

    def test_progress_is_clamped(self):
        self.assertEqual(finance.debt_progress(1000, 1500), 0.0)
        self.assertEqual(finance.debt_progress(1000, -200), 100.0)

    def test_progress_never_rises_as_remaining_grows(self):
        previous = 101.0
        for remaining in range(-5000, 60001, 250):
            current = finance.debt_progress(50000, remaining)
            self.assertLessEqual(current, previous)
            self.assertGreaterEqual(current, 0.0)
            self.assertLessEqual(current, 100.0)
            previous = current

    def test_zero_total_raises(self):
        with self.assertRaises(InvalidArgumentError):
            finance.debt_progress(0, 0)

    def test_total_debt(self):
        debts = [
            Debt(name="Car", total_amount=50000, remaining_amount=20000, due_date=TODAY),
            Debt(name="Card", total_amount=10000, remaining_amount=2500.5, due_date=TODAY),
        ]
        self.assertEqual(finance.total_debt(debts), 22500.5)
        self.assertEqual(finance.total_debt([]), 0.0)
        self.assertEqual(finance.debt_paid(debts[0]), 30000)


class TestTotals(unittest.TestCase):
    def test_totals_by_type(self):
        transactions = [
            tx("1", 50000, "income", "Salary"),
            tx("2", 1500),
            tx("3", 2500.5),
            tx("4", 5000, "saving", "Savings"),
        ]
        totals = finance.totals_by_type(transactions)
        self.assertEqual(totals, TypeTotals(income=50000, expense=4000.5, saving=5000, investment=0))
        self.assertEqual(totals.balance, 45999.5)
        self.assertEqual(totals.as_dict()["balance"], 45999.5)

    def test_totals_empty(self):
        self.assertEqual(finance.totals_by_type([]).as_dict(),
                         {"income": 0.0, "expense": 0.0, "saving": 0.0, "investment": 0.0, "balance": 0.0})

    def test_totals_do_not_depend_on_order(self):
        transactions = [tx(str(i), amount) for i, amount in
                        enumerate([0.1, 0.2, 0.3, 1e6, 1e-3, 99.99, 7.77, 1234.56])]
        expected = finance.totals_by_type(transactions)
        rng = random.Random(42)
        for _ in range(20):
            shuffled = transactions[:]
            rng.shuffle(shuffled)
            self.assertEqual(finance.totals_by_type(shuffled), expected)

    def test_type_breakdown_keeps_first_seen_order(self):
        transactions = [tx("1", 100), tx("2", 500, "income"), tx("3", 50), tx("4", 10, "investment")]
        self.assertEqual(finance.type_breakdown(transactions), [
            {"name": "Expense", "value": 150.0},
            {"name": "Income", "value": 500.0},
            {"name": "Investment", "value": 10.0},
        ])


class TestRecency(unittest.TestCase):
    def test_newest_first(self):
        transactions = [
            tx("1", 10, date=datetime.date(2025, 7, 1)),
            tx("2", 10, date=datetime.date(2025, 7, 12)),
            tx("3", 10, date=datetime.date(2025, 6, 30)),
        ]
        self.assertEqual([t.id for t in finance.sort_by_recency(transactions)], ["2", "1", "3"])

    def test_same_day_larger_id_first(self):
        transactions = [tx("a", 10), tx("b", 20)]
        self.assertEqual([t.id for t in finance.sort_by_recency(transactions)], ["b", "a"])

    def test_does_not_mutate_input(self):
        transactions = [tx("a", 10, date=datetime.date(2025, 1, 1)), tx("b", 20)]
        finance.sort_by_recency(transactions)
        self.assertEqual([t.id for t in transactions], ["a", "b"])

    def test_recent_transactions(self):
        transactions = [tx(str(i), 10, date=TODAY - datetime.timedelta(days=i)) for i in range(8)]
        self.assertEqual([t.id for t in finance.recent_transactions(transactions)], ["0", "1", "2", "3", "4"])


class TestDueDates(unittest.TestCase):
    def test_boundaries(self):
        cases = [
            (-1, DueStatus.OVERDUE, "Overdue by 1 days"),
            (0, DueStatus.DUE_TODAY, "Due today"),
            (1, DueStatus.DUE_SOON, "Due in 1 days"),
            (3, DueStatus.DUE_SOON, "Due in 3 days"),
            (4, DueStatus.UPCOMING, "Due in 4 days"),
        ]
        for offset, status, label in cases:
            due = TODAY + datetime.timedelta(days=offset)
            days = finance.days_until_due(due, TODAY)
            self.assertEqual(days, offset)
            self.assertEqual(finance.classify_due(due, TODAY), status)
            self.assertEqual(finance.due_label(days), label)

    def test_accepts_iso_strings(self):
        self.assertEqual(finance.days_until_due("2025-07-20", "2025-07-15"), 5)

    def test_bill_status(self):
        subscription = Subscription(id="s1", name="Netflix", amount=649, frequency="monthly",
                                    next_billing_date=datetime.date(2025, 7, 13), category="Entertainment")
        days, status, label = Bill.from_subscription(subscription).status(TODAY)
        self.assertEqual((days, status, label), (-2, DueStatus.OVERDUE, "Overdue by 2 days"))


class TestUpcomingBills(unittest.TestCase):
    def setUp(self):
        self.subscriptions = [
            Subscription(id="s1", name="Netflix", amount=649, frequency="monthly",
                         next_billing_date=datetime.date(2025, 7, 20), category="Entertainment"),
            Subscription(id="s2", name="Gym", amount=1200, frequency="monthly",
                         next_billing_date=datetime.date(2025, 7, 16), category="Health"),
        ]
        self.debts = [
            Debt(id="d1", name="Car loan", total_amount=50000, remaining_amount=20000,
                 minimum_payment=2500, due_date=datetime.date(2025, 7, 18), type="loan"),
            Debt(id="d2", name="Card", total_amount=10000, remaining_amount=5000,
                 minimum_payment=500, due_date=datetime.date(2025, 8, 2), type="credit-card"),
        ]

    def test_merged_and_sorted(self):
        bills = finance.upcoming_bills(self.subscriptions, self.debts)
        self.assertEqual([b.title for b in bills], ["Gym", "Car loan", "Netflix"])
        self.assertEqual(bills[1].amount, 2500)
        self.assertEqual(bills[1].type, "loan")
        self.assertEqual(bills[0].type, "subscription")

    def test_without_limit(self):
        bills = finance.upcoming_bills(self.subscriptions, self.debts, limit=None)
        self.assertEqual(len(bills), 4)
        self.assertEqual(bills[-1].title, "Card")

    def test_empty(self):
        self.assertEqual(finance.upcoming_bills([], []), [])


if __name__ == "__main__":
    unittest.main()
