import datetime
import unittest

from dhanji.core import forms
from dhanji.core.forms import BudgetForm, DebtForm, SignupForm, SubscriptionForm, TransactionForm
from dhanji.core.models import Budget, Debt, Transaction


class TestTransactionForm(unittest.TestCase):
    def test_valid_input_from_strings(self):
        form, errors = forms.validate(TransactionForm, {
            "amount": "1500", "category": "Food", "description": "",
            "date": "2025-07-10", "type": "expense",
        })
        self.assertEqual(errors, {})
        transaction = form.to_model()
        self.assertIsInstance(transaction, Transaction)
        self.assertEqual(transaction.amount, 1500.0)
        self.assertEqual(transaction.date, datetime.date(2025, 7, 10))
        self.assertEqual(transaction.description, "expense transaction")

    def test_amount_below_one(self):
        form, errors = forms.validate(TransactionForm, {
            "amount": 0.5, "category": "Food", "date": "2025-07-10", "type": "expense",
        })
        self.assertIsNone(form)
        self.assertEqual(errors, {"amount": "Amount must be at least 1"})

    def test_missing_fields(self):
        form, errors = forms.validate(TransactionForm, {"amount": "abc", "category": "  ", "type": "expense"})
        self.assertIsNone(form)
        self.assertEqual(errors["amount"], "Please enter a valid amount")
        self.assertEqual(errors["category"], "Please select a category")
        self.assertEqual(errors["date"], "Please select a date")

    def test_unknown_type(self):
        _, errors = forms.validate(TransactionForm, {
            "amount": 10, "category": "Food", "date": "2025-07-10", "type": "gift",
        })
        self.assertEqual(errors, {"type": "Please select a type"})


class TestBudgetForm(unittest.TestCase):
    def test_valid(self):
        form, errors = forms.validate(BudgetForm, {"category": "Food", "limit": "10000"})
        self.assertEqual(errors, {})
        budget = form.to_model()
        self.assertIsInstance(budget, Budget)
        self.assertEqual(budget.spent, 0.0)
        self.assertEqual(budget.timeframe, "monthly")

    def test_limit_must_be_positive(self):
        _, errors = forms.validate(BudgetForm, {"category": "Food", "limit": 0})
        self.assertEqual(errors, {"limit": "Please enter a valid category and budget limit."})

    def test_category_required(self):
        _, errors = forms.validate(BudgetForm, {"category": "", "limit": 100})
        self.assertEqual(errors, {"category": "Please enter a valid category and budget limit."})


class TestSubscriptionForm(unittest.TestCase):
    def test_valid(self):
        form, errors = forms.validate(SubscriptionForm, {
            "name": " Netflix ", "amount": 649, "frequency": "monthly",
            "next_billing_date": "2025-08-01", "category": "Entertainment",
        })
        self.assertEqual(errors, {})
        self.assertEqual(form.to_model().name, "Netflix")

    def test_short_name(self):
        _, errors = forms.validate(SubscriptionForm, {
            "name": "N", "amount": 649, "next_billing_date": "2025-08-01", "category": "Entertainment",
        })
        self.assertEqual(errors, {"name": "Name must be at least 2 characters"})


class TestDebtForm(unittest.TestCase):
    def test_valid_without_category(self):
        form, errors = forms.validate(DebtForm, {
            "name": "Car loan", "total_amount": 50000, "remaining_amount": 20000,
            "interest_rate": 9.5, "minimum_payment": 2500, "due_date": "2025-08-05", "type": "loan",
        })
        self.assertEqual(errors, {})
        debt = form.to_model()
        self.assertIsInstance(debt, Debt)
        self.assertEqual(debt.category, "Debt")
        self.assertTrue(debt.is_active)

    def test_negative_values(self):
        _, errors = forms.validate(DebtForm, {
            "name": "Card", "total_amount": 0, "remaining_amount": -1,
            "minimum_payment": -5, "due_date": "2025-08-05",
        })
        self.assertEqual(errors["total_amount"], "Total amount must be greater than zero")
        self.assertEqual(errors["remaining_amount"], "Value cannot be negative")
        self.assertEqual(errors["minimum_payment"], "Value cannot be negative")


class TestSignupForm(unittest.TestCase):
    def test_valid(self):
        form, errors = forms.validate(SignupForm, {
            "name": "Asha", "email": "asha@example.com",
            "password": "s3cretpass", "confirm_password": "s3cretpass",
        })
        self.assertEqual(errors, {})
        self.assertEqual(form.name, "Asha")

    def test_short_password(self):
        _, errors = forms.validate(SignupForm, {
            "name": "Asha", "email": "asha@example.com", "password": "short", "confirm_password": "short",
        })
        self.assertEqual(errors, {"password": "Password must be at least 8 characters long"})

    def test_passwords_do_not_match(self):
        _, errors = forms.validate(SignupForm, {
            "name": "Asha", "email": "asha@example.com",
            "password": "s3cretpass", "confirm_password": "s3cretpasz",
        })
        self.assertEqual(errors, {"confirm_password": "Passwords do not match"})


class TestBudgetExpense(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(forms.validate_budget_expense("250"), {})
        self.assertEqual(forms.validate_budget_expense(0.01), {})

    def test_invalid(self):
        for amount in (0, -10, "", "abc", None):
            self.assertEqual(forms.validate_budget_expense(amount),
                             {"amount": "Please enter an amount greater than zero."})


if __name__ == "__main__":
    unittest.main()
