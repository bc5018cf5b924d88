# dhanji/core/forms.py
"""
Input checks run before anything is sent to Supabase.

Each form validates raw user input (strings or numbers, as typed) and turns it
into a record model. Failures come back as a field -> message mapping so the
caller can show each message next to its field.
"""
import datetime
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from dhanji.core.models import (
    Budget,
    Debt,
    DebtType,
    Subscription,
    Timeframe,
    Transaction,
    TransactionType,
)

# Used when pydantic rejects a value before our own validators run
# (missing field, unparsable number or date, value outside a Literal).
FIELD_MESSAGES = {
    "amount": "Please enter a valid amount",
    "limit": "Please enter a valid category and budget limit.",
    "category": "Please select a category",
    "date": "Please select a date",
    "next_billing_date": "Please select a date",
    "due_date": "Please select a date",
    "frequency": "Please select a billing frequency",
    "timeframe": "Please select a timeframe",
    "type": "Please select a type",
    "name": "Name must be at least 2 characters",
    "total_amount": "Please enter a valid amount",
    "remaining_amount": "Please enter a valid amount",
    "interest_rate": "Please enter a valid interest rate",
    "minimum_payment": "Please enter a valid amount",
    "email": "Please enter your email",
    "password": "Password must be at least 8 characters long",
    "confirm_password": "Passwords do not match",
}


def _required_text(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


class TransactionForm(BaseModel):
    amount: float
    category: str
    description: str = ""
    date: datetime.date
    type: TransactionType

    @field_validator("amount")
    @classmethod
    def amount_at_least_one(cls, v: float) -> float:
        if v < 1:
            raise ValueError("Amount must be at least 1")
        return v

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        return _required_text(v, "Please select a category")

    def to_model(self) -> Transaction:
        description = self.description.strip() or f"{self.type} transaction"
        return Transaction(amount=self.amount, category=self.category, description=description,
                           date=self.date, type=self.type)


class BudgetForm(BaseModel):
    category: str
    limit: float
    timeframe: Timeframe = "monthly"

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        return _required_text(v, "Please enter a valid category and budget limit.")

    @field_validator("limit")
    @classmethod
    def limit_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Please enter a valid category and budget limit.")
        return v

    def to_model(self) -> Budget:
        return Budget(category=self.category, limit=self.limit, spent=0.0, timeframe=self.timeframe)


class SubscriptionForm(BaseModel):
    name: str
    amount: float
    frequency: Timeframe = "monthly"
    next_billing_date: datetime.date
    category: str

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("amount")
    @classmethod
    def amount_at_least_one(cls, v: float) -> float:
        if v < 1:
            raise ValueError("Amount must be at least 1")
        return v

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        return _required_text(v, "Please select a category")

    def to_model(self) -> Subscription:
        return Subscription(**self.model_dump())


class DebtForm(BaseModel):
    name: str
    total_amount: float
    remaining_amount: float
    interest_rate: float = 0.0
    minimum_payment: float = 0.0
    due_date: datetime.date
    type: DebtType = "other"
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("total_amount")
    @classmethod
    def total_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Total amount must be greater than zero")
        return v

    @field_validator("remaining_amount", "interest_rate", "minimum_payment")
    @classmethod
    def not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Value cannot be negative")
        return v

    def to_model(self) -> Debt:
        data = self.model_dump(exclude={"category"})
        if self.category:
            data["category"] = self.category
        return Debt(**data)


class SignupForm(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        return _required_text(v, "Please enter your name")

    @field_validator("email")
    @classmethod
    def email_required(cls, v: str) -> str:
        return _required_text(v, "Please enter your email")

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("Passwords do not match")
        return v


def _messages(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        if field in errors:
            continue
        if err["type"] == "value_error":
            errors[field] = str(err["ctx"]["error"])
        else:
            errors[field] = FIELD_MESSAGES.get(field, err["msg"])
    return errors


def validate(form_cls: Type[BaseModel], data: Dict[str, Any]) -> Tuple[Optional[BaseModel], Dict[str, str]]:
    """Returns (form, {}) when the input is valid, (None, errors) otherwise."""
    try:
        return form_cls.model_validate(data), {}
    except ValidationError as e:
        return None, _messages(e)


def validate_budget_expense(amount: Any) -> Dict[str, str]:
    """An expense added to a budget must be a number greater than zero."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return {"amount": "Please enter an amount greater than zero."}
    if not value > 0:
        return {"amount": "Please enter an amount greater than zero."}
    return {}
