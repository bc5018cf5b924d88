# dhanji/core/models.py
"""
Record types stored in Supabase.

Each model knows how to read itself from a table row (`from_record`) and how
to build the insert payload for its table (`to_record`). Rows always carry
the owner's `user_id`; the models never expose it except for categories,
where a null owner marks a global category.
"""
import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

TransactionType = Literal["income", "expense", "investment", "saving"]
Timeframe = Literal["daily", "weekly", "monthly", "yearly"]
DebtType = Literal["credit-card", "loan", "emi", "other"]
Theme = Literal["light", "dark", "system"]

TRANSACTION_TYPES = ("income", "expense", "investment", "saving")
TIMEFRAMES = ("daily", "weekly", "monthly", "yearly")
DEBT_TYPES = ("credit-card", "loan", "emi", "other")

DEFAULT_DEBT_CATEGORY = "Debt"
DEFAULT_CATEGORY_COLOR = "#9CA3AF"


class Transaction(BaseModel):
    id: Optional[str] = None
    amount: float = Field(..., gt=0, description="Positive amount")
    category: str
    description: str = ""
    date: datetime.date
    type: TransactionType

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Transaction":
        return cls(
            id=row["id"],
            amount=row["amount"],
            category=row["category"],
            description=row.get("description") or "",
            date=row["date"],
            type=row["type"],
        )

    def to_record(self, user_id: str) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date.isoformat(),
            "type": self.type,
            "user_id": user_id,
        }


class Budget(BaseModel):
    id: Optional[str] = None
    category: str
    limit: float = Field(..., gt=0)
    spent: float = Field(0.0, ge=0)
    timeframe: Timeframe = "monthly"

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Budget":
        return cls(
            id=row["id"],
            category=row["category"],
            limit=row["limit"],
            spent=row.get("spent") or 0,
            timeframe=row["timeframe"],
        )

    def to_record(self, user_id: str) -> Dict[str, Any]:
        return {
            "category": self.category,
            "limit": self.limit,
            "spent": self.spent,
            "timeframe": self.timeframe,
            "user_id": user_id,
        }


class Subscription(BaseModel):
    id: Optional[str] = None
    name: str
    amount: float = Field(..., gt=0)
    frequency: Timeframe
    next_billing_date: datetime.date
    category: str

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Subscription":
        return cls(
            id=row["id"],
            name=row["name"],
            amount=row["amount"],
            frequency=row["frequency"],
            next_billing_date=row["next_billing_date"],
            category=row["category"],
        )

    def to_record(self, user_id: str) -> Dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "frequency": self.frequency,
            "next_billing_date": self.next_billing_date.isoformat(),
            "category": self.category,
            "user_id": user_id,
        }


class Debt(BaseModel):
    # remaining_amount <= total_amount is expected but the backend does not enforce it
    id: Optional[str] = None
    name: str
    total_amount: float
    remaining_amount: float
    interest_rate: float = 0.0
    minimum_payment: float = 0.0
    due_date: datetime.date
    type: DebtType = "other"
    category: str = DEFAULT_DEBT_CATEGORY
    is_active: bool = True

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Debt":
        return cls(
            id=row["id"],
            name=row["name"],
            total_amount=row["total_amount"],
            remaining_amount=row["remaining_amount"],
            interest_rate=row.get("interest_rate") or 0,
            minimum_payment=row.get("minimum_payment") or 0,
            due_date=row["due_date"],
            type=row["type"],
            category=row.get("category") or DEFAULT_DEBT_CATEGORY,
            is_active=row.get("is_active") is not False,
        )

    def to_record(self, user_id: str) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_amount": self.total_amount,
            "remaining_amount": self.remaining_amount,
            "interest_rate": self.interest_rate,
            "minimum_payment": self.minimum_payment,
            "due_date": self.due_date.isoformat(),
            "type": self.type,
            "category": self.category or DEFAULT_DEBT_CATEGORY,
            "is_active": self.is_active is not False,
            "user_id": user_id,
        }


class Category(BaseModel):
    id: Optional[str] = None
    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str = ""
    user_id: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.user_id is None

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Category":
        return cls(
            id=row["id"],
            name=row["name"],
            color=row.get("color") or DEFAULT_CATEGORY_COLOR,
            icon=row.get("icon") or "",
            user_id=row.get("user_id"),
        )


class UserSettings(BaseModel):
    theme: Theme = "system"
    currency: str = "INR"
    email_notifications: bool = True
    budget_reminders: bool = True


class UserProfile(BaseModel):
    id: str
    name: str = "User"
    email: str = ""
    avatar: str = ""
    settings: UserSettings = Field(default_factory=UserSettings)

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "UserProfile":
        settings = UserSettings(
            theme=row.get("theme") or "system",
            currency=row.get("currency") or "INR",
            email_notifications=_flag(row.get("email_notifications")),
            budget_reminders=_flag(row.get("budget_reminders")),
        )
        return cls(
            id=row["id"],
            name=row.get("name") or "User",
            email=row.get("email") or "",
            avatar=row.get("avatar") or "",
            settings=settings,
        )

    def to_record(self) -> Dict[str, Any]:
        """Columns written by a profile update. The email belongs to the auth service."""
        return {
            "name": self.name,
            "avatar": self.avatar,
            "theme": self.settings.theme,
            "currency": self.settings.currency,
            "email_notifications": self.settings.email_notifications,
            "budget_reminders": self.settings.budget_reminders,
        }


def _flag(value: Optional[bool]) -> bool:
    # null means the user never changed the setting; both reminders start enabled
    return True if value is None else bool(value)
