# dhanji/core/db.py
import datetime
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError
from supabase import Client, create_client

from dhanji.config import SUPABASE_KEY, SUPABASE_URL
from dhanji.core.errors import AuthenticationError, UnsupportedOperationError
from dhanji.core.forms import validate_budget_expense
from dhanji.core.models import (
    DEFAULT_CATEGORY_COLOR,
    Budget,
    Category,
    Debt,
    Subscription,
    Transaction,
    UserProfile,
)
from dhanji.core.notifications import Notifier
from dhanji.utils.formatting import format_currency

logger = logging.getLogger(__name__)

TRY_AGAIN = "Please try again later."

Message = Tuple[str, str]


def get_supabase_client() -> Client:
    """Returns a Supabase client built from the configured URL and key."""
    return create_client(SUPABASE_URL, SUPABASE_KEY)


class EntityTable:
    """How one record type maps onto its Supabase table."""

    def __init__(self, table: str, model, label: str,
                 order_by: Optional[str] = None, descending: bool = False,
                 writable: bool = True, updatable: bool = False,
                 created: Optional[Callable[[Any], Message]] = None,
                 deleted: Optional[Message] = None,
                 updated: Optional[Message] = None,
                 create_verb: str = "add", delete_verb: str = "delete"):
        self.table = table
        self.model = model
        self.label = label
        self.order_by = order_by
        self.descending = descending
        self.writable = writable
        self.updatable = updatable
        self.created = created
        self.deleted = deleted
        self.updated = updated
        self.create_verb = create_verb
        self.delete_verb = delete_verb


ENTITIES: Dict[str, EntityTable] = {
    "transactions": EntityTable(
        "transactions", Transaction, "transaction",
        order_by="date", descending=True,
        created=lambda t: (
            "Transaction Added",
            f"{'Expense' if t.type == 'expense' else 'Transaction'} of {format_currency(t.amount)} added successfully.",
        ),
        deleted=("Transaction Deleted", "Transaction has been successfully deleted."),
    ),
    "budgets": EntityTable(
        "budgets", Budget, "budget", updatable=True,
        created=lambda b: ("Budget Created", f"Budget for {b.category} created successfully."),
        deleted=("Budget Deleted", "Budget has been successfully deleted."),
        updated=("Budget Updated", "Budget expense has been updated successfully."),
        create_verb="create",
    ),
    "subscriptions": EntityTable(
        "subscriptions", Subscription, "subscription",
        created=lambda s: ("Subscription Added", f"{s.name} subscription added successfully."),
    ),
    "debts": EntityTable(
        "debts", Debt, "debt",
        order_by="due_date",
        created=lambda d: ("Debt Added", f"{d.name} debt added successfully."),
        deleted=("Debt Removed", "Debt has been successfully removed."),
    ),
    "categories": EntityTable("categories", Category, "category", writable=False),
    "profiles": EntityTable(
        "profiles", UserProfile, "profile", writable=False, updatable=True,
        updated=("Profile Updated", "Your profile has been updated successfully."),
    ),
}


def _entity(entity_type: str) -> EntityTable:
    try:
        return ENTITIES[entity_type]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity_type!r}") from None


def _notify(notifier: Optional[Notifier], message: Optional[Message]) -> None:
    if notifier is not None and message is not None:
        notifier.notify(*message)


def _notify_error(notifier: Optional[Notifier], title: str) -> None:
    if notifier is not None:
        notifier.error(title, TRY_AGAIN)


def _plural(label: str) -> str:
    return label[:-1] + "ies" if label.endswith("y") else label + "s"


# --- Session helpers ---
def get_current_user_id(supabase_client: Client) -> Union[str, None]:
    """Returns the id of the signed-in user, or None when there is no session."""
    try:
        session = supabase_client.auth.get_session()
    except Exception as e:
        logger.warning("Could not read the auth session: %s", e)
        return None
    if session is None or session.user is None:
        return None
    return session.user.id


def require_user_id(supabase_client: Client, notifier: Optional[Notifier] = None,
                    failure_title: str = "Not signed in") -> str:
    user_id = get_current_user_id(supabase_client)
    if not user_id:
        if notifier is not None:
            notifier.error(failure_title, "Please sign in and try again.")
        raise AuthenticationError()
    return user_id


# --- Generic operations ---
def list_records(supabase_client: Client, entity_type: str,
                 notifier: Optional[Notifier] = None) -> list:
    """Lists the caller's records of one type. Returns [] on failure."""
    entity = _entity(entity_type)
    failure_title = f"Failed to load {_plural(entity.label)}"
    user_id = require_user_id(supabase_client, notifier, failure_title)

    try:
        query = supabase_client.table(entity.table).select("*")
        if entity_type == "categories":
            query = query.or_(f"user_id.is.null,user_id.eq.{user_id}")
        elif entity_type == "profiles":
            query = query.eq("id", user_id)
        else:
            query = query.eq("user_id", user_id)
        if entity.order_by:
            query = query.order(entity.order_by, desc=entity.descending)
        response = query.execute()
    except Exception as e:
        logger.error("Error fetching %s: %s", entity.table, e)
        _notify_error(notifier, failure_title)
        return []

    records = []
    for row in response.data or []:
        try:
            records.append(entity.model.from_record(row))
        except (KeyError, ValidationError) as e:
            logger.warning("Skipping malformed %s row %s: %s", entity.label, row.get("id"), e)
    return records


def create_record(supabase_client: Client, entity_type: str, record: BaseModel,
                  notifier: Optional[Notifier] = None):
    """Inserts a record owned by the caller and returns it as stored, or None when the request fails."""
    entity = _entity(entity_type)
    if not entity.writable:
        raise UnsupportedOperationError(f"{_plural(entity.label).capitalize()} cannot be created")
    failure_title = f"Failed to {entity.create_verb} {entity.label}"
    user_id = require_user_id(supabase_client, notifier, failure_title)

    try:
        response = supabase_client.table(entity.table).insert(record.to_record(user_id)).execute()
    except Exception as e:
        logger.error("Error creating %s: %s", entity.label, e)
        _notify_error(notifier, failure_title)
        return None

    # insert succeeded; an unreadable echo falls back to the submitted record
    rows = response.data or []
    try:
        created = entity.model.from_record(rows[0])
    except (IndexError, KeyError, ValidationError) as e:
        logger.warning("Created %s but could not read back the stored row: %s", entity.label, e)
        stored_id = rows[0].get("id") if rows else None
        created = record.model_copy(update={"id": stored_id})

    _notify(notifier, entity.created(created) if entity.created else None)
    return created


def update_record(supabase_client: Client, entity_type: str, record_id: str,
                  fields: Dict[str, Any], notifier: Optional[Notifier] = None) -> bool:
    """Applies a partial update to one of the caller's records."""
    entity = _entity(entity_type)
    if not entity.updatable:
        raise UnsupportedOperationError(f"Updating {_plural(entity.label)} is not supported")
    failure_title = f"Failed to update {entity.label}"
    user_id = require_user_id(supabase_client, notifier, failure_title)

    if entity_type == "profiles" and record_id != user_id:
        logger.error("Refusing to update profile %s for user %s", record_id, user_id)
        _notify_error(notifier, failure_title)
        return False

    payload = dict(fields)
    payload["updated_at"] = datetime.datetime.now(datetime.timezone.utc).isoformat()

    try:
        query = supabase_client.table(entity.table).update(payload).eq("id", record_id)
        if entity_type != "profiles":
            query = query.eq("user_id", user_id)
        query.execute()
    except Exception as e:
        logger.error("Error updating %s %s: %s", entity.label, record_id, e)
        _notify_error(notifier, failure_title)
        return False

    _notify(notifier, entity.updated)
    return True


def delete_record(supabase_client: Client, entity_type: str, record_id: str,
                  notifier: Optional[Notifier] = None) -> bool:
    """Deletes one of the caller's records, matching both id and owner."""
    entity = _entity(entity_type)
    if not entity.writable:
        raise UnsupportedOperationError(f"{_plural(entity.label).capitalize()} cannot be deleted")
    failure_title = f"Failed to {entity.delete_verb} {entity.label}"
    user_id = require_user_id(supabase_client, notifier, failure_title)

    try:
        supabase_client.table(entity.table).delete().eq("id", record_id).eq("user_id", user_id).execute()
    except Exception as e:
        logger.error("Error deleting %s %s: %s", entity.label, record_id, e)
        _notify_error(notifier, failure_title)
        return False

    _notify(notifier, entity.deleted)
    return True


# --- Transactions ---
def get_transactions(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Transaction]:
    """Returns the caller's transactions, newest date first."""
    return list_records(supabase_client, "transactions", notifier)


def create_transaction(supabase_client: Client, transaction: Transaction,
                       notifier: Optional[Notifier] = None) -> Union[Transaction, None]:
    return create_record(supabase_client, "transactions", transaction, notifier)


def delete_transaction(supabase_client: Client, transaction_id: str,
                       notifier: Optional[Notifier] = None) -> bool:
    return delete_record(supabase_client, "transactions", transaction_id, notifier)


# --- Budgets ---
def get_budgets(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Budget]:
    return list_records(supabase_client, "budgets", notifier)


def create_budget(supabase_client: Client, budget: Budget,
                  notifier: Optional[Notifier] = None) -> Union[Budget, None]:
    """Creates a budget. A new budget always starts with nothing spent."""
    fresh = budget.model_copy(update={"spent": 0.0})
    return create_record(supabase_client, "budgets", fresh, notifier)


def delete_budget(supabase_client: Client, budget_id: str,
                  notifier: Optional[Notifier] = None) -> bool:
    return delete_record(supabase_client, "budgets", budget_id, notifier)


def update_budget_spent(supabase_client: Client, budget_id: str, new_spent: float,
                        notifier: Optional[Notifier] = None) -> bool:
    return update_record(supabase_client, "budgets", budget_id, {"spent": new_spent}, notifier)


def add_budget_expense(supabase_client: Client, budget: Budget, amount: float,
                       notifier: Optional[Notifier] = None) -> Union[Budget, None]:
    """
    Adds an expense to a budget's spent total.
    The amount is checked before anything is sent. Returns the updated budget
    (a new object) or None when validation or the update fails.
    """
    errors = validate_budget_expense(amount)
    if errors:
        if notifier is not None:
            notifier.error("Invalid amount", errors["amount"])
        return None

    new_spent = budget.spent + float(amount)
    if not update_budget_spent(supabase_client, budget.id, new_spent, notifier):
        return None
    return budget.model_copy(update={"spent": new_spent})


# --- Categories ---
def get_categories(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Category]:
    """Returns global categories plus the caller's own."""
    return list_records(supabase_client, "categories", notifier)


def get_category_color(supabase_client: Client, category_name: str) -> str:
    """Returns the colour of a category by name, or the default grey."""
    try:
        response = supabase_client.table("categories").select("color").eq("name", category_name).limit(1).execute()
    except Exception as e:
        logger.error("Error fetching colour for category '%s': %s", category_name, e)
        return DEFAULT_CATEGORY_COLOR
    rows = response.data or []
    if not rows or not rows[0].get("color"):
        return DEFAULT_CATEGORY_COLOR
    return rows[0]["color"]


# --- Subscriptions ---
def get_subscriptions(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Subscription]:
    return list_records(supabase_client, "subscriptions", notifier)


def create_subscription(supabase_client: Client, subscription: Subscription,
                        notifier: Optional[Notifier] = None) -> Union[Subscription, None]:
    return create_record(supabase_client, "subscriptions", subscription, notifier)


def delete_subscription(supabase_client: Client, subscription_id: str,
                        notifier: Optional[Notifier] = None) -> bool:
    return delete_record(supabase_client, "subscriptions", subscription_id, notifier)


# --- Debts ---
def get_debts(supabase_client: Client, notifier: Optional[Notifier] = None) -> List[Debt]:
    """Returns the caller's debts, nearest due date first."""
    return list_records(supabase_client, "debts", notifier)


def create_debt(supabase_client: Client, debt: Debt,
                notifier: Optional[Notifier] = None) -> Union[Debt, None]:
    return create_record(supabase_client, "debts", debt, notifier)


def delete_debt(supabase_client: Client, debt_id: str,
                notifier: Optional[Notifier] = None) -> bool:
    return delete_record(supabase_client, "debts", debt_id, notifier)


def update_debt(supabase_client: Client, debt_id: str, fields: Dict[str, Any],
                notifier: Optional[Notifier] = None) -> bool:
    """Recording debt payments is not available; always raises."""
    raise UnsupportedOperationError("Updating debts is not supported")


# --- User profile ---
PROFILE_FIELDS = ("name", "avatar", "theme", "currency", "email_notifications", "budget_reminders")


def get_user_profile(supabase_client: Client, user_id: str,
                     notifier: Optional[Notifier] = None) -> Union[UserProfile, None]:
    """Returns the caller's profile row, or None when missing, not the caller's, or on failure."""
    caller_id = require_user_id(supabase_client, notifier, "Failed to load profile")
    if user_id != caller_id:
        logger.error("Refusing to read profile %s for user %s", user_id, caller_id)
        _notify_error(notifier, "Failed to load profile")
        return None

    try:
        response = supabase_client.table("profiles").select("*").eq("id", user_id).execute()
    except Exception as e:
        logger.error("Error fetching user profile %s: %s", user_id, e)
        _notify_error(notifier, "Failed to load profile")
        return None
    rows = response.data or []
    if not rows:
        return None
    try:
        return UserProfile.from_record(rows[0])
    except (KeyError, ValidationError) as e:
        logger.error("Malformed profile row for %s: %s", user_id, e)
        return None


def update_user_profile(supabase_client: Client, user_id: str,
                        profile: Union[UserProfile, Dict[str, Any]],
                        notifier: Optional[Notifier] = None) -> bool:
    """Updates the profile columns given. Keys left out or set to None are not touched."""
    if isinstance(profile, UserProfile):
        fields = profile.to_record()
    else:
        fields = {key: value for key, value in profile.items()
                  if key in PROFILE_FIELDS and value is not None}
    return update_record(supabase_client, "profiles", user_id, fields, notifier)
