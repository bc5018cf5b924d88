# dhanji/utils/text_utils.py

DEBT_TYPE_LABELS = {
    "credit-card": "Credit Card",
    "loan": "Loan",
    "emi": "EMI",
}


def capitalize_first(s: str) -> str:
    """Upper-cases the first character and leaves the rest as is.
    Ex: "income" -> "Income"
    Ex: "credit-card" -> "Credit-card"
    """
    if not s:
        return ""
    return s[0].upper() + s[1:]


def debt_type_label(debt_type: str) -> str:
    """Display label for a debt type; anything unknown is "Other"."""
    return DEBT_TYPE_LABELS.get(debt_type, "Other")
