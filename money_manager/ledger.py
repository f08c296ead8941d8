# money_manager/ledger.py
"""
Transaction service. Every function takes the authenticated owner's id first and
uses it as a mandatory filter (reads, updates, deletes) or assignment (creates).

A transaction owned by someone else is reported exactly like one that does not
exist, so callers cannot probe for other users' records.
"""
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

import pandas as pd

from . import db
from .errors import NotFound, ValidationError
from .models import MAX_AMOUNT, TITLE_MAX_LENGTH, TRANSACTION_TYPES, Transaction, ms_to_iso, now_ms

logger = logging.getLogger("money-manager")

EXPORT_COLUMNS = ["Title", "Amount", "Type", "Date"]


# ---------------- Validation ----------------
def clean_title(title):
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Please add a title")
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot be more than {TITLE_MAX_LENGTH} characters")
    return title


def clean_amount(amount):
    """Parse an amount (number or numeric string) into a positive 2-decimal float"""
    if isinstance(amount, bool) or amount is None:
        raise ValidationError("Please add a positive amount")
    try:
        value = float(str(amount).strip()) if isinstance(amount, str) else float(amount)
    except (TypeError, ValueError):
        raise ValidationError("Please add a positive amount")
    if not math.isfinite(value):
        raise ValidationError("Please add a positive amount")

    value = round(value, 2)
    if value <= 0:
        raise ValidationError("Please add a positive amount")
    if value > MAX_AMOUNT:
        raise ValidationError("Amount too large")
    return value


def clean_type(tx_type):
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError("Please select a valid transaction type")
    return tx_type


def clean_date(value, default_ms):
    """ISO-8601 date/datetime -> normalized UTC ISO string; None means ``default_ms``"""
    if value is None or value == '':
        return ms_to_iso(default_ms)
    if not isinstance(value, str):
        raise ValidationError("Invalid date")
    s = value.strip()
    if s.endswith('Z'):
        s = s[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        raise ValidationError("Invalid date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return ms_to_iso(int(parsed.timestamp() * 1000))
    except (ValueError, OverflowError, OSError):
        # parses, but lands outside what datetime can hold once shifted to UTC
        raise ValidationError("Invalid date")


def validate_fields(title, amount, tx_type):
    """Checks run in a fixed order; the first failure is the one reported."""
    return clean_title(title), clean_amount(amount), clean_type(tx_type)


# ---------------- Queries ----------------
def _fetch_owned(owner_id, tx_id):
    row = db.query_db(
        "SELECT * FROM transactions WHERE id=? AND user_id=?",
        (str(tx_id), owner_id), one=True
    )
    if not row:
        raise NotFound("Transaction not found")
    return Transaction.from_row(row)


def summarize(items: List[Transaction]) -> Dict[str, float]:
    income = round(sum(t.amount for t in items if t.type == 'INCOME'), 2)
    expenses = round(sum(t.amount for t in items if t.type == 'EXPENSES'), 2)
    return {
        'income': income,
        'expenses': expenses,
        'balance': round(income - expenses, 2),
    }


def list_transactions(owner_id) -> Tuple[List[Transaction], Dict[str, float]]:
    rows = db.query_db(
        "SELECT * FROM transactions WHERE user_id=? ORDER BY created DESC, seq DESC",
        (owner_id,)
    )
    items = [Transaction.from_row(r) for r in rows]
    return items, summarize(items)


def get_transaction(owner_id, tx_id) -> Transaction:
    return _fetch_owned(owner_id, tx_id)


# ---------------- Mutations ----------------
def create_transaction(owner_id, title, amount, tx_type, date=None) -> Transaction:
    title, amount, tx_type = validate_fields(title, amount, tx_type)
    now = now_ms()
    tx = Transaction(
        id=uuid.uuid4().hex,
        user_id=owner_id,
        title=title,
        amount=amount,
        type=tx_type,
        date=clean_date(date, now),
        created=now,
        last_updated=now,
    )
    db.execute_db(
        "INSERT INTO transactions (id, user_id, title, amount, type, date, created, last_updated) "
        "VALUES (?,?,?,?,?,?,?,?)",
        (tx.id, tx.user_id, tx.title, tx.amount, tx.type, tx.date, tx.created, tx.last_updated)
    )
    logger.info(f"User {owner_id} created transaction {tx.id}")
    return tx


def update_transaction(owner_id, tx_id, title, amount, tx_type) -> Transaction:
    # ownership first: a foreign or missing id is NotFound whatever the body says
    tx = _fetch_owned(owner_id, tx_id)
    title, amount, tx_type = validate_fields(title, amount, tx_type)

    last_updated = max(now_ms(), tx.last_updated + 1)
    updated = db.execute_db(
        "UPDATE transactions SET title=?, amount=?, type=?, last_updated=? WHERE id=? AND user_id=?",
        (title, amount, tx_type, last_updated, tx.id, owner_id)
    )
    if not updated:
        # deleted between the lookup and the write
        raise NotFound("Transaction not found")

    tx.title, tx.amount, tx.type, tx.last_updated = title, amount, tx_type, last_updated
    logger.info(f"User {owner_id} updated transaction {tx.id}")
    return tx


def delete_transaction(owner_id, tx_id):
    deleted = db.execute_db(
        "DELETE FROM transactions WHERE id=? AND user_id=?",
        (str(tx_id), owner_id)
    )
    if not deleted:
        raise NotFound("Transaction not found")
    logger.info(f"User {owner_id} deleted transaction {tx_id}")


def delete_all_transactions(owner_id) -> int:
    count = db.execute_db("DELETE FROM transactions WHERE user_id=?", (owner_id,))
    logger.info(f"User {owner_id} deleted all transactions ({count})")
    return count


# ---------------- Export ----------------
def export_csv(owner_id) -> str:
    """The owner's transactions as CSV, newest first"""
    items, _ = list_transactions(owner_id)
    records: List[Dict[str, Any]] = [
        {"Title": t.title, "Amount": t.amount, "Type": t.type, "Date": t.date}
        for t in items
    ]
    df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
    return df.to_csv(index=False, float_format="%.2f")
