# money_manager/models.py
# lightweight model classes (not DB-bound ORM)
from datetime import datetime, timezone

INCOME = 'INCOME'
EXPENSES = 'EXPENSES'
TRANSACTION_TYPES = (INCOME, EXPENSES)

TITLE_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
# per transaction; keeps summary totals finite
MAX_AMOUNT = 10000000


def now_ms():
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def ms_to_iso(ms):
    """Epoch milliseconds -> ISO-8601 UTC string with millisecond precision"""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class User:
    def __init__(self, id, name, email, password_hash, created_at=None):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['name'], row['email'], row['password_hash'], row['created_at'])

    def public_dict(self):
        # never exposes password_hash
        return {'id': self.id, 'name': self.name, 'email': self.email}


class Transaction:
    def __init__(self, id, user_id, title, amount, type, date, created, last_updated):
        self.id = id
        self.user_id = user_id
        self.title = title
        self.amount = amount
        self.type = type
        self.date = date
        self.created = created
        self.last_updated = last_updated

    @classmethod
    def from_row(cls, row):
        return cls(
            row['id'], row['user_id'], row['title'], float(row['amount']),
            row['type'], row['date'], int(row['created']), int(row['last_updated'])
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'amount': self.amount,
            'type': self.type,
            'date': self.date,
            'created': self.created,
            'lastUpdated': ms_to_iso(self.last_updated),
            'userId': self.user_id,
        }
