import datetime
import sqlite3

import pytest

from storage import init_database


class FakeFeed:
    """In-memory feed serving fixed pages per item."""

    def __init__(self, pages=None, connected=True, errors=None):
        self.pages = pages or {}
        self.connected = connected
        self.errors = errors or {}
        self.requests = []

    def fetch_log_page(self, item_id, page):
        self.requests.append((item_id, page))
        error = self.errors.get((item_id, page))
        if error is not None:
            raise error
        item_pages = self.pages.get(item_id, [])
        if page <= len(item_pages):
            return item_pages[page - 1]
        return []


def make_log(date, price, amount, log_type="marketItemTransaction"):
    """Build a raw feed log entry."""
    if isinstance(date, datetime.datetime):
        date = date.isoformat().replace("+00:00", "Z")
    return {
        "gameLog": {
            "type": log_type,
            "date": date,
            "data": {"amount": amount, "listingPrice": price},
        }
    }


@pytest.fixture
def log():
    return make_log


@pytest.fixture
def fake_feed():
    return FakeFeed


@pytest.fixture
def conn() -> sqlite3.Connection:
    connection = init_database(":memory:")
    yield connection
    connection.close()
