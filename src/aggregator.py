import logging
import time
from collections import defaultdict
from typing import Any, Callable

from config import MAX_PAGES, PAGE_DELAY
from feed import Transaction, extract_transactions
from window import Window

FetchPage = Callable[[int, int], list[dict[str, Any]]]


def page_too_recent(transactions: list[Transaction], window: Window) -> bool:
    """Check if the oldest transaction on a page is still after the window.

    Pages arrive newest first, so only the last entry is checked. A page that
    straddles window.end is skipped whole, which can under-count its in-window
    entries.
    """
    return transactions[-1]["timestamp"] >= window.end


def accumulate_page(
    transactions: list[Transaction], window: Window, volumes: dict[float, int]
) -> bool:
    """Add in-window amounts to volumes. Return False once past window.start."""
    for transaction in transactions:
        # Older than the window, every following entry is too
        if transaction["timestamp"] < window.start:
            return False

        # Too recent for this window
        if transaction["timestamp"] >= window.end:
            continue

        volumes[transaction["listing_price"]] += transaction["amount"]

    return True


def aggregate_logs(
    item_id: int,
    window: Window,
    fetch_page: FetchPage,
    max_pages: int = MAX_PAGES,
    page_delay: float = PAGE_DELAY,
) -> dict[float, int]:
    """Build the listing price to traded amount map for one item and window.

    Pages are requested in order starting at 1 until the window start is
    crossed, the feed returns an empty page, or max_pages pages were fetched.
    Errors from fetch_page propagate.
    """
    volumes = defaultdict(int)
    search = True
    page = 1

    while search and page <= max_pages:
        # Wait between pages to avoid spamming the server
        if page > 1:
            time.sleep(page_delay)

        logs = fetch_page(item_id, page)
        page += 1

        if not logs:
            logging.debug(f"Item {item_id}: page {page - 1} empty, end of logs")
            break

        transactions = extract_transactions(logs)

        # No market transactions, or every listing on this page is too recent
        if not transactions or page_too_recent(transactions, window):
            continue

        search = accumulate_page(transactions, window, volumes)

    logging.debug(f"Item {item_id}: {len(volumes)} prices from {page - 1} pages")

    return dict(volumes)
