import datetime
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from aggregator import aggregate_logs
from catalog import select_items
from config import ITEM_DELAY, ITEM_RETRIES, MAX_PAGES, PAGE_DELAY, PROGRESS_EVERY
from feed import NotConnectedError
from stats import Stats, compute_stats
from storage import StatsRecord, upsert_stats
from window import Window, plan_window


class Feed(Protocol):
    @property
    def connected(self) -> bool: ...

    def fetch_log_page(self, item_id: int, page: int) -> list[dict[str, Any]]: ...


@dataclass
class CollectResult:
    window: Window
    saved: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def collect_item(
    feed: Feed,
    conn: sqlite3.Connection,
    item_id: int,
    window: Window,
    max_pages: int = MAX_PAGES,
    page_delay: float = PAGE_DELAY,
) -> Stats:
    """Aggregate, compute and save stats for one item."""
    volumes = aggregate_logs(
        item_id, window, feed.fetch_log_page, max_pages=max_pages, page_delay=page_delay
    )
    stats = compute_stats(volumes)
    upsert_stats(conn, StatsRecord.from_stats(item_id, window, stats))

    logging.debug(
        f"Item {item_id}: num={stats.num}, avg={stats.avg:.2f}, stdev={stats.stdev:.2f}, med={stats.med}, min={stats.min}, max={stats.max}"
    )
    return stats


def collect(
    feed: Feed,
    conn: sqlite3.Connection,
    period: int,
    granularity: str,
    offset: int = 1,
    item: str | int = "all",
    *,
    item_count: int,
    now: datetime.datetime | None = None,
    page_delay: float = PAGE_DELAY,
    item_delay: float = ITEM_DELAY,
    max_pages: int = MAX_PAGES,
    retries: int = ITEM_RETRIES,
    progress_every: int = PROGRESS_EVERY,
) -> CollectResult:
    """Fetch market logs and save stats for each selected item.

    Items are processed one at a time in ID order. A failure on one item is
    logged and recorded in the result, the remaining items still run.
    Raises NotConnectedError before doing any work if the feed is down.
    """
    if not feed.connected:
        raise NotConnectedError("Socket not connected")

    item_ids = select_items(item, item_count)
    window = plan_window(period, granularity, offset, now)
    result = CollectResult(window)

    logging.info(
        f"Collecting {len(item_ids)} items for {window.start.isoformat()} to {window.end.isoformat()}"
    )

    for done, item_id in enumerate(item_ids, start=1):
        for attempt in range(retries + 1):
            try:
                collect_item(feed, conn, item_id, window, max_pages, page_delay)
            except Exception as e:
                logging.error(
                    f"Item {item_id} failed (attempt {attempt + 1}/{retries + 1}): {e}"
                )
                continue
            result.saved.append(item_id)
            break
        else:
            result.failed.append(item_id)

        if done % progress_every == 0:
            logging.info(f"Logged {done} of {len(item_ids)} items")

        # Wait between items to avoid spamming the server
        time.sleep(item_delay)

    if result.failed:
        logging.warning(f"Failed items: {', '.join(map(str, result.failed))}")
    logging.info(f"Saved {len(result.saved)} of {len(item_ids)} items to database")

    return result
