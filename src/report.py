import logging
import sqlite3

from stats import pool_stats
from storage import get_stats, get_stats_between
from window import Window

LIVE_HEADER = ("id", "item", "avg", "stdev", "med", "num")
ROLLING_HEADER = ("id", "item", "avg", "stdev", "num")


def live_rows(
    conn: sqlite3.Connection, items: list[str], window: Window
) -> list[tuple]:
    """One row per item with the stats stored for window, None if missing."""
    rows = []
    for item_id, label in enumerate(items):
        record = get_stats(conn, item_id, window.start)
        if record is None:
            rows.append((f"item{item_id}", label, None, None, None, None))
        else:
            rows.append(
                (
                    f"item{item_id}",
                    label,
                    record.avg,
                    record.stdev,
                    record.med,
                    record.num,
                )
            )
    return rows


def rolling_rows(
    conn: sqlite3.Connection, items: list[str], day: Window
) -> list[tuple]:
    """One row per item with stats pooled over every window starting in day."""
    rows = []
    for item_id, label in enumerate(items):
        records = get_stats_between(conn, item_id, day.start, day.end)
        pooled = pool_stats([r.to_stats() for r in records])
        rows.append((f"item{item_id}", label, pooled.avg, pooled.stdev, pooled.num))
    return rows


def format_value(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def format_table(header: tuple, rows: list[tuple]) -> str:
    """Format rows as a fixed-width text table."""
    cells = [[str(h) for h in header]]
    cells.extend([format_value(v) for v in row] for row in rows)
    widths = [max(len(row[i]) for row in cells) for i in range(len(header))]
    return "\n".join(
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths))
        for row in cells
    )


def format_window(window: Window) -> str:
    fmt = "%Y-%m-%d %H:%M UTC"
    return f"{window.start.strftime(fmt)} - {window.end.strftime(fmt)}"


def report(
    conn: sqlite3.Connection, items: list[str], live: Window, day: Window
) -> None:
    """Log live market and 24-hour rolling tables."""
    logging.info(
        f"Live Market ({format_window(live)}):\n{format_table(LIVE_HEADER, live_rows(conn, items, live))}"
    )
    logging.info(
        f"24-hour Rolling ({format_window(day)}):\n{format_table(ROLLING_HEADER, rolling_rows(conn, items, day))}"
    )
