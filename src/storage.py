import datetime
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from stats import Stats
from window import Window, as_utc


@dataclass(frozen=True)
class StatsRecord:
    """Stats for one item over one window, as stored."""

    item_id: int
    window_start: datetime.datetime
    window_end: datetime.datetime
    avg: float
    stdev: float
    num: int
    med: float
    min: float
    max: float

    @classmethod
    def from_stats(cls, item_id: int, window: Window, stats: Stats) -> "StatsRecord":
        return cls(
            item_id=item_id,
            window_start=window.start,
            window_end=window.end,
            avg=stats.avg,
            stdev=stats.stdev,
            num=stats.num,
            med=stats.med,
            min=stats.min,
            max=stats.max,
        )

    def to_stats(self) -> Stats:
        return Stats(
            avg=self.avg,
            stdev=self.stdev,
            num=self.num,
            med=self.med,
            min=self.min,
            max=self.max,
        )


def to_db_time(moment: datetime.datetime) -> str:
    """Format a datetime as a sortable UTC ISO string."""
    return as_utc(moment).isoformat()


def from_db_time(value: str) -> datetime.datetime:
    return as_utc(datetime.datetime.fromisoformat(value))


def init_database(database: Path | str) -> sqlite3.Connection:
    """Initialize database with item_stats table and indexes."""
    if isinstance(database, Path):
        database.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(database)
    cursor = conn.cursor()

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS item_stats (
            item_id INTEGER NOT NULL,
            window_start TEXT NOT NULL,
            window_end TEXT NOT NULL,
            avg REAL NOT NULL,
            stdev REAL NOT NULL,
            num INTEGER NOT NULL,
            med REAL NOT NULL,
            min REAL NOT NULL,
            max REAL NOT NULL,
            PRIMARY KEY (item_id, window_start)
        )
        """
    )

    # Create index for window lookups across items
    cursor.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_item_stats_window
        ON item_stats(window_start)
        """
    )

    conn.commit()

    return conn


def upsert_stats(conn: sqlite3.Connection, record: StatsRecord) -> None:
    """Insert a stats record, replacing any existing one for the same item and window."""
    conn.execute(
        """
        INSERT OR REPLACE INTO item_stats
        VALUES (?,?,?,?,?,?,?,?,?)
        """,
        (
            record.item_id,
            to_db_time(record.window_start),
            to_db_time(record.window_end),
            record.avg,
            record.stdev,
            record.num,
            record.med,
            record.min,
            record.max,
        ),
    )
    conn.commit()


def row_to_record(row: tuple) -> StatsRecord:
    item_id, window_start, window_end, avg, stdev, num, med, min_, max_ = row
    return StatsRecord(
        item_id=item_id,
        window_start=from_db_time(window_start),
        window_end=from_db_time(window_end),
        avg=avg,
        stdev=stdev,
        num=num,
        med=med,
        min=min_,
        max=max_,
    )


def get_stats(
    conn: sqlite3.Connection, item_id: int, window_start: datetime.datetime
) -> StatsRecord | None:
    """Return the record for an item starting at window_start, if stored."""
    cursor = conn.execute(
        "SELECT * FROM item_stats WHERE item_id = ? AND window_start = ?",
        (item_id, to_db_time(window_start)),
    )
    row = cursor.fetchone()
    return row_to_record(row) if row else None


def get_stats_between(
    conn: sqlite3.Connection,
    item_id: int,
    start: datetime.datetime,
    end: datetime.datetime,
) -> list[StatsRecord]:
    """Return an item's records with window_start in [start, end), oldest first."""
    cursor = conn.execute(
        """
        SELECT * FROM item_stats
        WHERE item_id = ? AND window_start >= ? AND window_start < ?
        ORDER BY window_start
        """,
        (item_id, to_db_time(start), to_db_time(end)),
    )
    return [row_to_record(row) for row in cursor.fetchall()]
