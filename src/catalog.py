import json
import logging
from pathlib import Path

from config import ITEMS_FILE


def load_items(path: Path = ITEMS_FILE) -> list[str]:
    """Load item labels, indexed by Bconomy item ID."""
    with open(path) as f:
        items = json.load(f)

    if not isinstance(items, list):
        raise ValueError(f"{path} must contain a JSON array of item names")

    logging.info(f"Loaded {len(items)} items from {path}")
    return [str(item) for item in items]


def parse_item_selector(value: str) -> str | int:
    """Parse a CLI item selector: 'all' or an item ID."""
    if value == "all":
        return value
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Item must be 'all' or an item ID, got {value!r}") from None


def select_items(item: str | int, item_count: int) -> range:
    """Return the item ID range for 'all' or a single item ID."""
    if item == "all":
        return range(0, item_count)

    if not isinstance(item, int) or not 0 <= item < item_count:
        raise ValueError(f"Item ID {item!r} out of range [0, {item_count})")

    return range(item, item + 1)
