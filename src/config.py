from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Storage
DATABASE = Path("data/market.db")
ITEMS_FILE = Path("data/items.json")
LOG_FILE = Path("logs/bconomy_stats.log")

# Feed
FEED_URL = "wss://bconomy.net/"
FEED_ORIGIN = "https://bconomy.net"
FEED_CLIENT_NAME = "Bconomy Public Web Client"
FETCH_TIMEOUT = 30  # Seconds to wait for a dataFetch acknowledgement
TRANSACTION_TYPE = "marketItemTransaction"  # Only these game logs are trades

# Collection - pacing and bounds
MAX_PAGES = 20  # Hard cap on log pages fetched per item
PAGE_DELAY = 0.5  # Seconds between page requests
ITEM_DELAY = 2  # Seconds between items
ITEM_RETRIES = 0  # Extra attempts for an item whose fetch or save failed
PROGRESS_EVERY = 5  # Log progress every N items

# Default window: the previous 4 hour block
DEFAULT_PERIOD = 4
DEFAULT_GRANULARITY = "h"
DEFAULT_OFFSET = 1
