import datetime
import logging
import os
from typing import Any, TypedDict

import requests
import socketio

from config import (
    FEED_CLIENT_NAME,
    FEED_ORIGIN,
    FEED_URL,
    FETCH_TIMEOUT,
    TRANSACTION_TYPE,
)


class FeedError(Exception):
    """Base error for the Bconomy market feed."""


class NotConnectedError(FeedError):
    """Feed is not connected, nothing can be fetched."""


class PageFetchError(FeedError):
    """A single log page request failed."""


class Transaction(TypedDict):
    timestamp: datetime.datetime
    amount: int
    listing_price: float


def get_headers() -> dict[str, str]:
    """Get headers the Bconomy web client sends."""
    return {
        "Origin": FEED_ORIGIN,
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:145.0) Gecko/20100101 Firefox/145.0",
    }


def get_session(token: str) -> requests.Session:
    """Build an HTTP session carrying the Bconomy session cookie."""
    session = requests.Session()
    session.headers.update(get_headers())
    session.cookies.set("connect.sid", token)
    return session


def get_log_request(item_id: int, page: int) -> dict[str, str | int]:
    """Return the dataFetch payload for one page of item logs."""
    return {
        "type": "richLogsByIdType",
        "idType": "itemId",
        "id": item_id,
        "page": page,
    }


def parse_timestamp(value: Any) -> datetime.datetime:
    """Parse an ISO 8601 or epoch-milliseconds timestamp as UTC."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(value / 1000, datetime.timezone.utc)

    moment = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)


def extract_transactions(logs: list[dict[str, Any]]) -> list[Transaction]:
    """Extract market transactions from a page of raw logs, keeping feed order.

    Logs of any other type, and transactions missing their date, amount or
    listing price, are dropped.
    """
    transactions = []

    for log in logs:
        if not isinstance(log, dict):
            continue

        game_log = log.get("gameLog") or {}
        if game_log.get("type") != TRANSACTION_TYPE:
            continue

        data = game_log.get("data") or {}
        try:
            transaction: Transaction = {
                "timestamp": parse_timestamp(game_log["date"]),
                "amount": int(data["amount"]),
                "listing_price": float(data["listingPrice"]),
            }
        except (KeyError, TypeError, ValueError):
            logging.debug(f"Dropping malformed transaction log: {log}")
            continue

        transactions.append(transaction)

    return transactions


class FeedClient:
    """Socket.IO client for the Bconomy backend."""

    def __init__(self, token: str | None = None, url: str = FEED_URL) -> None:
        self.url = url
        self.token = token if token is not None else os.getenv("BC_TOKEN", "")
        self.sio = socketio.Client(http_session=get_session(self.token))
        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)

    def __enter__(self) -> "FeedClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _on_connect(self) -> None:
        logging.info("Connected to the Bconomy feed")

    def _on_disconnect(self, *args) -> None:
        logging.info("Disconnected from the Bconomy feed")

    @property
    def connected(self) -> bool:
        return self.sio.connected

    def connect(self) -> None:
        """Open the websocket connection."""
        if not self.token:
            logging.warning("BC_TOKEN not set, connecting without a session")

        try:
            self.sio.connect(
                self.url,
                headers=get_headers(),
                auth={"token": FEED_CLIENT_NAME},
                transports=["websocket"],
                wait_timeout=FETCH_TIMEOUT,
            )
        except socketio.exceptions.ConnectionError as e:
            logging.error(f"Connection error: {e}")

    def close(self) -> None:
        if self.sio.connected:
            self.sio.disconnect()

    def fetch_log_page(self, item_id: int, page: int) -> list[dict[str, Any]]:
        """Fetch one page of raw logs for an item, newest first."""
        if not self.connected:
            raise NotConnectedError("Feed not connected")

        try:
            logs = self.sio.call(
                "dataFetch", get_log_request(item_id, page), timeout=FETCH_TIMEOUT
            )
        except socketio.exceptions.SocketIOError as e:
            raise PageFetchError(
                f"Failed to fetch page {page} for item {item_id}: {e}"
            ) from e

        if logs is None:
            return []
        if not isinstance(logs, list):
            raise PageFetchError(
                f"Unexpected response for item {item_id} page {page}: {type(logs).__name__}"
            )
        return logs
