import pytest

import bconomy_stats
from feed import PageFetchError


class TestBuildParser:
    def test_collect_defaults(self):
        args = bconomy_stats.build_parser().parse_args(["collect"])

        assert args.command == "collect"
        assert (args.period, args.granularity, args.offset, args.item) == (4, "h", 1, "all")
        assert not args.verbose

    def test_collect_single_item(self):
        args = bconomy_stats.build_parser().parse_args(
            ["collect", "--period", "1", "--granularity", "day", "--offset", "0", "--item", "7", "--verbose"]
        )

        assert (args.period, args.granularity, args.offset, args.item) == (1, "day", 0, 7)
        assert args.verbose

    def test_rejects_bad_item(self):
        with pytest.raises(SystemExit):
            bconomy_stats.build_parser().parse_args(["collect", "--item", "gems"])

    def test_rejects_bad_granularity(self):
        with pytest.raises(SystemExit):
            bconomy_stats.build_parser().parse_args(["report", "--granularity", "week"])


class TestRunCollect:
    def test_not_connected_exits_nonzero(self, monkeypatch, conn):
        class OfflineClient:
            connected = False

            def __enter__(self):
                return self

            def __exit__(self, *args):
                pass

            def connect(self):
                pass

        monkeypatch.setattr(bconomy_stats, "FeedClient", OfflineClient)
        monkeypatch.setattr(bconomy_stats, "load_items", lambda: ["Bcoin"])
        monkeypatch.setattr(bconomy_stats, "init_database", lambda database: conn)
        args = bconomy_stats.build_parser().parse_args(["collect"])

        assert bconomy_stats.run_collect(args) == 1

    def test_failed_item_exits_nonzero(self, monkeypatch, conn, caplog):
        class FailingClient:
            connected = True

            def __enter__(self):
                return self

            def __exit__(self, *args):
                pass

            def connect(self):
                pass

            def fetch_log_page(self, item_id, page):
                raise PageFetchError("boom")

        caplog.set_level("INFO")
        monkeypatch.setattr("collector.time.sleep", lambda seconds: None)
        monkeypatch.setattr(bconomy_stats, "FeedClient", FailingClient)
        monkeypatch.setattr(bconomy_stats, "load_items", lambda: ["Bcoin"])
        monkeypatch.setattr(bconomy_stats, "init_database", lambda database: conn)
        args = bconomy_stats.build_parser().parse_args(["collect"])

        assert bconomy_stats.run_collect(args) == 1
        assert "Failed items: 0" in caplog.text
        assert "Saved to database!" not in caplog.text
