"""Tests for the caller-side snapshot feed."""

import logging

import pytest

from oddsedge.stream.feed import SnapshotFeed


class TestSnapshotFeed:
    """Test ordering, pinning and stale carry-forward across applies."""

    def test_first_apply(self, make_snapshot):
        """Test the first snapshot is all added."""
        feed = SnapshotFeed()
        result = feed.apply(make_snapshot("A", "B"))

        assert result.added == {"A", "B"}
        assert [o.id for o in feed.rows] == ["A", "B"]
        assert feed.last_applied == make_snapshot().fetched_at
        assert feed.last_result is result

    def test_tolerance_from_config(self, monkeypatch):
        """Test the EV tolerance defaults to config."""
        monkeypatch.setenv("EV_CHANGE_TOLERANCE", "0.2")
        assert SnapshotFeed().ev_tolerance == 0.2
        assert SnapshotFeed(ev_tolerance=0.5).ev_tolerance == 0.5

    def test_out_of_order_dropped(self, make_snapshot, caplog):
        """Test snapshots not newer than the last applied are dropped."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", seconds=10))

        with caplog.at_level(logging.WARNING):
            assert feed.apply(make_snapshot("B", seconds=5)) is None
            assert feed.apply(make_snapshot("B", seconds=10)) is None

        assert [o.id for o in feed.rows] == ["A"]
        assert "out-of-order" in caplog.text

    def test_pinned_stale_row_carried_forward(self, make_snapshot):
        """Test a pinned row stays at its index across snapshots until dismissed."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", "B", "C", seconds=0))
        feed.pin("B")
        assert feed.pins == {"B": 1}

        result = feed.apply(make_snapshot("A", "C", "D", seconds=1))
        assert result.ids == ["A", "B", "C", "D"]
        assert result.stale == {"B"}

        result = feed.apply(make_snapshot("A", "C", "D", seconds=2))
        assert result.ids == ["A", "B", "C", "D"]
        assert result.stale == {"B"}

        feed.dismiss("B")
        result = feed.apply(make_snapshot("A", "C", "D", seconds=3))
        assert result.ids == ["A", "C", "D"]
        assert result.stale == frozenset()
        assert feed.pins == {}

    def test_unpinned_stale_row_dropped(self, make_snapshot):
        """Test an unpinned row disappears once it goes stale."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", "B", seconds=0))
        result = feed.apply(make_snapshot("A", seconds=1))

        assert result.stale == {"B"}
        assert [o.id for o in feed.rows] == ["A"]

    def test_pin_explicit_index(self, make_snapshot):
        """Test pinning at a chosen index."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", "B", "C", seconds=0))
        feed.pin("C", 0)

        result = feed.apply(make_snapshot("A", "B", "C", seconds=1))
        assert result.ids == ["C", "A", "B"]

    def test_unpin(self, make_snapshot):
        """Test an unpinned row flows with the snapshot order again."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", "B", seconds=0))
        feed.pin("B", 0)
        feed.unpin("B")

        result = feed.apply(make_snapshot("A", "B", seconds=1))
        assert result.ids == ["A", "B"]

    def test_pin_unknown_raises(self, make_snapshot):
        """Test pinning a row that is not displayed raises KeyError."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A"))
        with pytest.raises(KeyError):
            feed.pin("Z")

    def test_changes_between_applies(self, make_snapshot):
        """Test price changes are reported against the previous apply."""
        feed = SnapshotFeed()
        feed.apply(make_snapshot("A", seconds=0, A={"price": -110}))
        result = feed.apply(make_snapshot("A", seconds=1, A={"price": 105}))

        assert "A" in result.changed
        assert result.added == frozenset()
