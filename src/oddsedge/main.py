"""Command-line entry point: evaluate a JSON file of markets."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from oddsedge.config import get_config
from oddsedge.models import EventInfo, MarketQuotes, Quote, side_quotes
from oddsedge.odds.convert import format_american_odds
from oddsedge.odds.edge import Snapshot, build_snapshot
from oddsedge.odds.ev import format_ev

logger = logging.getLogger(__name__)


def _parse_event(data: dict) -> EventInfo:
    start = data.get("start_time")
    return EventInfo(
        event_id=str(data["event_id"]),
        start_time=datetime.fromisoformat(start) if start else None,
        home_team=data.get("home_team"),
        away_team=data.get("away_team"),
    )


def _parse_quotes(rows: list[dict] | None) -> dict[str, Quote]:
    return side_quotes(
        *(
            Quote(
                book_id=row["book_id"],
                price=int(row["price"]),
                line=row.get("line"),
                link=row.get("link"),
            )
            for row in rows or []
        )
    )


def parse_market(data: dict) -> MarketQuotes:
    """Build MarketQuotes from one JSON object; missing sides are tolerated."""
    return MarketQuotes(
        sport=data["sport"],
        event=_parse_event(data["event"]),
        market=data["market"],
        line=data.get("line"),
        over=_parse_quotes(data.get("over")),
        under=_parse_quotes(data.get("under")),
        player=data.get("player"),
        yes_no=bool(data.get("yes_no", False)),
    )


def load_markets(path: Path) -> list[MarketQuotes]:
    """Load a JSON list of markets from ``path``."""
    with path.open(encoding="utf-8") as f:
        payload = json.load(f)
    return [parse_market(item) for item in payload]


def run(path: Path) -> Snapshot:
    """Evaluate the markets in ``path`` and log one line per opportunity."""
    snapshot = build_snapshot(load_markets(path))
    for opp in snapshot:
        stake = f"{opp.kelly.stake:.2f}" if opp.kelly else "-"
        logger.info(
            f"{opp.id} best {format_american_odds(opp.best_price)} "
            f"({', '.join(opp.best.books)}) EV {format_ev(opp.ev_display)} stake {stake}"
        )
    return snapshot


def main(argv: list[str] | None = None) -> None:
    """Main entry point with logging configuration."""
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        logging.error("Usage: oddsedge <markets.json>")
        sys.exit(2)

    try:
        run(Path(args[0]))
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
