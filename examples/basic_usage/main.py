"""Frame-loop demo: submit a random score, then show the top of the leaderboard."""

from __future__ import annotations

import argparse
import logging
import random
import time

from ascnd.api.config import load_client_config
from ascnd.api.models import (
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)
from ascnd.api.outcomes import OperationFailure
from ascnd.runtime.logging import setup_logging
from ascnd.runtime.module import LeaderboardModule

logger = logging.getLogger("examples.basic_usage")


class DemoScreen:
    """Prints every notification and counts outstanding requests."""

    def __init__(self) -> None:
        self.outstanding = 0

    def on_score_submitted(self, result: ScoreResult, submission: ScoreSubmission) -> None:
        self.outstanding -= 1
        best = " (New personal best!)" if result.is_new_best else ""
        print(f"Score submitted for {submission.player_id}! Rank #{result.rank}{best}")
        print(f"Score ID: {result.score_id}")

    def on_leaderboard_received(self, page: LeaderboardPage, query: LeaderboardQuery) -> None:
        self.outstanding -= 1
        print(f"Leaderboard {query.leaderboard_id} ({page.total_entries} total entries):")
        for entry in page.entries:
            print(f"  #{entry.rank}: {entry.player_id} - {entry.score}")
        if page.has_more:
            print("  (more entries available)")

    def on_player_rank_received(self, result: RankResult, query: RankQuery) -> None:
        self.outstanding -= 1
        if not result.ranked:
            print(f"{query.player_id} is not ranked yet")
            return
        print(
            f"{query.player_id}: rank #{result.rank}, score {result.score}, "
            f"percentile {result.percentile:.1f}"
        )

    def on_request_failed(self, failure: OperationFailure) -> None:
        self.outstanding -= 1
        print(f"Error in {failure.operation}: {failure.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ascnd basic usage")
    parser.add_argument("--leaderboard", default="demo-leaderboard", help="Leaderboard id.")
    parser.add_argument("--player", default="", help="Player id (random when empty).")
    parser.add_argument("--limit", type=int, default=5, help="Entries to fetch.")
    parser.add_argument("--fps", type=float, default=60.0, help="Host loop frequency.")
    return parser


def main() -> int:
    args = build_parser().parse_args()
    setup_logging()
    config = load_client_config()
    if not config.has_credential:
        print("Set ASCND_API_KEY to talk to the leaderboard service.")

    screen = DemoScreen()
    module = LeaderboardModule(config, observers=(screen,))
    module.start(None)

    player_id = args.player or f"player-{random.randint(1, 99)}"
    score = random.randint(1000, 100000)
    print(f"Submitting score {score} for {player_id}...")
    module.facade.submit_score(args.leaderboard, player_id, score)
    module.facade.get_leaderboard(args.leaderboard, limit=args.limit)
    module.facade.get_player_rank(args.leaderboard, player_id)
    screen.outstanding = 3

    frame_seconds = 1.0 / max(1.0, float(args.fps))
    try:
        while screen.outstanding > 0:
            module.update(None)
            time.sleep(frame_seconds)
    except KeyboardInterrupt:
        logger.info("demo_interrupted outstanding=%d", screen.outstanding)
    finally:
        module.shutdown(None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
