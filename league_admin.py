#!/usr/bin/env python3
"""
Fantasy Cricket League Admin CLI

Admin tooling for a league's draft and match scoring, backed by the JSON
store in the data directory.

Usage:
    python league_admin.py --league ipl-main status
    python league_admin.py --league ipl-main start-draft --rounds 12
    python league_admin.py --league ipl-main watch --team team-a
    python league_admin.py --league ipl-main preview-scores --match 8c1f...
    python league_admin.py --league ipl-main apply-scores --match 8c1f... --confirm
    python league_admin.py --league ipl-main preview-scores --match m1 --stats-file manual.json
    python league_admin.py --league ipl-main export-board -o draft_board.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path

from fantasy_cricket import (
    CricketDataClient,
    DraftStateMachine,
    DraftSyncClient,
    JsonLeagueStore,
    apply_points,
    performance_from_stats,
    preview_scorecard,
)
from fantasy_cricket.draft_board import export_draft_board
from fantasy_cricket.errors import FantasyCricketError
from fantasy_cricket.logging_config import setup_logging
from fantasy_cricket.schemas import ManualStatsFile
from fantasy_cricket.utils import load_json
from fantasy_cricket.validators import validate_draft_history, validate_roster


def load_performances(args):
    """Stats from a manual entry file, or the live feed when none is given."""
    if args.stats_file:
        data = load_json(args.stats_file, schema=ManualStatsFile)
        return [performance_from_stats(name, stats) for name, stats in data.players.items()]
    return CricketDataClient().fetch_performances(args.match)


def print_preview(preview):
    print(f"\nMatch {preview.match_id}")
    print("=" * 60)
    for row in sorted(preview.rows, key=lambda r: r.points.total, reverse=True):
        name = row.player.name if row.player else f"{row.performance.player_name} [UNMATCHED]"
        print(f"  {name}: {row.points.total} pts")
        for label, points in row.points.breakdown:
            print(f"      {label}: {points}")
        for warning in row.warnings:
            print(f"      ⚠️  {warning}")
    print(f"\n  {len(preview.matched)} matched, {len(preview.unmatched)} unmatched")


def cmd_status(args, store):
    state = store.get_league_draft_state(args.league)
    print(f"League {state.league_id} ({state.tournament_id})")
    print(f"  Status: {state.status.value}")
    print(f"  Pick:   {state.current_pick}/{state.total_picks}")
    on_clock = state.on_the_clock()
    if on_clock:
        print(f"  On the clock: {on_clock.participant_id} (round {on_clock.round}, pick {on_clock.pick_number})")

    players = {p.id: p for p in store.get_players_for_tournament(state.tournament_id)}
    issues = validate_draft_history(state, store.list_draft_picks(args.league))
    for team in store.get_teams_for_league(args.league):
        issues.extend(validate_roster(team, players))
    for issue in issues:
        print(f"  ⚠️  {issue}")
    return 1 if issues else 0


def cmd_open_registration(args, store):
    result = DraftStateMachine(store, args.league).open_registration()
    print(result.message or "Registration open")
    return 0 if result.accepted else 1


def cmd_start_draft(args, store):
    machine = DraftStateMachine(store, args.league)
    result = machine.start_draft(rounds=args.rounds, admin_override=args.admin_override)
    if not result.accepted:
        print(f"❌ {result.message}")
        return 1
    print(f"Draft started: {result.state.total_picks} picks over {result.state.rounds} rounds")
    return 0


def cmd_reset_draft(args, store):
    if not args.yes:
        print("Refusing to reset without --yes (all picks will be deleted)")
        return 1
    DraftStateMachine(store, args.league).reset_draft()
    print("Draft reset")
    return 0


def cmd_watch(args, store):
    client = DraftSyncClient(store, args.league, participant_id=args.team, poll_interval=args.interval)

    def on_update(update):
        for pick in update.new_picks:
            print(f"[+] Pick {pick.pick_number} (R{pick.round}): {pick.participant_id} -> {pick.player_id} [{pick.slot.value}]")
        if client.is_my_turn():
            print("    Your turn!")

    client.run(max_polls=args.max_polls, on_update=on_update)
    return 0


def cmd_preview_scores(args, store):
    state = store.get_league_draft_state(args.league)
    players = store.get_players_for_tournament(state.tournament_id)
    performances = load_performances(args)
    preview = preview_scorecard(state.tournament_id, args.match, performances, players)
    print_preview(preview)
    print("\nNothing has been saved. Re-run with apply-scores --confirm to apply.")
    return 0


def cmd_apply_scores(args, store):
    state = store.get_league_draft_state(args.league)
    players = store.get_players_for_tournament(state.tournament_id)
    performances = load_performances(args)
    preview = preview_scorecard(state.tournament_id, args.match, performances, players)
    print_preview(preview)
    updated = apply_points(store, preview, confirmed=args.confirm, force=args.force)
    print(f"\nApplied points to {len(updated)} players")
    return 0


def cmd_export_board(args, store):
    path = export_draft_board(store, args.league, args.output)
    print(f"Draft board written to {path}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Fantasy cricket league admin")
    parser.add_argument("--data-dir", "-d", default="data", help="Path to data directory")
    parser.add_argument("--league", "-l", required=True, help="League id")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show draft status")
    sub.add_parser("open-registration", help="Open team registration")

    start = sub.add_parser("start-draft", help="Fix the draft order and start the draft")
    start.add_argument("--rounds", type=int, default=None, help="Rounds (default: roster size)")
    start.add_argument("--admin-override", action="store_true", help="Start from pending")

    reset = sub.add_parser("reset-draft", help="Delete all picks and return to pending")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    watch = sub.add_parser("watch", help="Follow the draft by polling")
    watch.add_argument("--team", default=None, help="Your team id (to flag your turn)")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    watch.add_argument("--max-polls", type=int, default=None, help="Stop after N polls")

    for name, help_text in (
        ("preview-scores", "Compute match points without saving"),
        ("apply-scores", "Compute and save match points"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--match", "-m", required=True, help="Match id")
        cmd.add_argument("--stats-file", default=None, help="Manually entered stats JSON")
        if name == "apply-scores":
            cmd.add_argument("--confirm", action="store_true", help="Confirm after reviewing the preview")
            cmd.add_argument("--force", action="store_true", help="Apply a match that was already applied")

    export = sub.add_parser("export-board", help="Write draft board to Excel")
    export.add_argument("--output", "-o", default="draft_board.xlsx", help="Workbook path")

    args = parser.parse_args()

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
        league_id=args.league,
    )

    store = JsonLeagueStore(Path(args.data_dir))
    commands = {
        "status": cmd_status,
        "open-registration": cmd_open_registration,
        "start-draft": cmd_start_draft,
        "reset-draft": cmd_reset_draft,
        "watch": cmd_watch,
        "preview-scores": cmd_preview_scores,
        "apply-scores": cmd_apply_scores,
        "export-board": cmd_export_board,
    }

    try:
        sys.exit(commands[args.command](args, store))
    except (FantasyCricketError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
