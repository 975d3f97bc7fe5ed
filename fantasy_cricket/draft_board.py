"""Export a league's draft board and rosters to Excel.

The workbook is a read-only artifact for admins (sharing results, auditing a
draft before a reset). The JSON store stays the source of truth.

Sheet "Draft Board":
- Row 1: "Round" then one column per team in first-round order
- Row 2+: one row per round, cell = "Player Name (slot)"

Sheet "Rosters":
- One block per slot, one column per team
"""

import logging
from pathlib import Path

import openpyxl
from openpyxl.styles import Font

from .models import Slot
from .roster import lineup_by_slot
from .store import LeagueStore

logger = logging.getLogger('fantasy_cricket.draft_board')

BOLD = Font(bold=True)


def export_draft_board(
    store: LeagueStore,
    league_id: str,
    excel_path: str | Path,
) -> Path:
    """Write the draft board and current rosters for a league.

    Args:
        store: League store
        league_id: League to export
        excel_path: Workbook path (overwritten if it exists)

    Returns:
        Path of the written workbook
    """
    excel_path = Path(excel_path)
    state = store.get_league_draft_state(league_id)
    teams = store.get_teams_for_league(league_id)
    players = {p.id: p for p in store.get_players_for_tournament(state.tournament_id)}
    picks = store.list_draft_picks(league_id)

    # Column order follows round one of the draft when there is one
    first_round = [e.participant_id for e in state.draft_order if e.round == 1]
    team_ids = first_round or [t.id for t in teams]
    team_names = {t.id: t.name for t in teams}
    columns = {team_id: idx for idx, team_id in enumerate(team_ids, start=2)}

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Draft Board'

    ws.cell(row=1, column=1, value='Round').font = BOLD
    for team_id, col in columns.items():
        ws.cell(row=1, column=col, value=team_names.get(team_id, team_id)).font = BOLD

    for round_number in range(1, state.rounds + 1):
        ws.cell(row=round_number + 1, column=1, value=round_number)

    for pick in picks:
        col = columns.get(pick.participant_id)
        if col is None:
            continue
        player = players.get(pick.player_id)
        name = player.name if player else pick.player_id
        ws.cell(row=pick.round + 1, column=col, value=f'{name} ({Slot(pick.slot).value})')

    rosters_ws = wb.create_sheet('Rosters')
    rosters_ws.cell(row=1, column=1, value='Slot').font = BOLD
    for team_id, col in columns.items():
        rosters_ws.cell(row=1, column=col, value=team_names.get(team_id, team_id)).font = BOLD

    lineups = {t.id: lineup_by_slot(t) for t in teams}
    current_row = 2
    for slot in Slot:
        rosters_ws.cell(row=current_row, column=1, value=slot.value).font = BOLD
        depth = max((len(lineups.get(tid, {}).get(slot, [])) for tid in team_ids), default=0)
        for offset in range(depth):
            for team_id, col in columns.items():
                slot_players = lineups.get(team_id, {}).get(slot, [])
                if offset < len(slot_players):
                    player = players.get(slot_players[offset])
                    value = player.name if player else slot_players[offset]
                    rosters_ws.cell(row=current_row + offset, column=col, value=value)
        current_row += max(depth, 1) + 1

    excel_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(excel_path))
    wb.close()

    logger.info(f'Draft board for {league_id} written to {excel_path} ({len(picks)} picks)')
    return excel_path
