"""Exceptions for collaborator and programming failures.

Expected rejections (not your turn, slot full, ...) are not exceptions; they
come back as PickResult / DraftResult / RosterResult.
"""


class FantasyCricketError(Exception):
    """Base class for league manager errors."""


class LeagueNotFoundError(FantasyCricketError):
    pass


class TeamNotFoundError(FantasyCricketError):
    pass


class DuplicateTeamError(FantasyCricketError):
    """A user already has a team in this tournament."""


class CricketApiError(FantasyCricketError):
    """The live stats feed returned an error or unusable response."""


class PointsNotConfirmedError(FantasyCricketError):
    """apply_points was called without admin confirmation."""


class MatchAlreadyAppliedError(FantasyCricketError):
    """Points for this match were already added to the cumulative totals."""
