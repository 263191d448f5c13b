"""
Standings calculator.

Computes ranked team records from games under an event's point structure,
goal-differential cap and tiebreaker chain.

Ordering:
1. Points (descending)
2. Within each equal-points group, the tiebreaker rules in priority order.
   Each rule partitions only the teams still tied after the rules before
   it; the next rule is applied to each remaining sub-group on its own.
3. Team name (case-insensitive), then team id

Supported rules:
- head_to_head: points earned in games among the tied teams only
- wins: most wins
- goal_differential: highest (per-game clamped) goal differential
- goals_for: most goals scored
- goals_against / fewest_goals_against: fewest goals allowed
- goal_percentage: GF / (GF + GA)

Only completed games with both scores count. Overtime and shootout losses
are losses, tallied separately as OTL / SOL.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Sequence

from rinksync.models import GameStatus, ResultType

logger = logging.getLogger(__name__)

FEWEST_GOALS_AGAINST_ALIASES = {"goals_against", "fewest_goals_against"}


@dataclass(frozen=True)
class PointStructure:
    """Points per result. ``overtime_loss`` None means an OT/SO loss earns ``loss``."""
    win: int = 2
    tie: int = 1
    loss: int = 0
    overtime_loss: Optional[int] = None

    @classmethod
    def from_event(cls, event) -> "PointStructure":
        return cls(
            win=event.win_points if event.win_points is not None else 2,
            tie=event.tie_points if event.tie_points is not None else 1,
            loss=event.loss_points if event.loss_points is not None else 0,
            overtime_loss=event.overtime_loss_points,
        )

    def for_loss(self, result_type: Optional[str]) -> int:
        if result_type in (ResultType.OVERTIME.value, ResultType.SHOOTOUT.value) and self.overtime_loss is not None:
            return self.overtime_loss
        return self.loss


@dataclass(frozen=True)
class TeamRef:
    """Minimal team identity accepted by the calculator."""
    id: str
    name: str


@dataclass
class TeamStanding:
    """One team's row in a standings table."""
    kind: ClassVar[str] = "team_standing"

    team_id: str
    team_name: str
    gp: int = 0
    w: int = 0
    l: int = 0  # noqa: E741
    t: int = 0
    otl: int = 0
    sol: int = 0
    pts: int = 0
    gf: int = 0
    ga: int = 0
    gd: int = 0
    rank: int = 0
    qualifies: Optional[bool] = None

    @property
    def goal_percentage(self) -> float:
        total = self.gf + self.ga
        return self.gf / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_counted(game) -> bool:
    """Completed with both scores."""
    return (
        game.status == GameStatus.COMPLETED.value
        and game.final_score_home is not None
        and game.final_score_away is not None
    )


def clamp(value: int, cap: Optional[int]) -> int:
    if cap is None:
        return value
    return max(-cap, min(cap, value))


def rule_names(rules: Iterable[Any]) -> List[str]:
    """
    Rule types in application order.

    Accepts plain strings or objects with ``rule_type`` / ``priority_order``.
    """
    items = list(rules or [])
    if items and not isinstance(items[0], str):
        items = sorted(items, key=lambda r: (r.priority_order, r.rule_type))
        return [r.rule_type for r in items]
    return [str(r) for r in items]


class StandingsCalculator:
    """
    Standings for one group of teams (an event or a pool).

    Example:
        calc = StandingsCalculator(["head_to_head", "goal_differential"], PointStructure(), goal_diff_cap=5)
        table = calc.compute(teams, games)
    """

    def __init__(
        self,
        tiebreaker_rules: Optional[Iterable[Any]] = None,
        point_structure: Optional[PointStructure] = None,
        goal_diff_cap: Optional[int] = 5,
    ):
        self.rules = rule_names(tiebreaker_rules)
        self.points = point_structure or PointStructure()
        self.goal_diff_cap = goal_diff_cap

    def compute(self, teams: Sequence[Any], games: Iterable[Any]) -> List[TeamStanding]:
        """
        Rank ``teams`` over ``games``.

        Args:
            teams: Objects with ``id`` and ``name`` (Team rows or TeamRef)
            games: Objects shaped like Game rows; games involving a team not
                in ``teams`` are ignored

        Returns:
            Standings in rank order, ``rank`` starting at 1
        """
        table: Dict[str, TeamStanding] = {}
        for team in teams:
            if team.id not in table:
                table[team.id] = TeamStanding(team_id=team.id, team_name=team.name or "")

        counted = [
            g for g in games
            if is_counted(g) and g.home_team_id in table and g.away_team_id in table
        ]
        for game in counted:
            self._apply_game(table, game)

        ordered: List[TeamStanding] = []
        for group in _partition(sorted(table.values(), key=lambda s: -s.pts), lambda s: s.pts):
            ordered.extend(self._break_ties(group, 0, counted))

        for position, standing in enumerate(ordered, start=1):
            standing.rank = position
        return ordered

    # ========================================================================
    # Aggregation
    # ========================================================================

    def _apply_game(self, table: Dict[str, TeamStanding], game) -> None:
        home = table[game.home_team_id]
        away = table[game.away_team_id]
        home_goals, away_goals = game.final_score_home, game.final_score_away

        for standing, scored, allowed in ((home, home_goals, away_goals), (away, away_goals, home_goals)):
            standing.gp += 1
            standing.gf += scored
            standing.ga += allowed
            standing.gd += clamp(scored - allowed, self.goal_diff_cap)

            if scored > allowed:
                standing.w += 1
                standing.pts += self.points.win
            elif scored < allowed:
                standing.l += 1
                if game.result_type == ResultType.OVERTIME.value:
                    standing.otl += 1
                elif game.result_type == ResultType.SHOOTOUT.value:
                    standing.sol += 1
                standing.pts += self.points.for_loss(game.result_type)
            else:
                standing.t += 1
                standing.pts += self.points.tie

    # ========================================================================
    # Tiebreaking
    # ========================================================================

    def _break_ties(self, group: List[TeamStanding], rule_index: int, games: List[Any]) -> List[TeamStanding]:
        if len(group) <= 1:
            return group

        if rule_index >= len(self.rules):
            return sorted(group, key=lambda s: (s.team_name.casefold(), s.team_id))

        key = self._rule_key(self.rules[rule_index], group, games)
        if key is None:
            return self._break_ties(group, rule_index + 1, games)

        result: List[TeamStanding] = []
        for sub_group in _partition(sorted(group, key=lambda s: -key(s)), key):
            result.extend(self._break_ties(sub_group, rule_index + 1, games))
        return result

    def _rule_key(self, rule: str, group: List[TeamStanding], games: List[Any]) -> Optional[Callable[[TeamStanding], float]]:
        """Higher value ranks first. None for an unknown rule."""
        if rule == "head_to_head":
            h2h = self._head_to_head_points(group, games)
            return lambda s: h2h[s.team_id]
        if rule == "wins":
            return lambda s: s.w
        if rule == "goal_differential":
            return lambda s: s.gd
        if rule == "goals_for":
            return lambda s: s.gf
        if rule in FEWEST_GOALS_AGAINST_ALIASES:
            return lambda s: -s.ga
        if rule == "goal_percentage":
            return lambda s: s.goal_percentage

        logger.warning(f"Unknown tiebreaker rule '{rule}', skipping")
        return None

    def _head_to_head_points(self, group: List[TeamStanding], games: List[Any]) -> Dict[str, int]:
        """Points each team earned in games against the other teams of ``group``."""
        members = {s.team_id for s in group}
        points = {team_id: 0 for team_id in members}

        for game in games:
            if game.home_team_id not in members or game.away_team_id not in members:
                continue
            home, away = game.final_score_home, game.final_score_away
            if home > away:
                points[game.home_team_id] += self.points.win
                points[game.away_team_id] += self.points.for_loss(game.result_type)
            elif away > home:
                points[game.away_team_id] += self.points.win
                points[game.home_team_id] += self.points.for_loss(game.result_type)
            else:
                points[game.home_team_id] += self.points.tie
                points[game.away_team_id] += self.points.tie
        return points


def _partition(ordered: List[TeamStanding], key: Callable[[TeamStanding], Any]) -> List[List[TeamStanding]]:
    """Split an already-sorted list into runs of equal ``key``."""
    groups: List[List[TeamStanding]] = []
    for standing in ordered:
        if groups and key(groups[-1][0]) == key(standing):
            groups[-1].append(standing)
        else:
            groups.append([standing])
    return groups


def calculate_standings(
    teams: Sequence[Any],
    games: Iterable[Any],
    tiebreaker_rules: Optional[Iterable[Any]] = None,
    point_structure: Optional[PointStructure] = None,
    goal_diff_cap: Optional[int] = 5,
) -> List[TeamStanding]:
    """Module-level shortcut for ``StandingsCalculator(...).compute(teams, games)``."""
    return StandingsCalculator(tiebreaker_rules, point_structure, goal_diff_cap).compute(teams, games)
