"""Heuristic optimization of game assignments."""

import logging
from dataclasses import dataclass

import numpy as np

from gamehealth.health import (
    BALANCE_TOLERANCE,
    BASELINE_SCORE,
    DISLIKED_GAME_SCORE,
    HAPPINESS_WEIGHT,
    MISSING_LOVED_GAME_SCORE,
    TOO_FEW_WEIGHT,
    TOO_MANY_WEIGHT,
    round_half_up,
)
from gamehealth.models import Assignment, Game, GameData, Player, PreferenceStatus
from gamehealth.preferences import PreferenceModel

log = logging.getLogger(__name__)

# Players should stay within this many games of the mean
MAX_LOAD_DEVIATION = 1.5
MAX_POLISH_ROUNDS = 250

# Order in which players are pulled into an under-filled game (higher first)
_PREFERENCE_RANK: dict[PreferenceStatus | None, int] = {
    PreferenceStatus.LOVE: 3,
    PreferenceStatus.PRACTICE: 2,
    PreferenceStatus.NEUTRAL: 1,
    None: 0,
    PreferenceStatus.DISLIKE: -1,
}


@dataclass
class _Board:
    """Fixed inputs of one optimization: players, games and preference matrices."""

    players: list[Player]
    games: list[Game]  # display order
    scores: np.ndarray
    ranks: np.ndarray
    loved: np.ndarray
    disliked: np.ndarray
    min_players: np.ndarray
    max_players: np.ndarray
    target: int


class _AssignmentState:
    """Mutable player x game assignment matrix that remembers insertion order."""

    def __init__(self, num_players: int, num_games: int):
        self.assigned = np.zeros((num_players, num_games), dtype=bool)
        self.added_at = np.full((num_players, num_games), -1, dtype=np.int64)
        self._clock = 0

    def add(self, p_idx: int, g_idx: int) -> None:
        if self.assigned[p_idx, g_idx]:
            return
        self.assigned[p_idx, g_idx] = True
        self.added_at[p_idx, g_idx] = self._clock
        self._clock += 1

    def remove(self, p_idx: int, g_idx: int) -> None:
        self.assigned[p_idx, g_idx] = False
        self.added_at[p_idx, g_idx] = -1

    def load(self, p_idx: int) -> int:
        return int(self.assigned[p_idx].sum())

    def game_count(self, g_idx: int) -> int:
        return int(self.assigned[:, g_idx].sum())

    def total(self) -> int:
        return int(self.assigned.sum())


def auto_assign_players(data: GameData) -> list[Assignment]:
    """
    Compute a replacement assignment set for the event.

    Every attending player gets at least one game, game sizes are kept within
    their bounds where the attendee pool allows it, and loved games are
    favored over disliked ones. The result never scores worse than the
    current assignments unless those break constraints the result satisfies.
    """
    board = _build_board(data)
    if board is None:
        return []

    current = _state_from_assignments(board, data)
    candidates = [
        ("fresh assignment", _run_phases(board, _AssignmentState(*current.assigned.shape))),
        ("repaired current assignments", _run_phases(board, _copy_state(current))),
    ]
    if _idle_players(current.assigned) == 0:
        candidates.append(("current assignments", current))

    # Staying within every game's bounds outranks score; earlier candidates win ties
    scored = [
        (
            label,
            state,
            _violations(board, state.assigned) == 0,
            _vector_score(board, state.assigned),
        )
        for label, state in candidates
    ]
    label, best, within_bounds, best_score = max(scored, key=lambda c: (c[2], c[3]))

    log.info(
        "Chose %s (raw score %d, within bounds: %s); candidates: %s",
        label,
        best_score,
        within_bounds,
        ", ".join(f"{name} {score}" for name, _, _, score in scored),
    )
    return _to_assignments(board, best, _event_id(data))


def _build_board(data: GameData) -> _Board | None:
    players: list[Player] = []
    seen: set[str] = set()
    for player in data.attending_players():
        if player.user_id not in seen:
            seen.add(player.user_id)
            players.append(player)
    games = data.games_in_order()
    if not players or not games:
        return None

    prefs = PreferenceModel(data.preferences)
    user_ids = [p.user_id for p in players]
    game_ids = [g.id for g in games]

    ranks = np.zeros((len(user_ids), len(game_ids)), dtype=np.int64)
    for i, user_id in enumerate(user_ids):
        for j, game_id in enumerate(game_ids):
            ranks[i, j] = _PREFERENCE_RANK[prefs.status_for(user_id, game_id)]

    min_players = np.array([g.min_players for g in games], dtype=np.int64)
    target = round_half_up(int(min_players.sum()) / len(players))
    target = min(max(1, target), len(games))

    return _Board(
        players=players,
        games=games,
        scores=prefs.score_matrix(user_ids, game_ids),
        ranks=ranks,
        loved=prefs.status_mask(user_ids, game_ids, PreferenceStatus.LOVE),
        disliked=prefs.status_mask(user_ids, game_ids, PreferenceStatus.DISLIKE),
        min_players=min_players,
        max_players=np.array([g.max_players for g in games], dtype=np.int64),
        target=target,
    )


def _state_from_assignments(board: _Board, data: GameData) -> _AssignmentState:
    """Load the snapshot's assignments, dropping absent players and unknown games."""
    p_index = {p.user_id: i for i, p in enumerate(board.players)}
    g_index = {g.id: j for j, g in enumerate(board.games)}
    state = _AssignmentState(len(board.players), len(board.games))
    for assignment in data.assignments:
        p_idx = p_index.get(assignment.user_id)
        g_idx = g_index.get(assignment.game_id)
        if p_idx is not None and g_idx is not None:
            state.add(p_idx, g_idx)
    return state


def _copy_state(state: _AssignmentState) -> _AssignmentState:
    copied = _AssignmentState(*state.assigned.shape)
    copied.assigned = state.assigned.copy()
    copied.added_at = state.added_at.copy()
    copied._clock = state._clock
    return copied


def _run_phases(board: _Board, state: _AssignmentState) -> _AssignmentState:
    _seed_loved(board, state)
    log.debug("After seeding loved games: %d assignments", state.total())
    _satisfy_minimums(board, state)
    log.debug("After satisfying minimums: %d assignments", state.total())
    _balance(board, state)
    log.debug("After balancing to %d games per player: %d assignments", board.target, state.total())
    _enforce_caps(board, state)
    log.debug("After enforcing caps: %d assignments", state.total())
    rounds = _polish(board, state)
    log.debug("After %d polish moves: %d assignments", rounds, state.total())
    return state


def _seed_loved(board: _Board, state: _AssignmentState) -> None:
    """Give each player who loves a game one of their loved games."""
    for p_idx in range(len(board.players)):
        loved = np.flatnonzero(board.loved[p_idx])
        if loved.size == 0 or state.assigned[p_idx, loved].any():
            continue
        open_games = [
            int(g) for g in loved if state.game_count(int(g)) < board.max_players[g]
        ]
        if not open_games:
            continue
        best = min(
            open_games,
            key=lambda g: (
                -(board.max_players[g] - state.game_count(g)),
                state.game_count(g),
                g,
            ),
        )
        state.add(p_idx, best)


def _satisfy_minimums(board: _Board, state: _AssignmentState) -> None:
    """Fill under-filled games, largest deficit first."""
    deficits = board.min_players - state.assigned.sum(axis=0)
    for g_idx in sorted(range(len(board.games)), key=lambda g: (-deficits[g], g)):
        while state.game_count(g_idx) < board.min_players[g_idx]:
            p_idx = _pick_for_minimum(board, state, g_idx)
            if p_idx is None:
                break
            state.add(p_idx, g_idx)


def _pick_for_minimum(board: _Board, state: _AssignmentState, g_idx: int) -> int | None:
    candidates = [
        p for p in range(len(board.players))
        if not state.assigned[p, g_idx] and not board.disliked[p, g_idx]
    ]
    if not candidates and len(board.players) >= board.min_players[g_idx]:
        # Only players who dislike the game are left, and they can still fill it
        candidates = [p for p in range(len(board.players)) if not state.assigned[p, g_idx]]
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda p: (
            state.load(p) >= board.target,
            -board.ranks[p, g_idx],
            state.load(p),
            p,
        ),
    )


def _balance(board: _Board, state: _AssignmentState) -> None:
    """Top every player up to the target count; nobody is left without a game."""
    for p_idx in range(len(board.players)):
        while state.load(p_idx) < board.target:
            g_idx = _least_occupied_open_game(board, state, p_idx)
            if g_idx is None:
                break
            state.add(p_idx, g_idx)
        if state.load(p_idx) == 0:
            state.add(p_idx, _fallback_game(board, state, p_idx))


def _least_occupied_open_game(board: _Board, state: _AssignmentState, p_idx: int) -> int | None:
    candidates = [
        g for g in range(len(board.games))
        if not state.assigned[p_idx, g]
        and not board.disliked[p_idx, g]
        and state.game_count(g) < board.max_players[g]
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda g: (state.game_count(g), -board.scores[p_idx, g], g))


def _fallback_game(board: _Board, state: _AssignmentState, p_idx: int) -> int:
    """Least-disliked game, preferring ones with room; a full game beats no game."""
    return min(
        range(len(board.games)),
        key=lambda g: (
            state.game_count(g) >= board.max_players[g],
            -board.scores[p_idx, g],
            state.game_count(g),
            g,
        ),
    )


def _enforce_caps(board: _Board, state: _AssignmentState) -> None:
    """Trim over-full games, unhappiest and most recent members first."""
    for g_idx in range(len(board.games)):
        while (
            state.game_count(g_idx) > board.max_players[g_idx]
            and state.game_count(g_idx) > board.min_players[g_idx]
        ):
            members = [
                int(p) for p in np.flatnonzero(state.assigned[:, g_idx]) if state.load(int(p)) > 1
            ]
            if not members:
                break
            victim = min(
                members,
                key=lambda p: (board.scores[p, g_idx], -state.added_at[p, g_idx]),
            )
            state.remove(victim, g_idx)


def _polish(board: _Board, state: _AssignmentState) -> int:
    """
    Greedy hill-climbing on the health score with single add/remove moves.

    Moves keep games within their bounds, never take away a player's last
    game, never add a disliked game and never push the worst per-player
    deviation from the mean past MAX_LOAD_DEVIATION. Returns the number of
    moves applied.

    The balance penalty of a move depends only on whose load changes, so each
    round scores every player's +1 and -1 load once and combines that with
    the per-cell preference gain.
    """
    assigned = state.assigned
    shifts = np.eye(len(board.players), dtype=np.int64)
    add_gain = (
        HAPPINESS_WEIGHT * board.scores
        + DISLIKED_GAME_SCORE * board.disliked
        - MISSING_LOVED_GAME_SCORE * board.loved
    )

    for rounds in range(MAX_POLISH_ROUNDS):
        counts = assigned.sum(axis=0)
        loads = assigned.sum(axis=1)
        allowed_deviation = max(MAX_LOAD_DEVIATION, float(_max_deviation(loads)))
        penalty = _balance_penalty(loads)

        grown = loads + shifts  # row p: loads after p gains a game
        shrunk = loads - shifts
        add_delta = add_gain + (penalty - _balance_penalty(grown))[:, None]
        remove_delta = -add_gain + (penalty - _balance_penalty(shrunk))[:, None]

        can_add = (
            ~assigned
            & ~board.disliked
            & (counts < board.max_players)[None, :]
            & (_max_deviation(grown) <= allowed_deviation)[:, None]
        )
        can_remove = (
            assigned
            & (loads > 1)[:, None]
            & (counts > board.min_players)[None, :]
            & (_max_deviation(shrunk) <= allowed_deviation)[:, None]
        )
        deltas = np.where(can_add, add_delta, np.where(can_remove, remove_delta, -np.inf))

        best = int(np.argmax(deltas))
        if deltas.flat[best] <= 0:
            return rounds
        p_idx, g_idx = divmod(best, len(board.games))
        if assigned[p_idx, g_idx]:
            state.remove(p_idx, g_idx)
        else:
            state.add(p_idx, g_idx)
    return MAX_POLISH_ROUNDS


def _balance_penalty(loads: np.ndarray) -> np.ndarray:
    """Balance penalty of a load vector, or of each row of a stack of them."""
    average = loads.sum(axis=-1, keepdims=True) / loads.shape[-1]
    gaps = np.abs(loads - average)
    too_few = loads < average - BALANCE_TOLERANCE
    too_many = loads > average + BALANCE_TOLERANCE
    penalties = (
        np.where(too_few, np.floor(gaps * TOO_FEW_WEIGHT + 0.5), 0.0)
        + np.where(too_many, np.floor(gaps * TOO_MANY_WEIGHT + 0.5), 0.0)
    )
    return penalties.sum(axis=-1)


def _max_deviation(loads: np.ndarray) -> np.ndarray:
    average = loads.sum(axis=-1, keepdims=True) / loads.shape[-1]
    return np.abs(loads - average).max(axis=-1)


def _vector_score(board: _Board, assigned: np.ndarray) -> int:
    """Raw (unclamped) health score of an assignment matrix, as the analysis computes it."""
    happiness = board.scores[assigned].sum()
    disliked = np.count_nonzero(assigned & board.disliked)
    missing_loved = np.count_nonzero(board.loved & ~assigned)
    return int(
        BASELINE_SCORE
        + HAPPINESS_WEIGHT * happiness
        - _balance_penalty(assigned.sum(axis=1))
        + DISLIKED_GAME_SCORE * disliked
        + MISSING_LOVED_GAME_SCORE * missing_loved
    )


def _violations(board: _Board, assigned: np.ndarray) -> int:
    """Count hard-constraint shortfalls: players without a game plus slots outside game bounds."""
    counts = assigned.sum(axis=0)
    below = np.clip(board.min_players - counts, 0, None).sum()
    above = np.clip(counts - board.max_players, 0, None).sum()
    return _idle_players(assigned) + int(below) + int(above)


def _idle_players(assigned: np.ndarray) -> int:
    return int(np.count_nonzero(assigned.sum(axis=1) == 0))


def _event_id(data: GameData) -> str:
    if data.event_id:
        return data.event_id
    if data.assignments:
        return data.assignments[0].event_id
    return ""


def _to_assignments(board: _Board, state: _AssignmentState, event_id: str) -> list[Assignment]:
    assignments: list[Assignment] = []
    for g_idx, game in enumerate(board.games):
        members = np.flatnonzero(state.assigned[:, g_idx])
        for p_idx in sorted(members, key=lambda p: state.added_at[p, g_idx]):
            player = board.players[p_idx]
            assignments.append(
                Assignment(
                    user_id=player.user_id,
                    game_id=game.id,
                    event_id=event_id,
                    name=player.display_name,
                )
            )
    return assignments
