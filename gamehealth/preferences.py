"""Preference scoring for gamehealth."""

import numpy as np

from gamehealth.models import Preference, PreferenceStatus

# Happiness points per preference status; a missing record scores like NEUTRAL
PREFERENCE_SCORES: dict[PreferenceStatus, int] = {
    PreferenceStatus.LOVE: 2,
    PreferenceStatus.PRACTICE: 1,
    PreferenceStatus.NEUTRAL: 0,
    PreferenceStatus.DISLIKE: -2,
}


class PreferenceModel:
    """Indexed view of a preference table, built once per analysis call."""

    def __init__(self, preferences: list[Preference]):
        self._status: dict[tuple[str, str], PreferenceStatus] = {}
        self._loved: dict[str, list[str]] = {}
        for pref in preferences:
            key = (pref.user_id, pref.game_id)
            if key in self._status:
                continue
            self._status[key] = pref.status
            if pref.status is PreferenceStatus.LOVE:
                self._loved.setdefault(pref.user_id, []).append(pref.game_id)

    def status_for(self, user_id: str, game_id: str) -> PreferenceStatus | None:
        return self._status.get((user_id, game_id))

    def score_for(self, user_id: str, game_id: str) -> int:
        """Happiness points for assigning this player to this game (0 if unrated)."""
        status = self._status.get((user_id, game_id))
        if status is None:
            return 0
        return PREFERENCE_SCORES[status]

    def loved_games(self, user_id: str) -> list[str]:
        """Game ids the player marked as loved, in record order."""
        return list(self._loved.get(user_id, []))

    def score_matrix(self, user_ids: list[str], game_ids: list[str]) -> np.ndarray:
        """
        Build a dense player x game matrix of preference scores.

        Row i corresponds to user_ids[i] and column j to game_ids[j].
        """
        scores = np.zeros((len(user_ids), len(game_ids)), dtype=np.int64)
        for i, user_id in enumerate(user_ids):
            for j, game_id in enumerate(game_ids):
                scores[i, j] = self.score_for(user_id, game_id)
        return scores

    def status_mask(
        self,
        user_ids: list[str],
        game_ids: list[str],
        status: PreferenceStatus,
    ) -> np.ndarray:
        """Boolean player x game matrix, True where the player chose `status`."""
        mask = np.zeros((len(user_ids), len(game_ids)), dtype=bool)
        for i, user_id in enumerate(user_ids):
            for j, game_id in enumerate(game_ids):
                mask[i, j] = self._status.get((user_id, game_id)) is status
        return mask
