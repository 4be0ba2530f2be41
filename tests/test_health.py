"""Tests for gamehealth.health module."""

from gamehealth.health import (
    HealthRating,
    analyze_game_health,
    calculate_overall_health_score,
    gap_severity,
    health_rating,
    raw_health_score,
    round_half_up,
)
from gamehealth.models import (
    Assignment,
    AttendanceStatus,
    Game,
    GameData,
    Player,
    PlayerProblem,
    Preference,
    PreferenceStatus,
    Problem,
    ProblemKind,
    Severity,
)
from gamehealth.preferences import PreferenceModel


def _assign(user_id: str, game_id: str) -> Assignment:
    return Assignment(user_id=user_id, game_id=game_id, event_id="event1")


def _by_user(results: list[PlayerProblem]) -> dict[str, PlayerProblem]:
    return {r.user_id: r for r in results}


def _kinds(result: PlayerProblem) -> list[ProblemKind]:
    return [p.kind for p in result.problems]


class TestRounding:
    """Half-up rounding used for balance penalties."""

    def test_half_goes_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(7.5) == 8
        assert round_half_up(3.75) == 4

    def test_below_half_goes_down(self):
        assert round_half_up(3.33) == 3

    def test_gap_severity_thresholds(self):
        assert gap_severity(1.6) is Severity.HIGH
        assert gap_severity(1.5) is Severity.MEDIUM
        assert gap_severity(0.76) is Severity.MEDIUM
        assert gap_severity(0.75) is Severity.LOW


class TestAnalyzeGameHealth:
    """Tests for per-player diagnostics."""

    def test_one_result_per_attending_player_in_order(self, game_data):
        results = analyze_game_health(game_data)
        assert [r.user_id for r in results] == ["user1", "user2", "user3"]
        assert [r.player_name for r in results] == ["John Doe", "Jane Smith", "Bob Johnson"]

    def test_happiness_scores(self, game_data):
        results = _by_user(analyze_game_health(game_data))
        assert results["user1"].happiness_score == 2  # Love game 1, nothing for game 2
        assert results["user2"].happiness_score == 1  # Practice game 2
        assert results["user3"].happiness_score == 0

    def test_happiness_is_sum_of_preference_scores(self, game_data):
        model = PreferenceModel(game_data.preferences)
        for result in analyze_game_health(game_data):
            expected = sum(
                model.score_for(result.user_id, a.game_id)
                for a in game_data.assignments
                if a.user_id == result.user_id
            )
            assert result.happiness_score == expected

    def test_missing_loved_game(self, game_data):
        results = _by_user(analyze_game_health(game_data))
        [problem] = results["user1"].problems_of(ProblemKind.UNBALANCED_ASSIGNMENTS)
        assert problem.kind is ProblemKind.UNBALANCED_ASSIGNMENTS
        assert problem.severity is Severity.MEDIUM
        assert problem.score == -10
        assert problem.description == "Not assigned to 1 loved game(s): Game 3"
        assert _kinds(results["user1"]) == [
            ProblemKind.TOO_MANY_GAMES,
            ProblemKind.UNBALANCED_ASSIGNMENTS,
        ]
        assert _kinds(results["user3"]) == [ProblemKind.UNBALANCED_ASSIGNMENTS]
        assert results["user2"].problems == []

    def test_several_missing_loved_games_are_high(self, game_data):
        data = game_data.with_assignments([_assign("user1", "2")])
        result = _by_user(analyze_game_health(data))["user1"]
        [problem] = result.problems_of(ProblemKind.UNBALANCED_ASSIGNMENTS)
        assert problem.severity is Severity.HIGH
        assert problem.score == -20
        assert problem.description.endswith("Game 1, Game 3")

    def test_too_few_and_too_many_games(self, game_data):
        data = game_data.with_assignments([
            _assign("user1", "1"),
            _assign("user1", "2"),
            _assign("user1", "3"),
            _assign("user2", "2"),
            _assign("user2", "1"),
            _assign("user3", "3"),
        ])
        results = _by_user(analyze_game_health(data))

        [too_few] = results["user3"].problems_of(ProblemKind.TOO_FEW_GAMES)
        assert too_few.severity is Severity.MEDIUM
        assert too_few.score == -10
        assert too_few.description == "Assigned to 1 games, which is below the average of 2.0"

        [too_many] = results["user1"].problems_of(ProblemKind.TOO_MANY_GAMES)
        assert too_many.severity is Severity.MEDIUM
        assert too_many.score == -5
        assert too_many.description == "Assigned to 3 games, which is above the average of 2.0"

        assert not results["user2"].has_problem(ProblemKind.TOO_FEW_GAMES)
        assert not results["user2"].has_problem(ProblemKind.TOO_MANY_GAMES)

    def test_balance_penalty_rounds_half_up(self):
        players = [Player(user_id=f"u{i}") for i in range(4)]
        games = [Game(id="a", name="A", min_players=1, max_players=4),
                 Game(id="b", name="B", min_players=1, max_players=4)]
        data = GameData(
            games=games,
            players=players,
            assignments=[
                _assign("u1", "a"),
                _assign("u2", "a"), _assign("u2", "b"),
                _assign("u3", "a"), _assign("u3", "b"),
            ],
        )
        results = _by_user(analyze_game_health(data))  # average 1.25
        [too_few] = results["u0"].problems
        assert too_few.kind is ProblemKind.TOO_FEW_GAMES
        assert too_few.score == -13
        assert too_few.severity is Severity.MEDIUM
        assert results["u1"].problems == []
        [too_many] = results["u2"].problems
        assert too_many.kind is ProblemKind.TOO_MANY_GAMES
        assert too_many.score == -4
        assert too_many.severity is Severity.LOW

    def test_disliked_game(self, game_data):
        assert not _by_user(analyze_game_health(game_data))["user2"].has_problem(
            ProblemKind.DISLIKED_GAME
        )
        data = game_data.with_assignments(game_data.assignments + [_assign("user2", "3")])
        result = _by_user(analyze_game_health(data))["user2"]
        [problem] = result.problems_of(ProblemKind.DISLIKED_GAME)
        assert problem.severity is Severity.HIGH
        assert problem.score == -20
        assert problem.game_id == "3"
        assert problem.description == "Assigned to a disliked game: Game 3"
        assert result.happiness_score == -1

    def test_player_without_assignments_or_preferences(self, game_data):
        data = GameData(
            games=game_data.games,
            players=game_data.players + [Player(user_id="new", first_name="Nia", last_name="Lee")],
            assignments=game_data.assignments,
            preferences=game_data.preferences,
        )
        result = _by_user(analyze_game_health(data))["new"]
        assert result.happiness_score == 0
        assert _kinds(result) == [ProblemKind.TOO_FEW_GAMES]

    def test_only_attending_players_are_analyzed(self, game_data):
        maybe = Player(user_id="maybe", first_name="May", last_name="Be",
                       status=AttendanceStatus.MAYBE)
        declined = Player(user_id="gone", status=AttendanceStatus.DECLINED)
        data = GameData(
            games=game_data.games,
            players=game_data.players + [maybe, declined],
            assignments=game_data.assignments + [_assign("maybe", "1"), _assign("maybe", "3")],
            preferences=game_data.preferences,
        )
        results = analyze_game_health(data)
        assert [r.user_id for r in results] == ["user1", "user2", "user3"]
        # the maybe player's assignments do not shift the average
        assert results == analyze_game_health(game_data)

    def test_unknown_game_references_degrade(self, game_data):
        data = GameData(
            games=game_data.games,
            players=game_data.players,
            assignments=game_data.assignments,
            preferences=game_data.preferences + [
                Preference("user2", "ghost", PreferenceStatus.LOVE),
            ],
        )
        result = _by_user(analyze_game_health(data))["user2"]
        [problem] = result.problems
        assert problem.description == "Not assigned to 1 loved game(s): ghost"

        data = game_data.with_assignments([_assign("user1", "ghost")])
        result = _by_user(analyze_game_health(data))["user1"]
        assert result.happiness_score == 0

    def test_no_players(self, games):
        assert analyze_game_health(GameData(games=games)) == []

    def test_is_idempotent(self, game_data):
        assert analyze_game_health(game_data) == analyze_game_health(game_data)


class TestOverallHealthScore:
    """Tests for the 0-100 health score."""

    def test_empty_is_perfect(self):
        assert calculate_overall_health_score([]) == 100

    def test_scenario_score(self, game_data):
        results = analyze_game_health(game_data)
        # 70 + 3 * (2 + 1 + 0) - 3 (user1 above average) - 10 - 10
        assert raw_health_score(results) == 56
        assert calculate_overall_health_score(results) == 56

    def test_better_assignments_score_higher(self, game_data):
        optimal = game_data.with_assignments([
            _assign("user1", "1"),
            _assign("user1", "3"),
            _assign("user2", "2"),
            _assign("user3", "1"),
        ])
        optimal_score = calculate_overall_health_score(analyze_game_health(optimal))
        assert optimal_score == 88
        assert optimal_score > calculate_overall_health_score(analyze_game_health(game_data))

    def test_no_information_scores_baseline(self):
        results = [PlayerProblem(user_id="u", player_name="U")]
        assert calculate_overall_health_score(results) == 70

    def test_clamped_to_zero(self):
        problem = Problem(ProblemKind.DISLIKED_GAME, Severity.HIGH, "x", -20, "g")
        results = [PlayerProblem("u", "U", [problem] * 5, happiness_score=-10)]
        assert raw_health_score(results) < 0
        assert calculate_overall_health_score(results) == 0

    def test_clamped_to_hundred(self):
        results = [PlayerProblem("u", "U", [], happiness_score=20)]
        assert raw_health_score(results) == 130
        assert calculate_overall_health_score(results) == 100


class TestHealthRating:
    """Tests for score bands."""

    def test_bands(self):
        assert health_rating(100) is HealthRating.GOOD
        assert health_rating(80) is HealthRating.GOOD
        assert health_rating(79) is HealthRating.FAIR
        assert health_rating(60) is HealthRating.FAIR
        assert health_rating(59) is HealthRating.POOR
        assert health_rating(0) is HealthRating.POOR

    def test_messages(self):
        assert "well balanced" in HealthRating.GOOD.value
        assert "significant issues" in HealthRating.POOR.value
