"""
Testing one game end to end, without HTTP.
- The computer's secret is fixed with start_new_game("1234").
- A seeded rng makes the computer's guesses repeatable.
- "Honest" feedback is computed against the number the human wrote down.
"""

import random

import pytest

from abgame.engine import calculate_feedback
from abgame.session import HINT_BUDGET, GameSession
from abgame.solver import recompute_from_history

COMPUTER_SECRET = "1234"


def new_game(seed: int = 0) -> GameSession:
    game = GameSession(rng=random.Random(seed))
    game.start_new_game(COMPUTER_SECRET)
    return game

def human_secret_other_than(game: GameSession) -> str:
    """A number for the human that the computer's current guess does not hit."""
    return "9876" if game.computer_guess != "9876" else "8765"

def answer_honestly(game: GameSession, human_secret: str) -> None:
    game.submit_feedback(*calculate_feedback(game.computer_guess, human_secret))


def test_new_game_state():
    game = new_game()
    assert game.started and not game.won
    assert game.phase == "human_turn"
    assert game.turn == "human"
    assert (game.human_attempts, game.computer_attempts) == (0, 0)
    assert game.hints_remaining == HINT_BUDGET
    assert game.candidate_count == 5040
    assert game.human_history == () and game.computer_history == ()
    assert game.message.key is None

def test_actions_before_start_are_refused():
    game = GameSession()
    game.submit_guess("0123")
    assert game.message.key == "game_not_started"
    assert game.human_history == ()

def test_invalid_guess_only_sets_a_message():
    game = new_game()
    game.submit_guess("123")
    assert game.message.key == "four_digits_required"
    game.submit_guess("1123")
    assert game.message.key == "digits_must_be_unique"
    assert game.human_attempts == 0
    assert game.phase == "human_turn"

def test_wrong_guess_hands_turn_to_computer():
    game = new_game()
    game.submit_guess("1567")
    assert game.human_attempts == 1
    assert game.phase == "computer_turn"
    assert game.message.key == "your_hint"
    assert game.message.params["result"] == "1A0B"
    assert game.computer_guess is not None
    assert game.message.params["guess"] == game.computer_guess
    assert game.human_history[0].result == (1, 0)

def test_draft_is_submitted_and_cleared():
    game = new_game()
    game.update_draft_digit(0, "5")
    game.update_draft_digit(1, "6")
    game.update_draft_digit(3, "8")
    game.submit_guess()
    # slot 2 is empty: a format problem, not a turn
    assert game.message.key == "four_digits_required"
    game.update_draft_digit(2, "7")
    game.submit_guess()
    assert game.human_history[0].guess == "5678"
    assert game.draft.slots == [None, None, None, None]

def test_out_of_turn_actions_are_refused():
    game = new_game()
    game.submit_feedback(0, 0)
    assert game.message.key == "not_your_turn"
    game.submit_guess("5678")
    game.submit_guess("5679")
    assert game.message.key == "not_your_turn"
    assert game.human_attempts == 1

def test_invalid_feedback_only_sets_a_message():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(3, 2)
    assert game.message.key == "invalid_feedback"
    game.submit_feedback()
    assert game.message.key == "invalid_feedback"
    assert game.computer_history == ()
    assert game.phase == "computer_turn"

def test_honest_round_narrows_candidates():
    game = new_game()
    game.submit_guess("5678")
    human_secret = human_secret_other_than(game)
    answer_honestly(game, human_secret)

    assert game.phase == "human_turn"
    assert game.computer_attempts == 1
    assert game.computer_guess is None
    assert game.candidate_count < 5040
    assert game.candidate_count == len(recompute_from_history(game.computer_history))

def test_staged_feedback_is_used():
    game = new_game()
    game.submit_guess("5678")
    a, b = calculate_feedback(game.computer_guess, human_secret_other_than(game))
    game.update_draft_feedback("A", a)
    game.update_draft_feedback("B", b)
    game.submit_feedback()
    assert game.computer_history[0].result == (a, b)
    assert (game.draft_feedback.a, game.draft_feedback.b) == (None, None)

def test_computer_wins_when_it_finds_the_number_first():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(4, 0)

    assert game.phase == "computer_wins"
    assert game.winner == "computer"
    assert game.won
    assert game.message.key == "computer_won"
    assert game.message.params["computer_number"] == COMPUTER_SECRET
    assert game.record is not None
    assert game.record.winner == "computer"
    assert (game.record.human_attempts, game.record.computer_attempts) == (1, 1)
    assert game.record.total_rounds == 2

def test_fairness_rule_gives_computer_a_final_guess_then_human_wins():
    game = new_game()
    game.submit_guess("5678")
    human_secret = human_secret_other_than(game)
    answer_honestly(game, human_secret)
    assert game.computer_attempts == 1

    # human finds it on attempt 2, computer has only had 1 guess
    game.submit_guess(COMPUTER_SECRET)
    assert game.human_attempts == 2
    assert game.phase == "computer_turn"
    assert game.final_turn
    assert game.message.key == "computer_final_guess"
    assert game.record is None

    # the final guess misses: answer as if the human wrote down another code
    # that is still consistent with the computer's history
    final_guess = game.computer_guess
    other = next(c for c in sorted(recompute_from_history(game.computer_history)) if c != final_guess)
    game.submit_feedback(*calculate_feedback(final_guess, other))

    assert game.phase == "human_wins"
    assert game.winner == "human"
    assert game.computer_attempts == 2
    assert game.record.total_rounds == 4
    assert game.record.human_history[-1].is_correct

def test_fairness_rule_draw_when_final_guess_also_hits():
    game = new_game()
    game.submit_guess("5678")
    answer_honestly(game, human_secret_other_than(game))
    game.submit_guess(COMPUTER_SECRET)
    assert game.final_turn

    # the human says the final guess is right
    game.submit_feedback(4, 0)
    assert game.phase == "draw"
    assert game.winner == "draw"
    assert game.message.key == "game_draw"
    assert game.record.winner == "draw"
    assert game.record.total_rounds == 2

def test_no_moves_after_game_over():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(4, 0)
    game.submit_guess("0123")
    assert game.message.key == "game_over"
    assert game.human_attempts == 1
    assert len(game.human_history) == 1

def test_contradictory_feedback_is_a_complaint():
    game = new_game()
    game.submit_guess("5678")
    first_guess = game.computer_guess
    game.submit_feedback(0, 0)
    candidates_before = game.candidate_count

    game.submit_guess("5679")
    second_guess = game.computer_guess
    # every candidate uses 4 of the 6 digits not in the first guess,
    # so the second guess can't be a clean miss
    assert not set(second_guess) & set(first_guess)
    game.submit_feedback(0, 0)

    assert game.message.type == "complaint"
    assert game.message.key.startswith("complaints.")
    assert game.message.params == {"guess": second_guess, "feedback": "0A0B"}
    assert game.correction.active
    assert game.phase == "computer_turn"
    assert game.candidate_count == candidates_before
    assert len(game.computer_history) == 1

def test_correction_rewrites_history_and_replays():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    game.submit_feedback(0, 0)
    assert game.correction.active

    game.begin_correction()
    assert game.correction.show_history

    first_entry = game.computer_history[0]
    first_guess = first_entry.guess
    game.correct_feedback(0, 1, 1)
    # views handed out earlier keep the old answer
    assert first_entry.result == (0, 0)

    assert game.computer_history[0].result == (1, 1)
    assert len(game.computer_history) == 1
    assert game.candidate_count == len(recompute_from_history([game.computer_history[0]]))
    assert all(calculate_feedback(first_guess, c) == (1, 1) for c in recompute_from_history(game.computer_history))
    assert not game.correction.active and not game.correction.show_history
    assert game.message.key is None
    assert game.phase == "human_turn"
    assert game.computer_guess is None
    # counters never go down
    assert game.computer_attempts == 2

def test_correction_drops_later_entries():
    game = new_game(seed=11)
    game.submit_guess("5678")
    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    # all four digits right, none in place
    game.submit_feedback(0, 4)
    assert len(game.computer_history) == 2
    assert game.phase == "human_turn"

    # a third answer that cannot be true arms the correction flow
    game.submit_guess("5670")
    game.submit_feedback(3, 1)
    assert game.correction.active

    game.correct_feedback(0, 0, 0)
    assert len(game.computer_history) == 1
    assert game.candidate_count == len(recompute_from_history(game.computer_history))

def test_correction_requires_a_complaint_and_a_valid_index():
    game = new_game()
    with pytest.raises(ValueError):
        game.begin_correction()
    game.submit_guess("5678")
    with pytest.raises(ValueError):
        game.correct_feedback(0, 1, 1)

    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    game.submit_feedback(0, 0)
    with pytest.raises(ValueError):
        game.correct_feedback(5, 1, 1)

    game.correct_feedback(0, 3, 2)
    assert game.message.key == "invalid_feedback"
    assert game.computer_history[0].result == (0, 0)

def test_cancel_correction_keeps_message():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    game.submit_feedback(0, 0)
    complaint_key = game.message.key
    game.begin_correction()

    game.cancel_correction()
    assert not game.correction.active and not game.correction.show_history
    assert game.message.key == complaint_key
    assert game.phase == "computer_turn"

def test_consistent_feedback_after_complaint_settles_it():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    second_guess = game.computer_guess
    game.submit_feedback(0, 0)
    assert game.correction.active

    # the human rethinks and gives an answer the history allows
    other = next(c for c in sorted(recompute_from_history(game.computer_history)) if c != second_guess)
    game.submit_feedback(*calculate_feedback(second_guess, other))
    assert game.phase == "human_turn"
    assert len(game.computer_history) == 2
    assert not game.correction.active

    game.submit_guess("5670")
    assert game.phase == "computer_turn"
    with pytest.raises(ValueError):
        game.begin_correction()
    with pytest.raises(ValueError):
        game.correct_feedback(0, 1, 1)
    assert len(game.computer_history) == 2
    assert game.computer_attempts == 2

def test_exhausted_candidates_after_correction():
    game = new_game()
    game.submit_guess("5678")
    game.submit_feedback(0, 0)
    game.submit_guess("5679")
    game.submit_feedback(0, 0)

    # 3A1B is impossible with unique digits: nothing can survive
    game.correct_feedback(0, 3, 1)
    assert game.candidate_count == 0
    assert game.candidates_exhausted
    assert game.phase == "human_turn"

    game.submit_guess("5670")
    assert game.phase == "computer_turn"
    assert game.message.key == "no_possible_numbers"
    assert game.computer_guess is not None
    assert game.correction.active

    # no feedback can be accepted until history is fixed
    game.submit_feedback(0, 0)
    assert game.message.type == "complaint"
    assert len(game.computer_history) == 1

def test_hint_budget():
    game = new_game()
    # no history yet: refused, free
    assert game.check_hint("5678") is None
    assert game.message.key == "hint_needs_history"
    assert game.hints_remaining == 3

    game.submit_guess("1567")           # 1A0B against 1234
    answer_honestly(game, human_secret_other_than(game))

    # malformed: refused, free
    assert game.check_hint("55") is None
    assert game.message.key == "four_digits_required"
    assert game.hints_remaining == 3

    assert game.check_hint("5678") is False
    assert game.message.key == "hint_inconsistent"
    assert game.hints_remaining == 2

    assert game.check_hint("1890") is True
    assert game.message.key == "hint_consistent"
    assert game.message.type == "success"
    assert game.hints_remaining == 1

    game.update_draft_guess("1892")
    assert game.check_hint() is True
    assert game.hints_remaining == 0

    assert game.check_hint("1890") is None
    assert game.message.key == "no_hints_remaining"
    assert game.hints_remaining == 0

def test_hint_refused_on_computer_turn():
    game = new_game()
    game.submit_guess("1567")
    assert game.check_hint("1890") is None
    assert game.message.key == "hint_unavailable"
    assert game.hints_remaining == 3

def test_start_new_game_resets_everything():
    game = new_game()
    game.submit_guess("1567")
    game.submit_feedback(0, 0)
    game.check_hint("1890")

    game.reset_game("0987")
    assert game.secret == "0987"
    assert game.phase == "human_turn"
    assert (game.human_attempts, game.computer_attempts) == (0, 0)
    assert game.hints_remaining == 3
    assert game.candidate_count == 5040
    assert game.human_history == () and game.computer_history == ()
    assert game.record is None

def test_start_rejects_illegal_secret():
    game = GameSession()
    with pytest.raises(ValueError):
        game.start_new_game("1123")

def test_seeded_games_are_repeatable():
    first = new_game(seed=99)
    second = new_game(seed=99)
    first.submit_guess("5678")
    second.submit_guess("5678")
    assert first.computer_guess == second.computer_guess
