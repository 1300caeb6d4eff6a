import logging
import random

import pytest

from conftest import CountingRandom, answer_current, make_chapter, play_chapter
from spanish_quiz.policy import PassPolicy
from spanish_quiz.session import QuizSession, QuizStateError, QuizStateMachine, Screen


# ─── 初期状態 ────────────────────────────────────────────────────────────────

def test_starts_on_home_with_first_chapter_unlocked(machine: QuizStateMachine) -> None:
    assert machine.screen is Screen.HOME
    assert machine.session.unlocked_chapters == {0}
    assert machine.current_chapter is None
    assert machine.current_question is None


def test_empty_content_shows_no_content() -> None:
    machine = QuizStateMachine([])
    assert machine.screen is Screen.NO_CONTENT
    assert not machine.select_chapter(0)
    assert not machine.select_answer("x")
    assert not machine.advance()
    assert not machine.retry()
    assert not machine.proceed()
    assert not machine.back_to_home()
    assert not machine.show_summary()
    assert machine.screen is Screen.NO_CONTENT


def test_given_session_always_has_chapter_zero_unlocked(chapters) -> None:
    session = QuizSession(unlocked_chapters=set())
    machine = QuizStateMachine(chapters, session=session)
    assert machine.is_unlocked(0)


def test_invalid_question_limit(chapters) -> None:
    with pytest.raises(ValueError):
        QuizStateMachine(chapters, question_limit=0)


# ─── 章の選択 ────────────────────────────────────────────────────────────────

def test_select_unlocked_chapter(machine: QuizStateMachine, chapters) -> None:
    assert machine.select_chapter(0)
    assert machine.screen is Screen.IN_QUESTION
    assert machine.session.current_question == 0
    assert machine.score == 0
    assert machine.selected_answer is None
    assert machine.current_chapter == chapters[0]
    assert sorted(machine.session.question_order, key=lambda q: q.prompt) == sorted(
        chapters[0].questions, key=lambda q: q.prompt
    )


def test_select_locked_chapter_is_ignored(machine: QuizStateMachine) -> None:
    assert not machine.select_chapter(1)
    assert machine.screen is Screen.HOME
    assert machine.session.current_chapter is None


def test_select_out_of_range_chapter_fails_fast(machine: QuizStateMachine) -> None:
    with pytest.raises(QuizStateError):
        machine.select_chapter(3)
    with pytest.raises(QuizStateError):
        machine.select_chapter(-1)


def test_select_chapter_only_from_home(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    assert not machine.select_chapter(0)


def test_suppressed_navigation_is_logged(machine: QuizStateMachine, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="spanish_quiz.session"):
        machine.select_chapter(2)
    assert "chapter 2 is locked" in caplog.text


# ─── 解答 ────────────────────────────────────────────────────────────────────

def test_correct_answer_scores_and_records_true(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    answer_current(machine, correct=True)
    assert machine.score == 1
    assert machine.session.chapter_results[0] == [True]


def test_wrong_answer_records_false(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    answer_current(machine, correct=False)
    assert machine.score == 0
    assert machine.session.chapter_results[0] == [False]


def test_second_answer_on_same_question_is_ignored(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    first = answer_current(machine, correct=False)
    q = machine.current_question

    assert not machine.select_answer(q.correct_answer)
    assert machine.score == 0
    assert machine.session.chapter_results[0] == [False]
    assert machine.selected_answer == first


def test_unknown_option_is_a_logic_error(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    with pytest.raises(QuizStateError):
        machine.select_answer("no such option")


def test_answer_outside_question_is_ignored(machine: QuizStateMachine) -> None:
    assert not machine.select_answer("anything")


def test_option_order_is_fixed_while_question_is_shown(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    q = machine.current_question
    before = machine.option_order
    assert sorted(before) == sorted(q.options)

    answer_current(machine)
    assert machine.option_order == before


def test_option_order_is_reshuffled_for_each_question(chapters) -> None:
    rng = CountingRandom(5)
    machine = QuizStateMachine(chapters, rng=rng)
    machine.select_chapter(0)
    # 12 問の出題順 (11 回) + 4 択 (3 回)
    assert len(rng.calls) == 11 + 3

    answer_current(machine)
    assert len(rng.calls) == 14
    machine.advance()
    assert len(rng.calls) == 17
    assert sorted(machine.option_order) == sorted(machine.current_question.options)


# ─── 次へ ────────────────────────────────────────────────────────────────────

def test_advance_requires_selection(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    assert not machine.advance()
    assert machine.session.current_question == 0


def test_advance_moves_to_next_question_and_clears_selection(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    first = machine.current_question
    answer_current(machine)
    assert machine.advance()
    assert machine.session.current_question == 1
    assert machine.selected_answer is None
    assert machine.current_question is not first


def test_last_advance_shows_chapter_result(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)
    assert machine.screen is Screen.CHAPTER_RESULT
    assert machine.current_question is None
    assert not machine.advance()


# ─── シナリオ ────────────────────────────────────────────────────────────────

def test_all_correct_passes_and_unlocks_next(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)

    assert machine.score == 12
    assert machine.passed
    assert machine.session.unlocked_chapters == {0, 1}
    assert machine.session.chapter_results[0] == [True] * 12


def test_failing_chapter_then_retry(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=5)

    assert machine.screen is Screen.CHAPTER_RESULT
    assert machine.score == 5
    assert not machine.passed
    assert machine.session.unlocked_chapters == {0}
    assert machine.session.chapter_results[0] == [True] * 5 + [False] * 7
    assert not machine.proceed()

    assert machine.retry()
    assert machine.screen is Screen.IN_QUESTION
    assert machine.session.current_chapter == 0
    assert machine.session.current_question == 0
    assert machine.score == 0
    assert machine.session.chapter_results[0] == []
    assert machine.session.unlocked_chapters == {0}


def test_retry_reshuffles_question_order(chapters) -> None:
    rng = CountingRandom(9)
    machine = QuizStateMachine(chapters, rng=rng)
    machine.select_chapter(0)
    play_chapter(machine, correct_count=0)
    calls = len(rng.calls)

    machine.retry()
    assert len(rng.calls) == calls + 11 + 3


def test_retry_is_ignored_after_pass(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=10)
    assert not machine.retry()
    assert machine.screen is Screen.CHAPTER_RESULT


def test_proceed_enters_next_chapter(machine: QuizStateMachine, chapters) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=11)

    assert machine.proceed()
    assert machine.screen is Screen.IN_QUESTION
    assert machine.current_chapter == chapters[1]
    assert machine.score == 0
    assert machine.session.chapter_results[1] == []
    # 前の章の履歴は残る
    assert len(machine.session.chapter_results[0]) == 12


def test_last_chapter_pass_proceeds_to_summary(machine: QuizStateMachine) -> None:
    for _ in range(3):
        if machine.screen is Screen.HOME:
            machine.select_chapter(0)
        play_chapter(machine, correct_count=12)
        if not machine.is_last_chapter:
            assert machine.proceed()

    assert machine.session.current_chapter == 2
    assert machine.session.unlocked_chapters == {0, 1, 2}
    assert machine.proceed()
    assert machine.screen is Screen.RUN_SUMMARY

    summary = machine.summary()
    assert [s.index for s in summary] == [0, 1, 2]
    assert all(s.passed for s in summary)


def test_chapter_unlocks_only_after_passing_predecessor(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=9)
    assert not machine.is_unlocked(1)
    assert not machine.is_unlocked(2)

    machine.retry()
    play_chapter(machine, correct_count=10)
    assert machine.is_unlocked(1)
    assert not machine.is_unlocked(2)


# ─── HOME へ戻る ─────────────────────────────────────────────────────────────

def test_back_to_home_keeps_unlocked_chapters(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)

    assert machine.back_to_home()
    assert machine.screen is Screen.HOME
    assert machine.session.unlocked_chapters == {0, 1}
    assert machine.select_chapter(1)


def test_restart_from_home_clears_chapter_history(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)
    machine.back_to_home()

    machine.select_chapter(0)
    assert machine.score == 0
    assert machine.session.chapter_results[0] == []
    assert machine.session.unlocked_chapters == {0, 1}


def test_back_to_home_mid_chapter(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    answer_current(machine)
    assert machine.back_to_home()
    assert machine.screen is Screen.HOME
    assert machine.selected_answer is None
    assert not machine.back_to_home()


def test_summary_from_home(machine: QuizStateMachine) -> None:
    assert not machine.show_summary()

    machine.select_chapter(0)
    play_chapter(machine, correct_count=3)
    machine.back_to_home()

    assert machine.show_summary()
    assert machine.screen is Screen.RUN_SUMMARY
    assert machine.back_to_home()
    assert machine.screen is Screen.HOME


def test_reentered_chapter_without_answers_is_left_out_of_summary(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)
    machine.back_to_home()

    machine.select_chapter(0)
    assert machine.back_to_home()

    assert not machine.has_results
    assert not machine.show_summary()
    assert machine.summary() == []
    assert machine.chapter_overview()[0].last_result is None
    assert machine.is_unlocked(1)


# ─── 参照系 ──────────────────────────────────────────────────────────────────

def test_chapter_overview(machine: QuizStateMachine) -> None:
    machine.select_chapter(0)
    play_chapter(machine, correct_count=12)
    machine.back_to_home()

    overview = machine.chapter_overview()
    assert [o.unlocked for o in overview] == [True, True, False]
    assert [o.question_count for o in overview] == [12, 12, 12]
    assert overview[0].last_result.score == 12
    assert overview[0].last_result.passed
    assert overview[1].last_result is None


def test_required_score(machine: QuizStateMachine) -> None:
    with pytest.raises(QuizStateError):
        machine.required_score()
    assert machine.required_score(0) == 10
    machine.select_chapter(0)
    assert machine.required_score() == 10


def test_question_limit_makes_short_chapters_passable(chapters) -> None:
    machine = QuizStateMachine(chapters, rng=random.Random(3), question_limit=1)
    machine.select_chapter(0)
    assert machine.question_count == 1
    assert machine.required_score() == 1

    play_chapter(machine, correct_count=1)
    assert machine.passed
    assert machine.is_unlocked(1)
    assert machine.summary()[0].total == 1


def test_flat_threshold_policy_on_short_chapter() -> None:
    machine = QuizStateMachine(
        [make_chapter("corto", 12), make_chapter("fin", 2)],
        policy=PassPolicy(threshold=10, fraction=None),
        rng=random.Random(0),
    )
    machine.select_chapter(0)
    play_chapter(machine, correct_count=10)
    assert machine.proceed()
    play_chapter(machine, correct_count=2)
    assert machine.passed
    assert machine.proceed()
    assert machine.screen is Screen.RUN_SUMMARY
