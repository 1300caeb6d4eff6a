import random
from typing import List

import pytest

from spanish_quiz import content
from spanish_quiz.models import Chapter, Question
from spanish_quiz.session import QuizStateMachine


def make_chapter(topic: str, count: int, option_count: int = 4) -> Chapter:
    questions = []
    for i in range(count):
        options = tuple(f"{topic}-{i}-opt{k}" for k in range(option_count))
        questions.append(
            Question(prompt=f"{topic} question {i}", options=options, correct_answer=options[0])
        )
    return Chapter(topic=topic, questions=tuple(questions))


def answer_current(machine: QuizStateMachine, correct: bool = True) -> str:
    q = machine.current_question
    if correct:
        option = q.correct_answer
    else:
        option = next(o for o in q.options if o != q.correct_answer)
    assert machine.select_answer(option)
    return option


def play_chapter(machine: QuizStateMachine, correct_count: int) -> None:
    """現在の章を最後まで解く。先頭 correct_count 問だけ正解する。"""
    for i in range(machine.question_count):
        answer_current(machine, correct=i < correct_count)
        assert machine.advance()


class CountingRandom(random.Random):
    """randrange の呼び出し回数を数える乱数源。"""

    def __init__(self, seed: int = 0):
        super().__init__(seed)
        self.calls: List[int] = []

    def randrange(self, *args, **kwargs):
        self.calls.append(args[0])
        return super().randrange(*args, **kwargs)


@pytest.fixture(autouse=True)
def _clear_content_cache():
    content.clear_cache()
    yield
    content.clear_cache()


@pytest.fixture
def chapters() -> List[Chapter]:
    return [make_chapter("saludos", 12), make_chapter("numeros", 12), make_chapter("familia", 12)]


@pytest.fixture
def machine(chapters: List[Chapter]) -> QuizStateMachine:
    return QuizStateMachine(chapters, rng=random.Random(1234))
