"""
session.py
======================

クイズの進行を管理する状態機械。

画面は 5 種類:
- NO_CONTENT:     コンテンツが空 / 読み込み失敗
- HOME:           章一覧（ロック状態つき）
- IN_QUESTION:    出題中
- CHAPTER_RESULT: 章の結果
- RUN_SUMMARY:    挑戦した章全体のまとめ

画面は QuizSession のフィールドから毎回決まる（screen プロパティ）。
状態を書き換えるのは QuizStateMachine の遷移メソッドだけで、
1 回の操作につき 1 回の遷移が最後まで走る。

遷移メソッドは、実際に遷移したら True、
無効な操作（ロック中の章、二重解答、未解答での次へ など）なら
何もせず False を返す。範囲外の章番号はロジックエラーとして例外。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from .history import ChapterSummary, build_run_summary, summarize_chapter
from .models import Chapter, Question
from .policy import PassPolicy
from .shuffle import RandomSource, fisher_yates

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    NO_CONTENT = "no_content"
    HOME = "home"
    IN_QUESTION = "in_question"
    CHAPTER_RESULT = "chapter_result"
    RUN_SUMMARY = "run_summary"


class QuizStateError(RuntimeError):
    """状態機械の使い方が誤っている（通常の遷移では起きない）。"""


@dataclass
class QuizSession:
    """
    1 ブラウザセッション分のクイズ状態。永続化はしない。

    question_order は現在の章の出題順（章に入るたびに作り直す）、
    option_order は現在の問題の選択肢順（問題が表示されるたびに作り直す）。
    """

    # ─── 位置 ────────────────────────────────────────────────
    current_chapter: Optional[int] = None  # None = HOME
    current_question: int = 0
    selected_answer: Optional[str] = None

    # ─── 章の挑戦 ─────────────────────────────────────────────
    score: int = 0
    question_order: List[Question] = field(default_factory=list)
    option_order: List[str] = field(default_factory=list)
    chapter_finished: bool = False

    # ─── 実行全体 ─────────────────────────────────────────────
    unlocked_chapters: Set[int] = field(default_factory=lambda: {0})
    chapter_results: Dict[int, List[bool]] = field(default_factory=dict)
    showing_summary: bool = False


@dataclass(frozen=True)
class ChapterStatus:
    """HOME 画面の 1 行分。"""

    index: int
    topic: str
    question_count: int
    unlocked: bool
    last_result: Optional[ChapterSummary] = None


class QuizStateMachine:
    """
    QuizSession を 1 つだけ所有し、遷移を適用するクラス。

    rng は randrange() を持つ乱数源（テストでは固定シードやスタブを渡す）。
    question_limit を指定すると各章の出題を先頭 k 問に絞る（開発用）。
    """

    def __init__(
        self,
        chapters: Sequence[Chapter],
        policy: Optional[PassPolicy] = None,
        rng: Optional[RandomSource] = None,
        question_limit: Optional[int] = None,
        session: Optional[QuizSession] = None,
    ):
        if question_limit is not None and question_limit < 1:
            raise ValueError("question_limit must be >= 1")

        self._chapters: List[Chapter] = list(chapters)
        self.policy = policy or PassPolicy()
        self.rng = rng
        self.question_limit = question_limit
        self.session = session or QuizSession()
        self.session.unlocked_chapters.add(0)

    # ------------------------------------------------------------------
    # 画面判定
    # ------------------------------------------------------------------
    @property
    def screen(self) -> Screen:
        s = self.session
        if not self._chapters:
            return Screen.NO_CONTENT
        if s.showing_summary:
            return Screen.RUN_SUMMARY
        if s.current_chapter is None:
            return Screen.HOME
        if s.chapter_finished:
            return Screen.CHAPTER_RESULT
        return Screen.IN_QUESTION

    # ------------------------------------------------------------------
    # 参照系
    # ------------------------------------------------------------------
    @property
    def chapters(self) -> List[Chapter]:
        return list(self._chapters)

    @property
    def current_chapter(self) -> Optional[Chapter]:
        if self.session.current_chapter is None:
            return None
        return self._chapter(self.session.current_chapter)

    @property
    def current_question(self) -> Optional[Question]:
        """出題中の問題。IN_QUESTION 以外では None。"""
        if self.screen is not Screen.IN_QUESTION:
            return None
        s = self.session
        if not 0 <= s.current_question < len(s.question_order):
            raise QuizStateError(
                f"question index {s.current_question} out of range "
                f"(chapter has {len(s.question_order)} questions)"
            )
        return s.question_order[s.current_question]

    @property
    def option_order(self) -> List[str]:
        return list(self.session.option_order)

    @property
    def question_count(self) -> int:
        """現在の挑戦で出題する問題数（question_limit 適用後）。"""
        return len(self.session.question_order)

    @property
    def score(self) -> int:
        return self.session.score

    @property
    def selected_answer(self) -> Optional[str]:
        return self.session.selected_answer

    @property
    def is_last_chapter(self) -> bool:
        idx = self.session.current_chapter
        return idx is not None and idx == len(self._chapters) - 1

    @property
    def passed(self) -> bool:
        """章の結果画面で、合格ラインに達しているか。"""
        if self.screen is not Screen.CHAPTER_RESULT:
            return False
        return self.policy.is_passing(self.session.score, self.question_count)

    def required_score(self, chapter_index: Optional[int] = None) -> int:
        """
        指定章（省略時は現在の章）の合格に必要な正解数。
        """
        if chapter_index is None:
            chapter_index = self.session.current_chapter
        if chapter_index is None:
            raise QuizStateError("no chapter selected")
        return self.policy.required_score(self._attempt_length(chapter_index))

    @property
    def has_results(self) -> bool:
        """1 問でも回答した章があるか。"""
        return any(self.session.chapter_results.values())

    def is_unlocked(self, chapter_index: int) -> bool:
        return chapter_index in self.session.unlocked_chapters

    def chapter_overview(self) -> List[ChapterStatus]:
        """HOME 画面用: 全章のロック状態と直近の結果。"""
        s = self.session
        rows = []
        for idx, chapter in enumerate(self._chapters):
            last = None
            if s.chapter_results.get(idx):
                last = summarize_chapter(
                    idx,
                    chapter,
                    s.chapter_results[idx],
                    self.policy,
                    self._attempt_length(idx),
                )
            rows.append(
                ChapterStatus(
                    index=idx,
                    topic=chapter.topic,
                    question_count=self._attempt_length(idx),
                    unlocked=idx in s.unlocked_chapters,
                    last_result=last,
                )
            )
        return rows

    def summary(self) -> List[ChapterSummary]:
        """RUN_SUMMARY 画面用: 挑戦した全章の正誤の並び。"""
        return build_run_summary(
            self._chapters,
            self.session.chapter_results,
            self.policy,
            question_limit=self.question_limit,
        )

    # ------------------------------------------------------------------
    # 遷移
    # ------------------------------------------------------------------
    def select_chapter(self, chapter_index: int) -> bool:
        """HOME → IN_QUESTION"""
        if self.screen is not Screen.HOME:
            return self._suppressed("select_chapter", "not on home screen")
        self._chapter(chapter_index)
        if chapter_index not in self.session.unlocked_chapters:
            return self._suppressed("select_chapter", f"chapter {chapter_index} is locked")
        self._start_chapter(chapter_index)
        return True

    def select_answer(self, option: str) -> bool:
        """IN_QUESTION 内での解答。1 問につき 1 回だけ有効。"""
        if self.screen is not Screen.IN_QUESTION:
            return self._suppressed("select_answer", "no question in progress")
        s = self.session
        if s.selected_answer is not None:
            return self._suppressed("select_answer", "question already answered")

        question = self.current_question
        if option not in question.options:
            raise QuizStateError(f"{option!r} is not an option of the current question")

        correct = question.is_correct(option)
        s.selected_answer = option
        if correct:
            s.score += 1
        s.chapter_results.setdefault(s.current_chapter, []).append(correct)
        return True

    def advance(self) -> bool:
        """次の問題へ。最後の問題なら CHAPTER_RESULT へ。"""
        if self.screen is not Screen.IN_QUESTION:
            return self._suppressed("advance", "no question in progress")
        s = self.session
        if s.selected_answer is None:
            return self._suppressed("advance", "no answer selected")

        s.selected_answer = None
        if s.current_question < len(s.question_order) - 1:
            s.current_question += 1
            self._shuffle_options()
            return True

        self._finish_chapter()
        return True

    def retry(self) -> bool:
        """不合格の章をやり直す。"""
        if self.screen is not Screen.CHAPTER_RESULT:
            return self._suppressed("retry", "not on chapter result")
        if self.passed:
            return self._suppressed("retry", "chapter already passed")
        self._start_chapter(self.session.current_chapter)
        return True

    def proceed(self) -> bool:
        """合格した章から次の章へ。最後の章なら RUN_SUMMARY へ。"""
        if self.screen is not Screen.CHAPTER_RESULT:
            return self._suppressed("proceed", "not on chapter result")
        if not self.passed:
            return self._suppressed("proceed", "chapter not passed")

        if self.is_last_chapter:
            logger.info("all chapters completed")
            self.session.showing_summary = True
            return True

        self._start_chapter(self.session.current_chapter + 1)
        return True

    def back_to_home(self) -> bool:
        """HOME に戻る。unlocked_chapters は変更しない。"""
        if self.screen in (Screen.HOME, Screen.NO_CONTENT):
            return self._suppressed("back_to_home", "already on home screen")
        s = self.session
        s.current_chapter = None
        s.current_question = 0
        s.selected_answer = None
        s.score = 0
        s.question_order = []
        s.option_order = []
        s.chapter_finished = False
        s.showing_summary = False
        return True

    def show_summary(self) -> bool:
        """HOME からまとめ画面を開く（挑戦済みの章がある場合のみ）。"""
        if self.screen is not Screen.HOME:
            return self._suppressed("show_summary", "not on home screen")
        if not self.has_results:
            return self._suppressed("show_summary", "no chapter attempted yet")
        self.session.showing_summary = True
        return True

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------
    def _chapter(self, chapter_index: int) -> Chapter:
        if not 0 <= chapter_index < len(self._chapters):
            raise QuizStateError(
                f"chapter index {chapter_index} out of range "
                f"({len(self._chapters)} chapters)"
            )
        return self._chapters[chapter_index]

    def _attempt_length(self, chapter_index: int) -> int:
        total = len(self._chapter(chapter_index))
        if self.question_limit is not None:
            total = min(total, self.question_limit)
        return total

    def _start_chapter(self, chapter_index: int) -> None:
        chapter = self._chapter(chapter_index)
        s = self.session

        order = fisher_yates(chapter.questions, self.rng)
        if self.question_limit is not None:
            order = order[: self.question_limit]

        s.current_chapter = chapter_index
        s.current_question = 0
        s.selected_answer = None
        s.score = 0
        s.question_order = order
        s.chapter_finished = False
        s.showing_summary = False
        s.chapter_results[chapter_index] = []
        self._shuffle_options()

        logger.info(
            "chapter %d (%s) started with %d questions",
            chapter_index,
            chapter.topic,
            len(order),
        )

    def _shuffle_options(self) -> None:
        s = self.session
        question = s.question_order[s.current_question]
        s.option_order = fisher_yates(question.options, self.rng)

    def _finish_chapter(self) -> None:
        s = self.session
        s.chapter_finished = True
        idx = s.current_chapter
        passed = self.policy.is_passing(s.score, self.question_count)

        logger.info(
            "chapter %d finished: %d/%d (%s)",
            idx,
            s.score,
            self.question_count,
            "passed" if passed else "failed",
        )

        next_idx = idx + 1
        if passed and next_idx < len(self._chapters):
            if next_idx not in s.unlocked_chapters:
                logger.info("chapter %d unlocked", next_idx)
            s.unlocked_chapters.add(next_idx)

    def _suppressed(self, action: str, reason: str) -> bool:
        logger.debug("%s ignored: %s (screen=%s)", action, reason, self.screen.value)
        return False
