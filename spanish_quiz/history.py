"""
history.py
=====================================

章ごとの正誤履歴を、結果画面・まとめ画面向けに集計するモジュール。

chapter_results の構造（QuizSession が保持）:

{
    0: [True, True, False, ...],   # 章 0 の直近の挑戦の正誤
    2: [False, True, ...],
}

永続化はしない。ブラウザセッションが終われば消える。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models import Chapter
from .policy import PassPolicy

CORRECT_MARK = "✓"
INCORRECT_MARK = "✗"


@dataclass(frozen=True)
class ChapterSummary:
    """1 章分の集計結果。"""

    index: int
    topic: str
    results: tuple
    score: int
    total: int
    required: int
    passed: bool

    @property
    def answered(self) -> int:
        return len(self.results)

    @property
    def accuracy(self) -> float:
        """解答済みの問題に対する正答率 (0.0〜1.0)。未解答なら 0.0。"""
        if not self.results:
            return 0.0
        return self.score / float(len(self.results))


def summarize_chapter(
    index: int,
    chapter: Chapter,
    results: Sequence[bool],
    policy: PassPolicy,
    total: int,
) -> ChapterSummary:
    """
    1 章分の正誤リストを ChapterSummary にまとめる。

    total は実際に出題した問題数（question_limit 適用後）。
    """
    score = sum(1 for r in results if r)
    required = policy.required_score(total)
    return ChapterSummary(
        index=index,
        topic=chapter.topic,
        results=tuple(results),
        score=score,
        total=total,
        required=required,
        passed=len(results) >= total and score >= required,
    )


def build_run_summary(
    chapters: Sequence[Chapter],
    chapter_results: Mapping[int, Sequence[bool]],
    policy: PassPolicy,
    question_limit: Optional[int] = None,
) -> List[ChapterSummary]:
    """
    挑戦した章だけを章番号順に並べたまとめを返す。

    回答が 1 つも無い章（入ってすぐ HOME に戻った場合など）は含めない。
    """
    summaries: List[ChapterSummary] = []
    for index in sorted(chapter_results):
        if not chapter_results[index]:
            continue
        chapter = chapters[index]
        total = len(chapter)
        if question_limit is not None:
            total = min(total, question_limit)
        summaries.append(
            summarize_chapter(index, chapter, chapter_results[index], policy, total)
        )
    return summaries


def format_results(results: Sequence[bool]) -> str:
    """[True, False, True] → "✓✗✓" """
    return "".join(CORRECT_MARK if r else INCORRECT_MARK for r in results)


def summary_rows(summaries: Sequence[ChapterSummary]) -> List[Dict[str, Any]]:
    """
    UI の表（pandas.DataFrame）用に dict のリストへ変換する。
    """
    rows = []
    for s in summaries:
        rows.append(
            {
                "Chapter": s.index + 1,
                "Topic": s.topic,
                "Score": f"{s.score}/{s.total}",
                "Required": s.required,
                "Passed": "yes" if s.passed else "no",
                "Results": format_results(s.results),
            }
        )
    return rows
