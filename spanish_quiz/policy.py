"""
policy.py
======================

章の合格ライン（pass threshold）を決めるモジュール。

合格に必要な正解数は次の 2 つの小さい方:
- threshold: 固定の正解数（既定 10）
- fraction:  章の問題数に対する割合（既定 0.8、切り上げ）

既定値では 12 問の章は 10 問正解で合格、
question_limit で 1 問に絞った章は 1 問正解で合格になる。
どちらか一方を None にすればもう片方だけで判定する。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

DEFAULT_PASS_THRESHOLD = 10
DEFAULT_PASS_FRACTION = 0.8


@dataclass(frozen=True)
class PassPolicy:
    threshold: Optional[int] = DEFAULT_PASS_THRESHOLD
    fraction: Optional[float] = DEFAULT_PASS_FRACTION

    def __post_init__(self):
        if self.threshold is not None and self.threshold < 1:
            raise ValueError("threshold must be >= 1")
        if self.fraction is not None and not 0.0 < self.fraction <= 1.0:
            raise ValueError("fraction must be in (0, 1]")

    def required_score(self, question_count: int) -> int:
        """
        question_count 問の章で合格に必要な正解数。

        常に 1 以上 question_count 以下に収める。
        """
        if question_count < 1:
            raise ValueError("question_count must be >= 1")

        candidates = []
        if self.threshold is not None:
            candidates.append(self.threshold)
        if self.fraction is not None:
            # 0.7 * 10 = 7.000000000000001 のような誤差を丸めてから切り上げる
            candidates.append(math.ceil(round(self.fraction * question_count, 9)))
        if not candidates:
            # どちらも無効なら全問正解
            candidates.append(question_count)

        return max(1, min(min(candidates), question_count))

    def is_passing(self, score: int, question_count: int) -> bool:
        return score >= self.required_score(question_count)
