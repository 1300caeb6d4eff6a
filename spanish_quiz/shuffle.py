"""
shuffle.py
======================

出題順・選択肢順のシャッフル（Fisher–Yates）。

乱数源は randrange(n) を持つオブジェクトなら何でもよい
（random.Random、テスト用のスタブなど）。
"""

from __future__ import annotations

import random
from typing import List, MutableSequence, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


_default_rng = random.Random()


def shuffle_in_place(items: MutableSequence[T], rng: Optional[RandomSource] = None) -> None:
    """
    後ろから前へ向かう Fisher–Yates。
    i = n-1 .. 1 について j ∈ [0, i] を一様に選び、i と j を入れ替える。
    """
    if rng is None:
        rng = _default_rng
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]


def fisher_yates(items: Sequence[T], rng: Optional[RandomSource] = None) -> List[T]:
    """items のコピーをシャッフルして返す。元のシーケンスは変更しない。"""
    shuffled = list(items)
    shuffle_in_place(shuffled, rng)
    return shuffled
