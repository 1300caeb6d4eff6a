"""
models.py
======================

クイズコンテンツのデータモデル。

- Question: 問題文・選択肢・正解 1 つ
- Chapter: トピック名 + 問題の並び
- ContentError: コンテンツ文書の不備（設定エラー扱い）

JSON 文書のキー名（question / options / correct_answer / topic）は
from_dict / to_dict の中だけで扱い、アプリ側は属性名だけを使う。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


class ContentError(ValueError):
    """コンテンツ文書が想定の形になっていない場合に送出する。"""


@dataclass(frozen=True)
class Question:
    """
    1 問分のデータ。

    不変条件:
    - prompt は空でない
    - options は 2 つ以上で重複なし
    - correct_answer は options のいずれか
    """

    prompt: str
    options: Tuple[str, ...]
    correct_answer: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str = "question") -> "Question":
        if not isinstance(data, dict):
            raise ContentError(f"{where}: オブジェクトではありません")

        prompt = data.get("question")
        options = data.get("options")
        correct = data.get("correct_answer")

        if not isinstance(prompt, str) or not prompt.strip():
            raise ContentError(f"{where}: 'question' が空です")
        if not isinstance(options, list) or len(options) < 2:
            raise ContentError(f"{where}: 'options' は 2 つ以上必要です")
        if not all(isinstance(o, str) for o in options):
            raise ContentError(f"{where}: 'options' は文字列のリストである必要があります")
        if len(set(options)) != len(options):
            raise ContentError(f"{where}: 'options' に重複があります")
        if correct not in options:
            raise ContentError(
                f"{where}: correct_answer {correct!r} が options に含まれていません"
            )

        return cls(prompt=prompt.strip(), options=tuple(options), correct_answer=correct)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.prompt,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
        }

    def is_correct(self, option: str) -> bool:
        """選択肢が正解と完全一致するか。"""
        return option == self.correct_answer


@dataclass(frozen=True)
class Chapter:
    """トピック 1 つ分の問題グループ。"""

    topic: str
    questions: Tuple[Question, ...]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str = "chapter") -> "Chapter":
        if not isinstance(data, dict):
            raise ContentError(f"{where}: オブジェクトではありません")

        # 旧フォーマットでは見出しに "title" を使っていた
        topic = data.get("topic", data.get("title"))
        if not isinstance(topic, str) or not topic.strip():
            raise ContentError(f"{where}: 'topic' が空です")

        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list) or not raw_questions:
            raise ContentError(f"{where}: 'questions' が空です")

        questions = tuple(
            Question.from_dict(q, where=f"{where}.questions[{i}]")
            for i, q in enumerate(raw_questions)
        )
        return cls(topic=topic.strip(), questions=questions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "questions": [q.to_dict() for q in self.questions],
        }

    def __len__(self) -> int:
        return len(self.questions)
