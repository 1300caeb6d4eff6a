"""
spanish_quiz パッケージ
======================

このパッケージは、スペイン語単語クイズアプリの内部ロジックを提供する。

主な役割:
- 設定管理（config）
- クイズコンテンツの読み込み・検証（content / models）
- 出題順・選択肢順のシャッフル（shuffle）
- 合格ライン（policy）
- 進行を管理する状態機械（session）
- 正誤履歴の集計（history）
- UI コンポーネント（ui）

app.py は Streamlit UI のページ切替のみを担当し、内部ロジックはすべて本パッケージから呼ぶ。
ui 以外のモジュールは Streamlit に依存しない。
"""

from .config import AppConfig
from .content import load_quiz_content, load_quiz_content_safely, parse_quiz_document
from .history import ChapterSummary, build_run_summary
from .models import Chapter, ContentError, Question
from .policy import PassPolicy
from .session import ChapterStatus, QuizSession, QuizStateError, QuizStateMachine, Screen
from .shuffle import fisher_yates, shuffle_in_place

__all__ = [
    "AppConfig",
    "load_quiz_content",
    "load_quiz_content_safely",
    "parse_quiz_document",
    "ChapterSummary",
    "build_run_summary",
    "Chapter",
    "ContentError",
    "Question",
    "PassPolicy",
    "ChapterStatus",
    "QuizSession",
    "QuizStateError",
    "QuizStateMachine",
    "Screen",
    "fisher_yates",
    "shuffle_in_place",
]
