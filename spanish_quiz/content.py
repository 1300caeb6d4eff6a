"""
content.py
===========================

クイズコンテンツ（quizData.json）を読み込み、
Chapter のリストとして返すモジュール。

文書の形:

{
  "chapters": [
    {
      "topic": "Saludos",
      "questions": [
        {"question": "...", "options": ["...", "..."], "correct_answer": "..."}
      ]
    }
  ]
}

目的:
- 読み込みは 1 回だけ（プロセス中はキャッシュ）
- 不正な文書は ContentError として読み込み時点で検出
- UI 側には「空のリスト + エラーメッセージ」で失敗を伝える
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .models import Chapter, ContentError

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
#  グローバルキャッシュ（Pythonプロセス中は維持される）
# ----------------------------------------------------------------------
_CONTENT_CACHE: Dict[Path, List[Chapter]] = {}

PathLike = Union[str, Path]


# ----------------------------------------------------------------------
#  文書 → Chapter
# ----------------------------------------------------------------------
def parse_quiz_document(document: object) -> List[Chapter]:
    """
    JSON として読み込み済みの文書を検証し、Chapter のリストにする。

    chapters が空リストの場合は空リストを返す（NO_CONTENT 画面になる）。
    """
    if not isinstance(document, dict):
        raise ContentError("トップレベルはオブジェクトである必要があります")

    raw_chapters = document.get("chapters")
    if raw_chapters is None:
        raise ContentError("'chapters' キーがありません")
    if not isinstance(raw_chapters, list):
        raise ContentError("'chapters' はリストである必要があります")

    return [
        Chapter.from_dict(c, where=f"chapters[{i}]")
        for i, c in enumerate(raw_chapters)
    ]


# ----------------------------------------------------------------------
#  ファイル読み込み
# ----------------------------------------------------------------------
def load_quiz_content(path: PathLike, force_reload: bool = False) -> List[Chapter]:
    """
    quizData.json を読み込み、Chapter のリストを返す。

    - force_reload=True の場合のみ再読込
    - ファイルが無ければ FileNotFoundError
    - JSON が壊れていれば json.JSONDecodeError
    - 形が不正なら ContentError
    """
    resolved = Path(path).resolve()

    if resolved in _CONTENT_CACHE and not force_reload:
        return _CONTENT_CACHE[resolved]

    if not resolved.exists():
        raise FileNotFoundError(f"quiz content not found: {resolved}")

    with resolved.open("r", encoding="utf-8") as f:
        document = json.load(f)

    chapters = parse_quiz_document(document)
    total = sum(len(c) for c in chapters)
    logger.info(
        "loaded %d chapters (%d questions) from %s", len(chapters), total, resolved
    )

    _CONTENT_CACHE[resolved] = chapters
    return chapters


def load_quiz_content_safely(path: PathLike) -> Tuple[List[Chapter], Optional[str]]:
    """
    load_quiz_content() の UI 向けラッパー。

    失敗してもリトライはせず、空リストとエラーメッセージを返す。
    成功時のメッセージは None。
    """
    try:
        return load_quiz_content(path), None
    except FileNotFoundError as e:
        logger.error("error loading quiz data: %s", e)
        return [], str(e)
    except (UnicodeDecodeError, OSError) as e:
        # 文字コード不正・ディレクトリ指定・権限なし など
        logger.error("cannot read quiz data %s: %s", path, e)
        return [], f"cannot read quiz data: {e}"
    except json.JSONDecodeError as e:
        logger.exception("quiz data is not valid JSON: %s", path)
        return [], f"quiz data is not valid JSON: {e}"
    except ContentError as e:
        logger.error("quiz data is malformed: %s", e)
        return [], f"quiz data is malformed: {e}"


def clear_cache() -> None:
    """テスト用: キャッシュを破棄する。"""
    _CONTENT_CACHE.clear()
