"""
tools/check_content.py
===========================

クイズコンテンツ（quizData.json）を検証するスクリプト。
アプリと同じローダーで読み込み、章ごとの問題数と合格ラインを表示する。

使い方:
    python tools/check_content.py                # config の content_path を検証
    python tools/check_content.py path/to/quizData.json

終了コード:
    0: 問題なし
    1: ファイルが無い / JSON が壊れている / 形が不正
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from spanish_quiz.config import AppConfig
from spanish_quiz.content import load_quiz_content
from spanish_quiz.logging_setup import setup_console_logging
from spanish_quiz.models import ContentError


def check_content(path: Path, cfg: AppConfig) -> int:
    """path を検証して結果を標準出力に書き、終了コードを返す。"""
    try:
        chapters = load_quiz_content(path, force_reload=True)
    except FileNotFoundError as e:
        print(f"NG: {e}")
        return 1
    except (UnicodeDecodeError, OSError) as e:
        print(f"NG: 読み込めません: {e}")
        return 1
    except json.JSONDecodeError as e:
        print(f"NG: JSON として読めません: {e}")
        return 1
    except ContentError as e:
        print(f"NG: {e}")
        return 1

    if not chapters:
        print(f"WARN: {path} に章がありません（アプリは 'No quiz data available.' を表示します）")
        return 0

    policy = cfg.pass_policy()
    for idx, chapter in enumerate(chapters):
        count = len(chapter)
        if cfg.question_limit is not None:
            count = min(count, cfg.question_limit)
        print(
            f"[{idx + 1}] {chapter.topic}: {len(chapter)} 問 "
            f"(出題 {count} 問, 合格 {policy.required_score(count)} 問以上)"
        )

    total = sum(len(c) for c in chapters)
    print(f"OK: {len(chapters)} 章 / {total} 問")
    return 0


# -------------------------------------------------------------
#  CLI エントリーポイント
# -------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="スペイン語クイズ用 quizData.json 検証スクリプト",
    )
    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="検証する JSON ファイル（省略時は設定の content_path）",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="ローダーのログを表示する",
    )
    args = parser.parse_args(argv)

    cfg = AppConfig.load()
    setup_console_logging("DEBUG" if args.verbose else "WARNING")
    return check_content(args.path or cfg.content_path, cfg)


if __name__ == "__main__":
    sys.exit(main())
