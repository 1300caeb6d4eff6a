"""
config.py
=========

アプリ全体で利用する設定値を一元管理する。
コンテンツのパス、合格ライン、開発用の出題数制限、ログレベルなど
すべてこのクラスを通じて取得する。

優先順位（下ほど強い）:
1. AppConfig の既定値
2. ルートの config.toml
3. 環境変数 SPANISH_QUIZ_*

本ファイルは app.py と tools/check_content.py の共通設定でもある。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

from .policy import DEFAULT_PASS_FRACTION, DEFAULT_PASS_THRESHOLD, PassPolicy

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# 基本パス定義
# ------------------------------------------------------------

ROOT_DIR = Path(__file__).resolve().parent.parent
BANK_DIR = ROOT_DIR / "bank"
CONFIG_TOML_PATH = ROOT_DIR / "config.toml"

ENV_PREFIX = "SPANISH_QUIZ_"


# ------------------------------------------------------------
# AppConfig
# ------------------------------------------------------------

@dataclass
class AppConfig:
    """
    アプリ設定クラス。

    - コンテンツ（quizData.json）のパス
    - 合格ライン（固定値 / 章の問題数に対する割合）
    - 開発用の出題数制限
    - ログレベル
    """

    # ---------- コンテンツ ----------
    content_path: Path = BANK_DIR / "quizData.json"

    # ---------- 合格ライン ----------
    pass_threshold: Optional[int] = DEFAULT_PASS_THRESHOLD
    pass_fraction: Optional[float] = DEFAULT_PASS_FRACTION

    # ---------- 開発用 ----------
    question_limit: Optional[int] = None

    # ---------- アプリ ----------
    page_title: str = "Spanish Quiz"
    log_level: str = "INFO"

    # ============================================================
    # 読み込み
    # ============================================================

    @classmethod
    def load(
        cls,
        toml_path: Union[str, Path, None] = CONFIG_TOML_PATH,
        environ: Optional[Dict[str, str]] = None,
    ) -> "AppConfig":
        """
        既定値 → config.toml → 環境変数 の順に重ねて AppConfig を作る。
        読めない値はその層を無視して下の層の値を使う。
        """
        cfg = cls()
        if toml_path is not None:
            cfg._apply_toml(Path(toml_path))
        cfg._apply_env(os.environ if environ is None else environ)
        return cfg

    def pass_policy(self) -> PassPolicy:
        return PassPolicy(threshold=self.pass_threshold, fraction=self.pass_fraction)

    # ============================================================
    # 内部関数
    # ============================================================

    def _apply_toml(self, path: Path) -> None:
        """
        [content] path
        [quiz]    pass_threshold / pass_fraction / question_limit
        [app]     page_title / log_level
        """
        if not path.exists():
            return
        try:
            data = toml.load(path)
        except (toml.TomlDecodeError, OSError) as e:
            logger.warning("ignoring unreadable %s: %s", path, e)
            return

        content = _section(data, "content")
        quiz = _section(data, "quiz")
        app = _section(data, "app")

        if isinstance(content.get("path"), str):
            self.content_path = _resolve(content["path"])

        if "pass_threshold" in quiz:
            self.pass_threshold = _optional_int(quiz["pass_threshold"], self.pass_threshold)
        if "pass_fraction" in quiz:
            self.pass_fraction = _optional_float(quiz["pass_fraction"], self.pass_fraction)
        if "question_limit" in quiz:
            self.question_limit = _optional_int(quiz["question_limit"], self.question_limit)

        if isinstance(app.get("page_title"), str):
            self.page_title = app["page_title"]
        if isinstance(app.get("log_level"), str):
            self.log_level = app["log_level"].upper()

    def _apply_env(self, environ: Dict[str, str]) -> None:
        path = environ.get(ENV_PREFIX + "CONTENT")
        if path:
            self.content_path = _resolve(path)

        raw = environ.get(ENV_PREFIX + "PASS_THRESHOLD")
        if raw is not None:
            self.pass_threshold = _optional_int(raw, self.pass_threshold)
        raw = environ.get(ENV_PREFIX + "PASS_FRACTION")
        if raw is not None:
            self.pass_fraction = _optional_float(raw, self.pass_fraction)
        raw = environ.get(ENV_PREFIX + "QUESTION_LIMIT")
        if raw is not None:
            self.question_limit = _optional_int(raw, self.question_limit)

        level = environ.get(ENV_PREFIX + "LOG_LEVEL")
        if level:
            self.log_level = level.upper()


# ============================================================
# 値の変換ユーティリティ
# ============================================================

def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else ROOT_DIR / p


def _is_none(value: Any) -> bool:
    # toml には null が無いので "none" と空文字を「無効」として扱う
    return value is None or (isinstance(value, str) and value.strip().lower() in ("", "none"))


def _optional_int(value: Any, default: Optional[int]) -> Optional[int]:
    if _is_none(value):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("invalid integer setting %r, keeping %r", value, default)
        return default
    return parsed if parsed > 0 else None


def _optional_float(value: Any, default: Optional[float]) -> Optional[float]:
    if _is_none(value):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning("invalid number setting %r, keeping %r", value, default)
        return default
    if not 0.0 < parsed <= 1.0:
        logger.warning("pass fraction %r out of (0, 1], keeping %r", value, default)
        return default
    return parsed
