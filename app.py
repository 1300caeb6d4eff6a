"""
app.py
======================

スペイン語単語クイズ（Streamlit）エントリーポイント。

特徴:
- 章一覧 → 出題 → 章の結果 → まとめ の画面構成
- 章に入るたびに出題順を、問題が表示されるたびに選択肢順をシャッフル
- 合格ラインに達すると次の章が解放される
- 状態はブラウザセッションの間だけ保持（永続化なし）

前提:
- bank/quizData.json にクイズコンテンツが格納されている
  （config.toml の [content].path または環境変数 SPANISH_QUIZ_CONTENT で変更可）

起動:
    streamlit run app.py
"""

from __future__ import annotations

import logging
from typing import Optional

import streamlit as st

from spanish_quiz.config import AppConfig
from spanish_quiz.content import load_quiz_content_safely
from spanish_quiz.logging_setup import setup_console_logging
from spanish_quiz.session import QuizStateMachine, Screen
from spanish_quiz.ui import (
    inject_theme,
    render_chapter_result,
    render_footer,
    render_header,
    render_home,
    render_no_content,
    render_question_page,
    render_run_summary,
)

logger = logging.getLogger("spanish_quiz.app")


# ----------------------------------------------------------------------
#  アプリ設定読み込み
# ----------------------------------------------------------------------
def load_app_config() -> AppConfig:
    """AppConfig をセッションに保持して返す。"""
    if "app_config" not in st.session_state:
        st.session_state["app_config"] = AppConfig.load()
    return st.session_state["app_config"]


# ----------------------------------------------------------------------
#  QuizStateMachine のラッパー
# ----------------------------------------------------------------------
def get_state_machine() -> QuizStateMachine:
    """
    QuizStateMachine をセッションに保持して返す。
    コンテンツはセッション開始時に 1 回だけ読み込む。
    """
    if "quiz_machine" not in st.session_state:
        cfg = load_app_config()
        chapters, error = load_quiz_content_safely(cfg.content_path)
        st.session_state["content_error"] = error
        logger.info("new quiz session with %d chapters", len(chapters))
        st.session_state["quiz_machine"] = QuizStateMachine(
            chapters,
            policy=cfg.pass_policy(),
            question_limit=cfg.question_limit,
        )
    return st.session_state["quiz_machine"]  # type: ignore[return-value]


def get_content_error() -> Optional[str]:
    return st.session_state.get("content_error")


# ----------------------------------------------------------------------
#  ページ: ホーム
# ----------------------------------------------------------------------
def render_home_page(machine: QuizStateMachine) -> None:
    result = render_home(
        machine.chapter_overview(),
        can_show_summary=machine.has_results,
    )

    if result["selected_chapter"] is not None:
        if machine.select_chapter(result["selected_chapter"]):
            st.rerun()
    elif result["clicked_summary"]:
        if machine.show_summary():
            st.rerun()


# ----------------------------------------------------------------------
#  ページ: 出題中
# ----------------------------------------------------------------------
def render_quiz_page(machine: QuizStateMachine) -> None:
    result = render_question_page(machine)

    # 新たに選択された場合のみ answer
    if result["selected_option"] is not None:
        machine.select_answer(result["selected_option"])
        st.rerun()
    elif result["clicked_next"]:
        if machine.advance():
            st.rerun()
    elif result["clicked_home"]:
        if machine.back_to_home():
            st.rerun()


# ----------------------------------------------------------------------
#  ページ: 章の結果
# ----------------------------------------------------------------------
def render_result_page(machine: QuizStateMachine) -> None:
    result = render_chapter_result(machine)

    changed = False
    if result["clicked_retry"]:
        changed = machine.retry()
    elif result["clicked_proceed"]:
        changed = machine.proceed()
    elif result["clicked_home"]:
        changed = machine.back_to_home()

    if changed:
        st.rerun()


# ----------------------------------------------------------------------
#  ページ: まとめ
# ----------------------------------------------------------------------
def render_summary_page(machine: QuizStateMachine) -> None:
    result = render_run_summary(machine.summary())
    if result["clicked_home"] and machine.back_to_home():
        st.rerun()


# ----------------------------------------------------------------------
#  メイン
# ----------------------------------------------------------------------
def main() -> None:
    cfg = load_app_config()
    setup_console_logging(cfg.log_level)

    st.set_page_config(
        page_title=cfg.page_title,
        page_icon="🇪🇸",
        layout="centered",
    )

    machine = get_state_machine()
    screen = machine.screen

    inject_theme()
    badge = None
    if cfg.question_limit is not None:
        badge = f"DEV · {cfg.question_limit} q/chapter"
    render_header(cfg.page_title, badge=badge)

    if screen is Screen.NO_CONTENT:
        render_no_content(get_content_error())
    elif screen is Screen.IN_QUESTION:
        render_quiz_page(machine)
    elif screen is Screen.CHAPTER_RESULT:
        render_result_page(machine)
    elif screen is Screen.RUN_SUMMARY:
        render_summary_page(machine)
    else:
        render_home_page(machine)

    render_footer()


if __name__ == "__main__":
    main()
