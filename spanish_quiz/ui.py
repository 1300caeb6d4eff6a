"""
ui.py
======================

Streamlit ベースの UI コンポーネントをまとめたモジュール。

責務:
- スマートフォンのブラウザでも崩れないレイアウトとスタイル
- 各画面の描画（章一覧・問題・章の結果・まとめ・コンテンツなし）
- テーマ切替

ここでは「見た目」と「ユーザー操作の入力」だけを扱い、
状態の更新は app.py が QuizStateMachine の遷移メソッドで行う。

各 render_* は「何が押されたか」を dict で返す。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import streamlit as st

from .history import ChapterSummary, format_results, summary_rows
from .session import ChapterStatus, QuizStateMachine

# ----------------------------------------------------------------------
#  テーマ定義
# ----------------------------------------------------------------------


THEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#ffffff",
        "text": "#1c1c1e",
        "surface": "#f2f2f7",
        "surface_alt": "#ffffff",
        "border": "#d1d1d6",
        "primary": "#c60b1e",  # rojo
        "correct": "#34c759",
        "incorrect": "#ff3b30",
    },
    "dark": {
        "bg": "#000000",
        "text": "#f5f5f7",
        "surface": "#1c1c1e",
        "surface_alt": "#2c2c2e",
        "border": "#3a3a3c",
        "primary": "#ffc400",  # amarillo
        "correct": "#30d158",
        "incorrect": "#ff453a",
    },
}


# ----------------------------------------------------------------------
#  CSS 生成
# ----------------------------------------------------------------------
def _generate_css(theme: Dict[str, str]) -> str:
    """テーマに応じたグローバル CSS を生成する。"""

    return f"""
    <style>
    .sq-header {{
        display: flex;
        justify-content: space-between;
        align-items: center;
        gap: 0.5rem;
        margin-bottom: 0.5rem;
    }}

    .sq-app-title {{
        font-weight: 600;
        font-size: 1.15rem;
        color: {theme['primary']};
    }}

    .sq-badge {{
        padding: 0.1rem 0.5rem;
        border-radius: 999px;
        border: 1px solid {theme['border']};
        background: {theme['surface']};
        font-size: 0.75rem;
        white-space: nowrap;
    }}

    .sq-question-box {{
        background: {theme['surface_alt']};
        color: {theme['text']};
        padding: 1rem;
        border-radius: 12px;
        border: 1px solid {theme['border']};
        font-size: 1.2rem;
        line-height: 1.6;
        margin-top: 0.5rem;
        margin-bottom: 0.75rem;
    }}

    .sq-results {{
        font-size: 1.1rem;
        letter-spacing: 0.15rem;
    }}

    .sq-correct {{
        color: {theme['correct']};
        font-weight: 600;
    }}

    .sq-incorrect {{
        color: {theme['incorrect']};
        font-weight: 600;
    }}

    .sq-footer {{
        margin-top: 1.5rem;
        display: flex;
        justify-content: space-between;
        font-size: 0.8rem;
        opacity: 0.7;
    }}
    </style>
    """


# ----------------------------------------------------------------------
#  テーマ関連
# ----------------------------------------------------------------------
def _ensure_theme() -> str:
    """セッションに theme キーを用意し、現在のテーマキーを返す。"""
    theme_key = st.session_state.get("theme", "light")
    if theme_key not in THEMES:
        theme_key = "light"
    st.session_state["theme"] = theme_key
    return theme_key


def _render_theme_selector(theme_key: str) -> str:
    options = list(THEMES.keys())
    idx = options.index(theme_key) if theme_key in options else 0
    selected = st.radio(
        "Theme",
        options,
        index=idx,
        horizontal=True,
        label_visibility="collapsed",
        format_func=lambda k: k.capitalize(),
    )
    st.session_state["theme"] = selected
    return selected


def inject_theme() -> None:
    """現在のテーマの CSS を注入する。各画面の先頭で呼ぶ。"""
    st.markdown(_generate_css(THEMES[_ensure_theme()]), unsafe_allow_html=True)


def render_header(title: str, badge: Optional[str] = None) -> None:
    col_left, col_right = st.columns([2.2, 1.8])
    with col_left:
        st.markdown(
            f"<div class='sq-header'><div class='sq-app-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with col_right:
        if badge:
            st.markdown(
                f"<div style='text-align:right;'><span class='sq-badge'>{badge}</span></div>",
                unsafe_allow_html=True,
            )
        _render_theme_selector(_ensure_theme())


def render_footer() -> None:
    st.markdown(
        "<div class='sq-footer'>"
        "<div>¡Aprende vocabulario!</div>"
        "<div>© Spanish Quiz</div>"
        "</div>",
        unsafe_allow_html=True,
    )


# ----------------------------------------------------------------------
#  画面: コンテンツなし
# ----------------------------------------------------------------------
def render_no_content(error: Optional[str] = None) -> None:
    st.markdown("<div style='text-align:center; margin-top:2rem;'>No quiz data available.</div>",
                unsafe_allow_html=True)
    if error:
        st.error(error)


# ----------------------------------------------------------------------
#  画面: ホーム（章一覧）
# ----------------------------------------------------------------------
def render_home(overview: Sequence[ChapterStatus], can_show_summary: bool) -> Dict[str, Any]:
    """
    章一覧を描画する。ロック中の章はボタンを無効化する。

    戻り値:
        {
          "selected_chapter": Optional[int],
          "clicked_summary": bool,
        }
    """
    selected_chapter: Optional[int] = None
    clicked_summary = False

    st.markdown("## 📚 Chapters")

    for status in overview:
        label = f"Chapter {status.index + 1}: {status.topic}"
        if not status.unlocked:
            label = "🔒 " + label

        col_btn, col_info = st.columns([3, 1])
        with col_btn:
            if st.button(
                label,
                key=f"sq_chapter_{status.index}",
                disabled=not status.unlocked,
                width="stretch",
            ):
                selected_chapter = status.index
        with col_info:
            last = status.last_result
            if last is None:
                st.caption(f"{status.question_count} questions")
            else:
                mark = "✅" if last.passed else "↻"
                st.caption(f"{mark} {last.score}/{last.total}")

    if can_show_summary:
        st.write("")
        if st.button("📊 Results summary", key="sq_open_summary", width="stretch"):
            clicked_summary = True

    return {
        "selected_chapter": selected_chapter,
        "clicked_summary": clicked_summary,
    }


# ----------------------------------------------------------------------
#  画面: 出題中
# ----------------------------------------------------------------------
def render_question_page(machine: QuizStateMachine) -> Dict[str, Any]:
    """
    問題ページ全体を描画し、ユーザー操作の結果を返す。

    戻り値:
        {
          "selected_option": Optional[str],   # 新たに押された選択肢 (なければ None)
          "clicked_next": bool,
          "clicked_home": bool,
        }
    """
    selected_option: Optional[str] = None
    clicked_next = False
    clicked_home = False

    chapter = machine.current_chapter
    q = machine.current_question
    s = machine.session
    total = machine.question_count

    st.markdown(f"### Chapter {s.current_chapter + 1}: {chapter.topic}")
    st.progress(s.current_question / float(total))
    st.caption(f"Question {s.current_question + 1} of {total} · Score: {s.score}/{total}")

    st.markdown(f"<div class='sq-question-box'>{q.prompt}</div>", unsafe_allow_html=True)

    # すでに回答済みかどうか
    answered = s.selected_answer

    for idx, option in enumerate(machine.option_order):
        label = option
        if answered is not None:
            if option == q.correct_answer:
                label = f"{option} ✓"
            elif option == answered:
                label = f"{option} ✗"

        if st.button(
            label,
            key=f"sq_option_{idx}",
            disabled=answered is not None,
            width="stretch",
        ):
            # 未回答時のみ「新たな選択」として扱う
            if answered is None:
                selected_option = option

    if answered is not None:
        if answered == q.correct_answer:
            st.markdown("<p class='sq-correct'>¡Correcto!</p>", unsafe_allow_html=True)
        else:
            st.markdown(
                f"<p class='sq-incorrect'>Incorrect. The correct answer is: {q.correct_answer}</p>",
                unsafe_allow_html=True,
            )

    col_home, col_next = st.columns(2)
    with col_home:
        if st.button("🏠 Chapters", key="sq_home", width="stretch"):
            clicked_home = True
    with col_next:
        if answered is not None:
            is_last = s.current_question >= total - 1
            label = "See results ▶" if is_last else "Next Question ▶"
            if st.button(label, key="sq_next", type="primary", width="stretch"):
                clicked_next = True

    return {
        "selected_option": selected_option,
        "clicked_next": clicked_next,
        "clicked_home": clicked_home,
    }


# ----------------------------------------------------------------------
#  画面: 章の結果
# ----------------------------------------------------------------------
def render_chapter_result(machine: QuizStateMachine) -> Dict[str, Any]:
    """
    戻り値:
        {
          "clicked_retry": bool,
          "clicked_proceed": bool,
          "clicked_home": bool,
        }
    """
    clicked_retry = False
    clicked_proceed = False
    clicked_home = False

    s = machine.session
    total = machine.question_count
    required = machine.required_score()

    st.markdown("## Chapter Results")
    st.write(f"You scored **{s.score}** out of **{total}**")
    results = s.chapter_results.get(s.current_chapter, [])
    st.markdown(
        f"<div class='sq-results'>{format_results(results)}</div>",
        unsafe_allow_html=True,
    )

    if machine.passed:
        st.success("Congratulations! You passed this chapter.")
        if machine.is_last_chapter:
            st.markdown("<p class='sq-correct'>You've completed all chapters!</p>",
                        unsafe_allow_html=True)
            proceed_label = "📊 Results summary"
        else:
            proceed_label = "Next Chapter ▶"
        if st.button(proceed_label, key="sq_proceed", type="primary", width="stretch"):
            clicked_proceed = True
    else:
        st.warning(f"You need to score at least {required} to pass. Try again!")
        if st.button("🔁 Restart Chapter", key="sq_retry", type="primary", width="stretch"):
            clicked_retry = True

    if st.button("🏠 Chapters", key="sq_result_home", width="stretch"):
        clicked_home = True

    return {
        "clicked_retry": clicked_retry,
        "clicked_proceed": clicked_proceed,
        "clicked_home": clicked_home,
    }


# ----------------------------------------------------------------------
#  画面: まとめ
# ----------------------------------------------------------------------
def render_run_summary(summaries: List[ChapterSummary]) -> Dict[str, Any]:
    """
    挑戦した章ごとの正誤の並びを表で表示する。

    戻り値:
        {"clicked_home": bool}
    """
    st.markdown("## 📊 Results summary")

    rows = summary_rows(summaries)
    if not rows:
        st.info("No chapter attempted yet.")
    else:
        passed = sum(1 for s in summaries if s.passed)
        st.write(f"- Chapters passed: **{passed} / {len(summaries)}**")
        df = pd.DataFrame(rows).set_index("Chapter")
        st.dataframe(df, width="stretch")

    clicked_home = st.button("🏠 Chapters", key="sq_summary_home", width="stretch")
    return {"clicked_home": bool(clicked_home)}
