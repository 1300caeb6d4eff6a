from __future__ import annotations

import logging
from typing import Union


def setup_console_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    アプリ起動時に 1 回呼ぶ。コンソールにログを出す。
    Streamlit は操作のたびにスクリプトを再実行するので、2 回目以降はレベルだけ更新する。
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if root.handlers:
        # already configured (avoid duplicates)
        root.setLevel(level)
        return

    root.setLevel(level)
    h = logging.StreamHandler()
    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    h.setFormatter(fmt)
    root.addHandler(h)
