"""
キャッシュキー導出

各キャッシュドメインのキーを入力から決定的に導出する純粋関数群
"""

import hashlib
from datetime import datetime

BRIEFING_KEY = "news_briefing"
SUMMARY_KEY_PREFIX = "summary_"


def briefing_key() -> str:
    """ブリーフィングのキャッシュキー（常に1件のみ存在）"""
    return BRIEFING_KEY


def analysis_key(title: str) -> str:
    """記事タイトルの関連度判定キャッシュキー

    Args:
        title: 記事タイトル

    Returns:
        MD5 ハッシュ（16進数文字列）
    """
    return hashlib.md5(title.encode("utf-8")).hexdigest()


def summary_key(now: datetime) -> str:
    """日付単位の要約キャッシュキー

    Args:
        now: 基準時刻（UTC）

    Returns:
        summary_YYYY-MM-DD
    """
    return f"{SUMMARY_KEY_PREFIX}{now.strftime('%Y-%m-%d')}"
