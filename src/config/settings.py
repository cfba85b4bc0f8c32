"""
設定管理モジュール

環境変数を読み込み、アプリケーション全体で使用する設定を提供します。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Naver News Search API Configuration
    naver_client_id: str = Field(default="", description="Naver API クライアント ID")
    naver_client_secret: str = Field(default="", description="Naver API クライアントシークレット")
    naver_news_api_url: str = Field(
        default="https://openapi.naver.com/v1/search/news.json",
        description="Naver ニュース検索 API URL",
    )
    news_api_timeout: float = Field(default=30.0, description="ニュース検索 API タイムアウト（秒）")

    # 検索キーワード（固定セット）
    news_keywords: list[str] = Field(
        default=["내란 특검", "김건희 특검", "채상병 특검"],
        description="ブリーフィング対象のキーワード",
    )
    news_page_size: int = Field(default=100, description="キーワードあたりの取得件数（最大100）")

    # Ollama LLM Configuration
    ollama_api_url: str = Field(default="http://localhost:11434", description="Ollama API URL")
    ollama_model: str = Field(default="qwen3:8b", description="使用する LLM モデル")
    ollama_timeout: float = Field(default=600.0, description="Ollama API タイムアウト（秒）")
    scoring_temperature: float = Field(default=0.1, description="関連度判定の温度パラメータ")
    summary_temperature: float = Field(default=0.3, description="要約生成の温度パラメータ")

    # 関連度フィルタ
    relevance_threshold: int = Field(default=6, description="表示対象とする最低関連度スコア")

    # Cache Configuration
    briefing_cache_ttl_hours: float = Field(default=1, description="ブリーフィングキャッシュ有効期間（時間）")
    summary_cache_ttl_hours: float = Field(default=6, description="要約キャッシュ有効期間（時間）")
    cache_sweep_interval: float = Field(
        default=3600.0, description="期限切れキャッシュ掃除の間隔（秒、0 で無効）"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/database.db", description="データベース URL"
    )

    # Application Configuration
    log_level: str = Field(default="INFO", description="ログレベル")
    environment: str = Field(default="development", description="実行環境")


@lru_cache()
def get_settings() -> Settings:
    """設定インスタンスを取得（シングルトン）"""
    return Settings()
