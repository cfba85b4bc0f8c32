"""
ブリーフィング関連モデル

Article, BriefingSnapshot, AnalysisRecord, SummaryPayload, SummaryRecord, AnalysisResult

キャッシュ行の data 列および表示レイヤーへの JSON はこれらのモデルの
エイリアス（camelCase）形式で保存・出力します。
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# 関連度判定のカテゴリラベル
RelevanceCategory = Literal["core_investigation", "progress", "related_figures", "general"]

SummaryTone = Literal["urgent", "normal", "quiet"]


class Article(BaseModel):
    """ニュース記事"""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    link: str = ""
    pub_date: str = Field(default="", alias="pubDate")
    keyword: str = Field(default="", description="記事を最初に取得したキーワード")
    keywords: list[str] = Field(default_factory=list, description="記事に紐づく全キーワード")

    # 関連度判定の結果（未判定時は None）
    relevance_score: int | None = Field(default=None, alias="relevanceScore")
    analysis_reason: str | None = Field(default=None, alias="analysisReason")
    category: str | None = None


class BriefingSnapshot(BaseModel):
    """ブリーフィングのスナップショット（news_briefing キャッシュの中身）"""

    model_config = ConfigDict(populate_by_name=True)

    generated_at: str = Field(alias="generatedAt")
    total_articles: int = Field(alias="totalArticles")
    keywords: list[str]
    articles: list[Article]


class AnalysisRecord(BaseModel):
    """記事タイトルに対する関連度判定（analysis キャッシュの中身）"""

    score: int = Field(ge=0, le=10)
    reason: str
    category: str


class RelevanceVerdict(BaseModel):
    """関連度判定 LLM の構造化レスポンス"""

    score: int = Field(ge=0, le=10, description="0-10 の関連度スコア")
    reason: str = Field(description="スコアの理由（1行）")
    category: RelevanceCategory

    def to_record(self) -> AnalysisRecord:
        """キャッシュ用レコードに変換"""
        return AnalysisRecord(score=self.score, reason=self.reason, category=self.category)


class SummaryPayload(BaseModel):
    """要約 LLM の構造化レスポンス"""

    overall: str
    by_investigation: dict[str, str]
    key_developments: list[str]
    top_keywords: list[str]
    tone: SummaryTone


class SummaryRecord(SummaryPayload):
    """要約（summary キャッシュの中身）"""

    article_count: int
    generated_at: str


class AnalysisResult(BaseModel):
    """関連度判定バッチの結果"""

    analyzed: int
    filtered: int
    articles: list[Article]
