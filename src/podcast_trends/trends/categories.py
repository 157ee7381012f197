"""Fixed category configuration and static fallback content."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from podcast_trends.models import (
    CategoryConfig,
    CategoryMetadata,
    CategoryTrend,
    Episode,
    TrendSnapshot,
)

CATEGORIES: tuple[CategoryConfig, ...] = (
    CategoryConfig(
        id="technology",
        name="テクノロジー",
        summary="シリコンバレーの最新動向やAIトレンドを追うテック系人気番組から厳選。",
        search_term="technology",
    ),
    CategoryConfig(
        id="news",
        name="ニュース",
        summary="米国内外で話題の政治・経済ニュースを深掘りするジャーナル番組。",
        search_term="us politics news",
    ),
    CategoryConfig(
        id="business",
        name="ビジネス",
        summary="起業・マーケティング・戦略を扱うビジネスリーダー必聴の最新エピソード。",
        search_term="business leadership",
    ),
    CategoryConfig(
        id="health_fitness",
        name="ヘルス＆フィットネス",
        summary="ウェルビーイングやメンタルヘルス、最新フィットネストレンドを学べる番組。",
        search_term="health fitness",
    ),
    CategoryConfig(
        id="culture",
        name="カルチャー",
        summary="ポップカルチャーから社会問題まで、アメリカ文化を多角的に捉える番組を紹介。",
        search_term="society culture",
    ),
)

FALLBACK_EPISODE_TITLE = "サンプルエピソード 1"
FALLBACK_EPISODE_DESCRIPTION = (
    "Podchaser APIの認証情報が未設定、または直近48時間に該当カテゴリでエピソードが"
    "見つからなかったため、サンプルデータを表示しています。環境変数にAPIキーを追加し、"
    "条件を満たす番組があると最新トレンドが取得されます。"
)


def category_metadata(
    categories: tuple[CategoryConfig, ...] = CATEGORIES,
) -> list[CategoryMetadata]:
    return [
        CategoryMetadata(id=c.id, name=c.name, summary=c.summary) for c in categories
    ]


def _fallback_episode(config: CategoryConfig, index: int, now: datetime) -> Episode:
    return Episode(
        id=f"{config.id}-ep-1",
        title=FALLBACK_EPISODE_TITLE,
        description=FALLBACK_EPISODE_DESCRIPTION,
        podcast_title=f"デモポッドキャスト {index + 1}",
        podcast_id=f"{config.id}-podcast",
        release_date=now - timedelta(days=index),
        explicit=False,
        popularity_score=50 + index * 5,
    )


class FallbackCatalog:
    """Static sample trends, synthesized once and restamped on each use."""

    def __init__(
        self,
        categories: tuple[CategoryConfig, ...] = CATEGORIES,
        now: datetime | None = None,
    ) -> None:
        created = now or datetime.now(tz=UTC)
        self._categories = categories
        self._trends: dict[str, CategoryTrend] = {
            config.id: CategoryTrend(
                id=config.id,
                name=config.name,
                summary=config.summary,
                sample_episodes=[_fallback_episode(config, index, created)],
                updated_at=created,
            )
            for index, config in enumerate(categories)
        }

    def category(self, category_id: str, now: datetime | None = None) -> CategoryTrend:
        """Fallback trend for one category with a fresh ``updated_at``.

        Raises:
            KeyError: If the category is not configured.
        """
        try:
            base = self._trends[category_id]
        except KeyError:
            raise KeyError(f"Fallback data missing for category {category_id}") from None
        return base.model_copy(update={"updated_at": now or datetime.now(tz=UTC)})

    def snapshot(self, now: datetime | None = None) -> TrendSnapshot:
        """Full fallback snapshot with a fresh ``generated_at``."""
        stamp = now or datetime.now(tz=UTC)
        return TrendSnapshot(
            generated_at=stamp,
            categories=[self._trends[c.id] for c in self._categories],
        )
