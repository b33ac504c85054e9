"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Signal cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    ttl_seconds: float = 300.0  # 5 minutes


class SourceSettings(BaseSettings):
    """External signal source endpoints and HTTP behaviour.

    Every URL is overridable so a test deployment can point the fetchers at
    local fixtures. All fields configurable via SOURCE_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    news_feed_url: str = "https://www.nrk.no/toppsaker.rss"
    news_proxy_url: str = "https://api.allorigins.win/raw?url="  # "" = fetch directly
    news_fallback_url: str = "https://www.reddit.com/r/norge/hot.json?limit=10"
    market_url: str = "https://api.alternative.me/fng/"
    energy_url: str = "https://www.hvakosterstrommen.no/api/v1/prices"

    timeout_seconds: float = 10.0
    user_agent: str = "DagensVibe/1.0"
    timezone: str = "Europe/Oslo"  # calendar day and price hour are local time


class StorageSettings(BaseSettings):
    """File-backed key-value storage for history and user settings."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: str = "data"
    history_key: str = "dagens_vibe_history"
    settings_key: str = "dagens_vibe_settings"
    history_limit: int = 30


class ScoringSettings(BaseSettings):
    """Composite day score weights (must sum to 1.0)."""

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    weight_weather: Decimal = Decimal("0.20")
    weight_news: Decimal = Decimal("0.25")
    weight_market: Decimal = Decimal("0.20")
    weight_energy: Decimal = Decimal("0.15")
    weight_mood: Decimal = Decimal("0.20")

    def weights(self) -> dict[str, Decimal]:
        """Return the weight set keyed by component name."""
        return {
            "weather": self.weight_weather,
            "news": self.weight_news,
            "market": self.weight_market,
            "energy": self.weight_energy,
            "mood": self.weight_mood,
        }


class DashboardSettings(BaseSettings):
    """JSON API server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "127.0.0.1"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    cache: CacheSettings = CacheSettings()
    sources: SourceSettings = SourceSettings()
    storage: StorageSettings = StorageSettings()
    scoring: ScoringSettings = ScoringSettings()
    dashboard: DashboardSettings = DashboardSettings()
