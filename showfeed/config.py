from pathlib import Path
from typing import List, Optional, Literal

from pydantic import Field, AliasChoices, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TITLE_PATTERN = r"\b(bo\s*jackson\s*battle\s*arena|boba|bo\s*battle\s*arena|tuesday\s*night\s*throwdown)\b"


class FeedSettings(BaseSettings):
    """What to scrape: search phrases or a single seller page, plus filtering and enrichment limits."""
    mode: Literal["search", "seller"] = Field("search", validation_alias=AliasChoices('FEED_MODE', 'SCRAPE_MODE'))
    queries: List[str] = Field(
        default_factory=lambda: ["Bo Jackson Battle Arena", "BoBA", "Bo Battle Arena"],
        validation_alias=AliasChoices('FEED_QUERIES', 'SEARCH_QUERIES')
    )
    seller_url: Optional[str] = Field(None, validation_alias=AliasChoices('FEED_SELLER_URL', 'SELLER_URL'))
    title_pattern: str = Field(DEFAULT_TITLE_PATTERN, validation_alias=AliasChoices('FEED_TITLE_PATTERN', 'TITLE_PATTERN'))
    # Detail page visits per target
    enrich_max: int = Field(30, ge=0, validation_alias=AliasChoices('FEED_ENRICH_MAX', 'ENRICH_MAX'))
    run_timeout_s: Optional[float] = Field(None, gt=0, validation_alias=AliasChoices('FEED_RUN_TIMEOUT_S', 'RUN_TIMEOUT_S'))

    model_config = SettingsConfigDict(
        env_prefix='FEED_',
        extra='ignore',
        populate_by_name=True
    )


class BrowserSettings(BaseSettings):
    """Playwright launch and navigation settings."""
    headless: bool = Field(True, validation_alias=AliasChoices('BROWSER_HEADLESS', 'HEADLESS'))
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
        validation_alias=AliasChoices('BROWSER_USER_AGENT', 'DEFAULT_USER_AGENT')
    )
    # Browser context fingerprint
    viewport_width: int = 1366
    viewport_height: int = 900
    locale: str = "en-US"
    timezone_id: str = "America/New_York"
    # Timings in milliseconds
    navigation_timeout_ms: int = Field(60000, validation_alias=AliasChoices('BROWSER_NAVIGATION_TIMEOUT_MS', 'NAVIGATION_TIMEOUT_MS'))
    listing_settle_ms: int = 2500
    detail_settle_ms: int = 1200
    overlay_click_timeout_ms: int = 400
    # Auto-scroll on listing pages to trigger lazy-loaded cards
    scroll_step_px: int = 700
    scroll_pause_ms: int = 220
    scroll_max_px: int = 7000
    apply_stealth: bool = Field(True, validation_alias=AliasChoices('BROWSER_APPLY_STEALTH', 'APPLY_STEALTH'))

    model_config = SettingsConfigDict(
        env_prefix='BROWSER_',
        extra='ignore',
        populate_by_name=True
    )


class FileOutputSettings(BaseSettings):
    """Settings for the published feed and the debug artifacts next to it."""
    output_directory: Path = Field(Path("public"), validation_alias=AliasChoices('FILE_OUTPUT_OUTPUT_DIRECTORY', 'OUTPUT_DIRECTORY'))
    schedule_filename: str = "schedule.json"
    # debug-<slug>.html, raw-<slug>.json and index.html next to the feed
    enable_debug_artifacts: bool = Field(True, validation_alias=AliasChoices('FILE_OUTPUT_ENABLE_DEBUG_ARTIFACTS', 'ENABLE_DEBUG_ARTIFACTS'))
    enable_screenshots: bool = Field(True, validation_alias=AliasChoices('FILE_OUTPUT_ENABLE_SCREENSHOTS', 'ENABLE_SCREENSHOTS'))
    log_output_directory: Path = Field(Path("scraper_logs"), validation_alias=AliasChoices('FILE_OUTPUT_LOG_OUTPUT_DIRECTORY', 'LOG_OUTPUT_DIRECTORY'))

    model_config = SettingsConfigDict(
        env_prefix='FILE_OUTPUT_',
        extra='ignore',
        populate_by_name=True
    )


class SentrySettings(BaseSettings):
    """Configuration for Sentry error tracking."""
    dsn: Optional[HttpUrl] = Field(None, validation_alias=AliasChoices('SENTRY_DSN'))
    environment: Optional[str] = Field(None, description="Overrides main app environment for Sentry if needed.")
    traces_sample_rate: float = Field(0.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(
        env_prefix='SENTRY_', # e.g. SENTRY_DSN
        extra='ignore',
        populate_by_name=True
    )


class Settings(BaseSettings):
    """Main application settings."""
    environment: str = Field("development", validation_alias=AliasChoices('APP_ENV', 'ENVIRONMENT'))
    log_level: str = Field("INFO", validation_alias=AliasChoices('APP_LOG_LEVEL', 'LOG_LEVEL'))

    feed: FeedSettings = Field(default_factory=FeedSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    file_outputs: FileOutputSettings = Field(default_factory=FileOutputSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_nested_delimiter='__', # e.g. FEED__ENRICH_MAX=10
        extra='ignore',
        populate_by_name=True
    )


# Loaded once at import; the CLI derives per-run copies with flag overrides
settings = Settings()
