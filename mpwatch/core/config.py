from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "MicroplasticsWatch"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "./data"

    # Backend API
    BACKEND_URL: str = "https://microplastics-pulse-backend-production.up.railway.app"
    BACKEND_TIMEOUT_SECONDS: float = 10.0
    DOCUMENT_SOURCE: str = "backend"  # "backend" | "local"

    # Public site
    SITE_NAME: str = "MicroplasticsWatch"
    SITE_URL: str = "https://www.microplasticswatch.com"
    DEFAULT_OG_IMAGE: str = "/Microplastics Watch_verticle logo.png"
    DEFAULT_DESCRIPTION: str = (
        "Stay informed with the latest microplastics research, news, and insights."
    )
    STORY_CACHE_SECONDS: int = 300
    NEWS_PAGE_SIZE: int = 12

    # Research library
    LIBRARY_PAGE_SIZE: int = 10
    MAX_SEARCH_LIMIT: int = 50
    MAX_QUERY_CHARS: int = 200
    PREVIEW_CHARS: int = 300

    # Local search matcher
    SNIPPET_RADIUS_CHARS: int = 150
    MAX_CONTENT_MATCHES: int = 5

    # Document viewer
    WORDS_PER_PAGE: int = 500

    # Whitepaper
    WHITEPAPER_DIR: str = "./public/whitepaper-chapters"
    WHITEPAPER_BASE_URL: str | None = None  # fetch over HTTP when set
    WHITEPAPER_CHAPTERS: tuple[str, ...] = (
        "Foreword.md",
        "Chapter-1.md",
        "Chapter-2.md",
        "Chapter-3.md",
        "Chapter-4.md",
        "Chapter-5.md",
        "Chapter-6.md",
        "Chapter-7.md",
    )

    # Redis / Cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_SECONDS: int = 300
    ENABLE_CACHE: bool = False


settings = Settings()
