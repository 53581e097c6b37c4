"""Runtime settings for provider discovery and logging."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"

    # Entry-point discovery (installed distributions)
    MEASURE_SPI_ENTRY_POINTS_ENABLED: bool = True
    MEASURE_SPI_ENTRY_POINT_GROUP: str = "measure_spi.providers"

    # Configured plugins: "pkg.module" or "pkg.module:attr", comma/space separated
    MEASURE_SPI_PLUGINS: str = ""
    MEASURE_SPI_PLUGINS_STRICT: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache
