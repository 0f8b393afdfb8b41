from os import getenv


def _flag(name: str, default: str) -> bool:
    return getenv(name, default).lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://habitflow:habitflow@db:5432/habitflow")

    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  # 30 jours

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
    LOG_JSON = _flag("LOG_JSON", "false")

    # Nombre max de logs lus par habitude pour le calcul des streaks
    STREAK_LOOKBACK = int(getenv("STREAK_LOOKBACK", "365"))
    CELEBRATION_COOLDOWN_SECONDS = float(getenv("CELEBRATION_COOLDOWN_SECONDS", "5"))
    SEED_SAMPLE_DATA = _flag("SEED_SAMPLE_DATA", "true")


settings = Settings()
