"""
config/settings.py
──────────────────
Application configuration loaded from environment variables.

All cadences are in seconds of scheduler time (the "time units" of the
simulator, predictor and countdown timers).
"""
import os
from dataclasses import dataclass


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Settings:
    # Server
    DEBUG: bool = _flag("DEBUG", "true")
    PORT: int = int(os.getenv("PORT", "8050"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # Database (SQLite path; ":memory:" for tests)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "grid_monitor.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Simulation
    SIMULATION_SEED: int = int(os.getenv("SIMULATION_SEED", "42"))
    READING_INTERVAL_S: float = float(os.getenv("READING_INTERVAL_S", "3"))
    COUNTDOWN_TICK_S: float = float(os.getenv("COUNTDOWN_TICK_S", "1"))
    AUTO_FAULT_MIN_DELAY_S: float = float(os.getenv("AUTO_FAULT_MIN_DELAY_S", "15"))
    AUTO_FAULT_MAX_DELAY_S: float = float(os.getenv("AUTO_FAULT_MAX_DELAY_S", "45"))

    # Prediction engine
    PREDICTION_INTERVAL_S: float = float(os.getenv("PREDICTION_INTERVAL_S", "30"))
    DETECTOR_WINDOW: int = int(os.getenv("DETECTOR_WINDOW", "5"))
    MIN_READINGS_PER_SITE: int = int(os.getenv("MIN_READINGS_PER_SITE", "3"))
    PREDICTION_FETCH_LIMIT: int = int(os.getenv("PREDICTION_FETCH_LIMIT", "100"))

    # Maintenance
    ALLOW_DUPLICATE_RECOMMENDATIONS: bool = _flag("ALLOW_DUPLICATE_RECOMMENDATIONS", "true")

    # Evaluation
    EVALUATION_FETCH_LIMIT: int = int(os.getenv("EVALUATION_FETCH_LIMIT", "200"))

    # Dashboard refresh intervals in milliseconds
    UI_REFRESH_MS: int = int(os.getenv("UI_REFRESH_MS", "3000"))
    TICK_INTERVAL_MS: int = int(os.getenv("TICK_INTERVAL_MS", "1000"))


settings = Settings()
