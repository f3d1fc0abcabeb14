# chain_tracker/config/settings.py

"""Central configuration for the chain_tracker service."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the chain_tracker service."""

    # --- Tracked wallets ---
    BASE_ADDRESS: str = os.getenv(
        "BASE_ADDRESS", "0x75f39d9Bff76d376F3960028d98F324aAbB6c5e6"
    )
    SOLANA_ADDRESS: str = os.getenv(
        "SOLANA_ADDRESS", "FeB1jqjCFKyQ2vVTPLgYmZu1yLvBWhsGoudP46fhhF8z"
    )

    # --- RPC endpoints ---
    BASE_RPC_URL: str = os.getenv("BASE_RPC_URL", "https://mainnet.base.org")
    SOLANA_RPC_URL: str = os.getenv(
        "SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com"
    )
    SOLANA_COMMITMENT: str = os.getenv("SOLANA_COMMITMENT", "confirmed")
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "15"))
    DEFAULT_HEADERS: dict[str, str] = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    # --- Recording ---
    RECORD_INTERVAL_MINUTES: int = int(
        os.getenv("RECORD_INTERVAL_MINUTES", "15")
    )
    TICK_TIMEOUT: float = float(os.getenv("TICK_TIMEOUT", "60"))

    # --- Query windows ---
    DEFAULT_HISTORY_HOURS: int = 24
    ACTIVITY_SHORT_WINDOW_HOURS: int = 24
    ACTIVITY_LONG_WINDOW_HOURS: int = 24 * 7

    # --- HTTP API ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "*").split(",")
        if o.strip()
    ]

    # --- Health ---
    HEALTH_TIMEOUT: int = 10            # Seconds per RPC check
    HEALTH_SLOW_MS: float = 5000.0      # Latency above this is "slow"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DB_PATH: Path = Path(
        os.getenv("DB_PATH", str(BASE_DIR / "analytics.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()  # stderr only
