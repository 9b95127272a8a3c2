from decimal import Decimal
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./groupledger.db"
    JWT_SECRET: str = "groupledger-dev-secret"
    JWT_ALGO: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # stored balances may drift from a history replay by at most this much
    BALANCE_TOLERANCE: Decimal = Decimal("0.01")

    LOG_LEVEL: str = "INFO"
    DB_CONNECT_RETRIES: int = 5
    CREATE_TABLES: bool = True
    DB_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT: float = 15.0

    class Config:
        env_file = ".env"

settings = Settings()
