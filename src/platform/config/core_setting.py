from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Cinema Booking System'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ALGORITHM: str = 'HS256'

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'cinema_booking'

    # Optional read replica (seat ledger reads); falls back to primary
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # SQLAlchemy pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_REPLICA_SERVER}:{self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT}'
            f'/{self.POSTGRES_DB}'
        )

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''
    REDIS_DECODE_RESPONSES: bool = True

    # Kvrocks Connection Pool Configuration
    KVROCKS_POOL_MAX_CONNECTIONS: int = 50
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # seconds

    # Seat map (one static grid for every showtime)
    SEAT_MAP_ROWS: str = 'ABCDEFGH'
    SEAT_MAP_SEATS_PER_ROW: int = 12
    MAX_SEATS_PER_BOOKING: int = 10

    # Pricing
    SERVICE_SURCHARGE_RATE: Decimal = Decimal('0.05')
    AMOUNT_TOLERANCE: int = 1

    # Payment gateway
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0
    MOCK_GATEWAY_DELAY_SECONDS: float = 1.5
    MOCK_GATEWAY_SUCCESS_RATE: float = 0.95

    # Finalize serialization (per-showtime lock in Kvrocks)
    FINALIZE_LOCK_TTL_SECONDS: float = 30.0  # must exceed the gateway timeout
    FINALIZE_LOCK_WAIT_SECONDS: float = 15.0
    FINALIZE_LOCK_RETRY_INTERVAL_SECONDS: float = 0.05

    # Client polling
    SEAT_LEDGER_POLL_INTERVAL_SECONDS: float = 5.0
    API_BASE_URL: str = 'http://localhost:8000'

    # Pending booking reaper (disabled when TTL is unset)
    PENDING_BOOKING_TTL_SECONDS: Optional[int] = None
    PENDING_BOOKING_REAPER_INTERVAL_SECONDS: float = 60.0


settings = Settings()  # type: ignore
