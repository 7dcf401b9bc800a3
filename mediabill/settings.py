from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MEDIABILL_", extra="ignore")

    log_level: str = "INFO"
    log_json: bool = False

    budget_tolerance: Decimal = Decimal("2.00")
    currency_symbol: str = "$"

    snapshot_backend: str = "memory"
    snapshot_local_path: str = "./snapshots"


settings = Settings()
