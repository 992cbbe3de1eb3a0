from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # App Info
    app_name: str = "POS Ledger API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./posledger.db"

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000"]

    # Ledger
    currency_scale: int = Field(default=2, description="Decimales para montos de moneda")
    default_payment_method: str = Field(default="CASH", description="Método de pago por defecto")

    # Mercado Libre: sincronización de stock
    marketplace_notify_url: Optional[str] = Field(
        default=None,
        description="URL que recibe las actualizaciones de stock para Mercado Libre"
    )
    marketplace_notify_timeout: float = Field(default=5.0, description="Timeout en segundos")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

settings = Settings()
