from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=Path(__file__).parent.parent / ".env")

    db_path: Path = Path(__file__).parent.parent / "orders.db"
    timezone: str = ""  # IANA, например "Asia/Dhaka"; пусто — локальная зона системы
    currency_symbol: str = "৳"
    log_level: str = "INFO"
    log_format: str = "json"  # "json" | "text"
    log_to_file: bool = False
    log_dir: Path = Path(__file__).parent.parent / "logs"

    @property
    def tzinfo(self) -> tzinfo | None:
        """None означает локальную зону системы"""
        if not self.timezone:
            return None
        return ZoneInfo(self.timezone)

    def check_required(self) -> None:
        """Проверка переменных при старте"""
        if self.timezone:
            try:
                ZoneInfo(self.timezone)
            except (KeyError, ValueError) as e:
                raise ValueError(f"Неизвестная TIMEZONE: {self.timezone}") from e


settings = Settings()
