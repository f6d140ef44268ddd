import sys
from typing import Literal

from loguru import logger
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


EntropyWarningSuppression = Literal["NONE", "ALL", "SEEN", "BLIND"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="XKPASS_")

    # 78 bits ~ 12 random characters from mixed case, digits and symbols
    entropy_min_blind: int = 78
    # 52 bits ~ 8 random characters from the same alphabet
    entropy_min_seen: int = 52
    suppress_entropy_warnings: EntropyWarningSuppression = "NONE"
    log_level: str = "INFO"

    @field_validator("suppress_entropy_warnings", mode="before")
    @classmethod
    def _unknown_suppression_means_none(cls, value: object) -> str:
        if isinstance(value, str) and value.upper() in ("ALL", "SEEN", "BLIND"):
            return value.upper()
        return "NONE"

    @property
    def warn_blind(self) -> bool:
        return self.suppress_entropy_warnings not in ("ALL", "BLIND")

    @property
    def warn_seen(self) -> bool:
        return self.suppress_entropy_warnings not in ("ALL", "SEEN")


settings = Settings()


logger.remove()
logger.add(
    sys.stderr,
    level=settings.log_level,
    backtrace=True,
    diagnose=False,
)
