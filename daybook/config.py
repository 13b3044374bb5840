import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_data_dir() -> Path:
    return Path.home() / ".config" / "daybook"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    profile: str = "mood"
    tz_name: Optional[str] = None
    log_level: str = "INFO"

    @property
    def tz(self) -> Optional[tzinfo]:
        return ZoneInfo(self.tz_name) if self.tz_name else None

    @property
    def storage_key(self) -> str:
        return self.profile


def load_settings(env: Optional[dict] = None) -> Settings:
    env = os.environ if env is None else env

    data_dir = env.get("DAYBOOK_DATA_DIR")
    tz_name = env.get("DAYBOOK_TZ") or None
    if tz_name:
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"DAYBOOK_TZ={tz_name!r} is not an IANA timezone name")

    return Settings(
        data_dir=Path(data_dir).expanduser().resolve() if data_dir else default_data_dir(),
        profile=env.get("DAYBOOK_PROFILE", "mood"),
        tz_name=tz_name,
        log_level=env.get("DAYBOOK_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
