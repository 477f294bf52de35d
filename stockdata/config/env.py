from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DataConfig:
    data_dir: Path
    ratios_file: str = "ratios_by_co_code.json"
    ohlc_file: str = "ohlc_by_co_code.json"

    @property
    def ratios_path(self) -> Path:
        return self.data_dir / self.ratios_file

    @property
    def ohlc_path(self) -> Path:
        return self.data_dir / self.ohlc_file


def get_data_config() -> DataConfig:
    return DataConfig(
        data_dir=Path(os.getenv("DATA_DIR", "./data")).resolve(),
        ratios_file=os.getenv("RATIOS_FILE", "ratios_by_co_code.json"),
        ohlc_file=os.getenv("OHLC_FILE", "ohlc_by_co_code.json"),
    )


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    timeframe_strict: bool = True  # reject unknown timeframe tokens with 400


def get_server_config() -> ServerConfig:
    return ServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        environment=os.getenv("APP_ENV", "development"),
        timeframe_strict=_flag("TIMEFRAME_STRICT", "1"),
    )


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    log_dir: Optional[str] = None


def get_log_config() -> LogConfig:
    return LogConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), log_dir=os.getenv("LOG_DIR") or None)
