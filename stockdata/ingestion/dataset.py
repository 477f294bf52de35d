from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
import json

from stockdata.config.env import DataConfig, get_data_config
from stockdata.utils.logger import setup_logger

logger = setup_logger(__name__)

Series = Tuple[Mapping[str, Any], ...]


class DatasetError(RuntimeError):
    """The static dataset could not be read or has the wrong shape."""


def _freeze(by_code: Dict[str, List[Dict[str, Any]]]) -> Mapping[str, Series]:
    return MappingProxyType({
        str(code): tuple(MappingProxyType(dict(r)) for r in rows)
        for code, rows in by_code.items()
    })


@dataclass(frozen=True)
class Dataset:
    ratios: Mapping[str, Series] = field(default_factory=lambda: MappingProxyType({}))
    ohlc: Mapping[str, Series] = field(default_factory=lambda: MappingProxyType({}))

    @staticmethod
    def from_dicts(ratios: Dict[str, List[Dict[str, Any]]], ohlc: Dict[str, List[Dict[str, Any]]]) -> "Dataset":
        return Dataset(ratios=_freeze(ratios), ohlc=_freeze(ohlc))

    def ratio_codes(self) -> List[str]:
        return list(self.ratios.keys())

    def ohlc_codes(self) -> List[str]:
        return list(self.ohlc.keys())


def load_json(path: str | Path) -> Dict[str, List[Dict[str, Any]]]:
    """Read a `{co_code: [record, ...]}` JSON file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DatasetError(f"data file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"invalid JSON in {p}: {e}") from e
    if not isinstance(data, dict):
        raise DatasetError(f"{p.name}: expected an object keyed by company code")
    for code, rows in data.items():
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise DatasetError(f"{p.name}: company {code} must map to a list of records")
    return data


def load_dataset(cfg: Optional[DataConfig] = None) -> Dataset:
    cfg = cfg or get_data_config()
    ds = Dataset.from_dicts(load_json(cfg.ratios_path), load_json(cfg.ohlc_path))
    logger.info("Loaded dataset from %s: ratios=%d companies, ohlc=%d companies",
                cfg.data_dir, len(ds.ratios), len(ds.ohlc))
    return ds
