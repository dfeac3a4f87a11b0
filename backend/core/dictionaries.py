import pathlib
from functools import lru_cache
from types import MappingProxyType

import yaml

ROOT = pathlib.Path(__file__).resolve().parents[2]
DICTIONARY_DIR = ROOT / "shared" / "dictionaries"


def _freeze(value):
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@lru_cache(maxsize=None)
def load_dictionary(name: str):
    """Load shared/dictionaries/<name>.yaml as read-only mappings and tuples."""
    data = yaml.safe_load((DICTIONARY_DIR / f"{name}.yaml").read_text(encoding="utf-8"))
    return _freeze(data)
