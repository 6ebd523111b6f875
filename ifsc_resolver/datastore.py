"""
Static Data Store Module

Holds the four read-only tables the resolver works over: the branch registry,
bank names, sublets and custom sublets. Tables are loaded once from JSON and
never mutated afterwards, so a loaded DataStore can be shared across threads
without locking.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union
import json
import re
import threading

from .config import IFSCConfig, get_config
from .errors import DataLoadError
from .logging_config import get_logger, log_action


logger = get_logger("ifsc.datastore")

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1


def normalize_branch_code(value: Union[int, str]) -> str:
    """
    Canonical string form of a branch code.

    A value that parses as a base-10 integer is rewritten as its decimal
    representation, so "001934", "1934" and 1934 all become "1934". Anything
    else is kept as-is.
    """
    if isinstance(value, bool):
        raise TypeError("branch code must be an int or a string, not bool")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        raise TypeError(f"branch code must be an int or a string, not {type(value).__name__}")

    if _INTEGER_RE.match(value):
        number = int(value)
        if _INT32_MIN <= number <= _INT32_MAX:
            return str(number)
    return value


@dataclass(frozen=True)
class BranchCode:
    """
    Normalized branch code. Two codes are equal when their canonical
    strings are equal, whatever their source representation.
    """
    value: str

    def __post_init__(self):
        object.__setattr__(self, 'value', normalize_branch_code(self.value))

    def __str__(self) -> str:
        return self.value


# Table names used in load errors and logs
IFSC_TABLE = "IFSC.json"
BANKNAMES_TABLE = "banknames.json"
SUBLET_TABLE = "sublet.json"
CUSTOM_SUBLETS_TABLE = "custom-sublets.json"

BANK_CODE_LENGTH = 4


def _check_string_map(raw: Any, table: str) -> Dict[str, str]:
    if not isinstance(raw, Mapping):
        raise DataLoadError(table, f"expected an object, got {type(raw).__name__}")
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise DataLoadError(table, f"entry {key!r} must map a string to a string")
    return dict(raw)


def _build_branch_registry(raw: Any, table: str) -> Dict[str, FrozenSet[BranchCode]]:
    if not isinstance(raw, Mapping):
        raise DataLoadError(table, f"expected an object, got {type(raw).__name__}")

    registry: Dict[str, FrozenSet[BranchCode]] = {}
    for bank_code, branches in raw.items():
        if not isinstance(bank_code, str):
            raise DataLoadError(table, f"bank code {bank_code!r} must be a string")
        if not isinstance(branches, (list, tuple, set, frozenset)):
            raise DataLoadError(table, f"branches of {bank_code} must be an array")
        try:
            registry[bank_code] = frozenset(
                b if isinstance(b, BranchCode) else BranchCode(b) for b in branches
            )
        except TypeError as e:
            raise DataLoadError(table, f"bad branch code under {bank_code}: {e}", e) from e
    return registry


def _check_sublet_owners(sublets: Mapping[str, str]) -> None:
    for ifsc, owner in sublets.items():
        if len(owner) < BANK_CODE_LENGTH:
            raise DataLoadError(SUBLET_TABLE, f"owner {owner!r} of {ifsc} is shorter than a bank code")


def _custom_sublet_order(custom_sublets: Mapping[str, str]) -> Tuple[Tuple[str, str], ...]:
    # Longest prefix first, then by key, so overlapping prefixes resolve the same way every run
    return tuple(sorted(custom_sublets.items(), key=lambda item: (-len(item[0]), item[0])))


@dataclass(frozen=True)
class DataStore:
    """
    The four immutable lookup tables.

    Tables are checked, copied and frozen on construction. Branch values may
    be ints or strings and are normalized to BranchCode.

    Raises:
        DataLoadError: If any table has the wrong shape
    """
    branches: Mapping[str, FrozenSet[BranchCode]]
    bank_names: Mapping[str, str]
    sublets: Mapping[str, str]
    custom_sublets: Mapping[str, str]
    custom_sublet_order: Tuple[Tuple[str, str], ...] = field(init=False, repr=False)

    def __post_init__(self):
        registry = _build_branch_registry(self.branches, IFSC_TABLE)
        names = _check_string_map(self.bank_names, BANKNAMES_TABLE)
        sublet_map = _check_string_map(self.sublets, SUBLET_TABLE)
        _check_sublet_owners(sublet_map)
        custom_map = _check_string_map(self.custom_sublets, CUSTOM_SUBLETS_TABLE)

        object.__setattr__(self, 'branches', MappingProxyType(registry))
        object.__setattr__(self, 'bank_names', MappingProxyType(names))
        object.__setattr__(self, 'sublets', MappingProxyType(sublet_map))
        object.__setattr__(self, 'custom_sublets', MappingProxyType(custom_map))
        object.__setattr__(self, 'custom_sublet_order', _custom_sublet_order(custom_map))

    @classmethod
    def from_mappings(cls, branches: Mapping[str, Any], bank_names: Mapping[str, str],
                      sublets: Mapping[str, str], custom_sublets: Mapping[str, str]) -> 'DataStore':
        """Build a store from in-memory tables, e.g. decoded JSON"""
        return cls(branches, bank_names, sublets, custom_sublets)

    def has_branch(self, bank_code: str, branch_code: str) -> bool:
        """Check whether a branch is registered under a bank code"""
        branches = self.branches.get(bank_code)
        if branches is None:
            return False
        return BranchCode(branch_code) in branches

    def bank_count(self) -> int:
        return len(self.bank_names)

    def branch_count(self) -> int:
        return sum(len(b) for b in self.branches.values())

    def stats(self) -> Dict[str, int]:
        """Table sizes"""
        return {
            "bank_codes": len(self.branches),
            "branches": self.branch_count(),
            "bank_names": self.bank_count(),
            "sublets": len(self.sublets),
            "custom_sublets": len(self.custom_sublets),
        }


def _read_json(path: Path, table: str) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DataLoadError(table, f"file not found at {path}", e) from e
    except json.JSONDecodeError as e:
        raise DataLoadError(table, f"invalid JSON: {e}", e) from e
    except OSError as e:
        raise DataLoadError(table, str(e), e) from e


def load_datastore(data_dir: Optional[Union[str, Path]] = None,
                   config: Optional[IFSCConfig] = None) -> DataStore:
    """
    Load all four tables from JSON files.

    Loading is all-or-nothing: the first failing table aborts the load.

    Args:
        data_dir: Directory holding the JSON files; defaults to the configured
            directory or the bundled data
        config: Configuration supplying file names

    Returns:
        Loaded DataStore

    Raises:
        DataLoadError: If any file is missing, unreadable or malformed
    """
    config = config or get_config()
    directory = Path(data_dir) if data_dir is not None else config.resolved_data_dir()

    try:
        branches = _read_json(directory / config.ifsc_file, IFSC_TABLE)
        bank_names = _read_json(directory / config.banknames_file, BANKNAMES_TABLE)
        sublets = _read_json(directory / config.sublet_file, SUBLET_TABLE)
        custom_sublets = _read_json(directory / config.custom_sublets_file, CUSTOM_SUBLETS_TABLE)
        store = DataStore.from_mappings(branches, bank_names, sublets, custom_sublets)
    except DataLoadError as e:
        log_action(logger, "error", str(e), action="load_tables", table=e.file_name)
        raise

    log_action(logger, "info", f"IFSC tables loaded from {directory}",
               action="load_tables", stats=store.stats())
    return store


_default_store: Optional[DataStore] = None
_default_lock = threading.Lock()


def get_datastore() -> DataStore:
    """
    Get the process-wide store, loading it on first use.

    Concurrent first calls are serialized so no caller ever sees a partially
    loaded store. A failed load leaves nothing cached and is retried on the
    next call.
    """
    global _default_store
    store = _default_store
    if store is not None:
        return store
    with _default_lock:
        if _default_store is None:
            _default_store = load_datastore()
        return _default_store
