"""
IFSC Resolution Module

Validates IFSC codes against the branch registry and resolves them to the
owning bank. Many branches are sublet under another bank's IFSC, so the
owning bank code is found through a fallback chain:

1. exact match in the sublet table
2. prefix match in the custom-sublet table
3. the literal first four characters of the code

All operations are pure lookups over an immutable DataStore.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import threading

from .datastore import DataStore, get_datastore
from .errors import (
    InvalidBankCodeError, MalformedCodeError, SubletResolutionError,
    UnknownBankCodeError, UnknownBranchError
)
from .logging_config import get_logger, log_action


IFSC_LENGTH = 11
SEPARATOR_INDEX = 4
SEPARATOR = "0"
BANK_CODE_LENGTH = 4


@dataclass(frozen=True)
class BankDetails:
    """Canonical identity of a bank"""
    code: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class IFSCResolver:
    """Resolves IFSC codes over a loaded DataStore"""

    def __init__(self, store: DataStore):
        self.store = store
        self.logger = get_logger("ifsc.resolver")

    @staticmethod
    def is_well_formed(code: Any) -> bool:
        """Syntactic check only: 11 characters with '0' at index 4"""
        return (
            isinstance(code, str)
            and len(code) == IFSC_LENGTH
            and code[SEPARATOR_INDEX] == SEPARATOR
        )

    def validate(self, code: Any) -> bool:
        """
        Check that a code is a registered IFSC.

        The bank code and branch code are compared upper-cased, and the branch
        code is normalized the same way the registry was, so "BDBL0001934"
        matches a branch stored as 1934.
        """
        if not self.is_well_formed(code):
            return False
        bank_code = code[:BANK_CODE_LENGTH].upper()
        branch_code = code[SEPARATOR_INDEX + 1:].upper()
        return self.store.has_branch(bank_code, branch_code)

    def bank_code_exists(self, code: str) -> bool:
        """Check whether a bank code has an entry in the bank-name table"""
        return code in self.store.bank_names

    def _require_valid(self, code: Any) -> str:
        if not self.is_well_formed(code):
            raise MalformedCodeError(code)
        if not self.validate(code):
            raise UnknownBranchError(code)
        return code.upper()

    def _sublet_owner(self, ifsc: str) -> Optional[str]:
        owner = self.store.sublets.get(ifsc)
        if not owner:
            return None
        return owner[:BANK_CODE_LENGTH]

    def _custom_sublet_value(self, ifsc: str) -> str:
        for prefix, value in self.store.custom_sublet_order:
            if ifsc.startswith(prefix):
                return value
        raise SubletResolutionError(ifsc)

    def resolve_bank_code(self, ifsc_code: str) -> str:
        """
        Resolve the code of the bank that owns an IFSC.

        Args:
            ifsc_code: Full 11-character IFSC, any case

        Returns:
            Four-character bank code

        Raises:
            MalformedCodeError: If the code is not 11 characters with a '0' separator
            UnknownBranchError: If the branch is not registered
        """
        ifsc = self._require_valid(ifsc_code)

        owner = self._sublet_owner(ifsc)
        if owner:
            log_action(self.logger, "debug", f"resolved to {owner} via sublet",
                       action="resolve_bank_code", code=ifsc)
            return owner

        try:
            value = self._custom_sublet_value(ifsc)
        except SubletResolutionError:
            pass
        else:
            # Entries holding a display name instead of a bank code do not name an owner
            if len(value) == BANK_CODE_LENGTH:
                log_action(self.logger, "debug", f"resolved to {value} via custom sublet",
                           action="resolve_bank_code", code=ifsc)
                return value

        return ifsc[:BANK_CODE_LENGTH]

    def resolve_bank_name(self, code: str) -> str:
        """
        Resolve a bank name from either a bank code or a full IFSC.

        Raises:
            InvalidBankCodeError: If no table yields a name
        """
        if not isinstance(code, str):
            raise InvalidBankCodeError(code)

        name = self.store.bank_names.get(code)
        if name is not None:
            return name

        normalized = code.upper()
        name = self.store.bank_names.get(normalized)
        if name is not None:
            return name

        if not self.validate(normalized):
            raise InvalidBankCodeError(code)

        owner = self._sublet_owner(normalized)
        if owner:
            name = self.store.bank_names.get(owner)
            if name is not None:
                return name
            log_action(self.logger, "warning", f"sublet owner {owner} has no bank name",
                       action="resolve_bank_name", code=normalized)

        try:
            value = self._custom_sublet_value(normalized)
        except SubletResolutionError:
            pass
        else:
            # Custom-sublet values are either bank codes or display names
            return self.store.bank_names.get(value, value)

        name = self.store.bank_names.get(normalized[:BANK_CODE_LENGTH])
        if name is not None:
            return name
        raise InvalidBankCodeError(code)

    def get_bank_details_from_bank_code(self, code: str) -> BankDetails:
        """
        Raises:
            UnknownBankCodeError: If the bank code has no name
        """
        name = self.store.bank_names.get(code)
        if name is None:
            raise UnknownBankCodeError(code)
        return BankDetails(code=code, name=name)

    def get_bank_details_from_ifsc_code(self, ifsc_code: str) -> BankDetails:
        """
        Resolve the owning bank of an IFSC and return its details.

        Raises:
            InvalidCodeError: If the IFSC is malformed or not registered
            UnknownBankCodeError: If the owning bank code has no name
        """
        bank_code = self.resolve_bank_code(ifsc_code)
        return self.get_bank_details_from_bank_code(bank_code)

    def lookup(self, code: str) -> Dict[str, Any]:
        """Summary of everything known about an IFSC"""
        result: Dict[str, Any] = {
            "ifsc": code.upper() if isinstance(code, str) else code,
            "valid": self.validate(code),
            "bank_code": None,
            "bank_name": None,
            "sublet": False,
        }
        if not result["valid"]:
            return result

        ifsc = result["ifsc"]
        bank_code = self.resolve_bank_code(ifsc)
        result["bank_code"] = bank_code
        try:
            result["bank_name"] = self.resolve_bank_name(ifsc)
        except InvalidBankCodeError:
            log_action(self.logger, "warning", "registered IFSC has no bank name",
                       action="lookup", code=ifsc)
        result["sublet"] = bank_code != ifsc[:BANK_CODE_LENGTH]
        return result


_default_resolver: Optional[IFSCResolver] = None
_resolver_lock = threading.Lock()


def get_resolver() -> IFSCResolver:
    """Get the process-wide resolver over the default store"""
    global _default_resolver
    resolver = _default_resolver
    if resolver is not None:
        return resolver
    with _resolver_lock:
        if _default_resolver is None:
            _default_resolver = IFSCResolver(get_datastore())
        return _default_resolver


def is_well_formed(code: str) -> bool:
    return IFSCResolver.is_well_formed(code)


def validate(code: str) -> bool:
    return get_resolver().validate(code)


def bank_code_exists(code: str) -> bool:
    return get_resolver().bank_code_exists(code)


def resolve_bank_code(ifsc_code: str) -> str:
    return get_resolver().resolve_bank_code(ifsc_code)


def resolve_bank_name(code: str) -> str:
    return get_resolver().resolve_bank_name(code)


def get_bank_details_from_ifsc_code(ifsc_code: str) -> BankDetails:
    return get_resolver().get_bank_details_from_ifsc_code(ifsc_code)


def get_bank_details_from_bank_code(code: str) -> BankDetails:
    return get_resolver().get_bank_details_from_bank_code(code)
