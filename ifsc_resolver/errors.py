"""
Error Types Module

Exceptions raised by the resolver. All of them are recoverable lookup
failures except DataLoadError, which aborts initialization.
"""

from typing import Optional


class IFSCError(Exception):
    """Base class for all IFSC resolver errors"""


class InvalidCodeError(IFSCError, ValueError):
    """The code is not a registered IFSC"""

    def __init__(self, code: str, reason: str = "invalid IFSC code"):
        self.code = code
        self.reason = reason
        super().__init__(f"{reason}: {code!r}")


class MalformedCodeError(InvalidCodeError):
    """Wrong length or missing '0' separator"""

    def __init__(self, code: str):
        super().__init__(code, "malformed IFSC code")


class UnknownBranchError(InvalidCodeError):
    """Well-formed code whose branch is not in the registry"""

    def __init__(self, code: str):
        super().__init__(code, "unknown IFSC branch")


class InvalidBankCodeError(IFSCError, ValueError):
    """No bank name could be resolved for the code"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"invalid bank code: {code!r}")


class UnknownBankCodeError(IFSCError, LookupError):
    """Bank code has no entry in the bank-name table"""

    def __init__(self, bank_code: str):
        self.bank_code = bank_code
        super().__init__(f"unknown bank code: {bank_code!r}")


class SubletResolutionError(IFSCError, LookupError):
    """No custom-sublet prefix matched; only used inside the resolver"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"no custom sublet for {code!r}")


class DataLoadError(IFSCError, RuntimeError):
    """One of the static tables could not be loaded"""

    def __init__(self, file_name: str, message: str, cause: Optional[BaseException] = None):
        self.file_name = file_name
        self.cause = cause
        super().__init__(f"there is some error in {file_name}: {message}")
