"""
IFSC Resolver

Validates Indian Financial System Codes and resolves them to the owning bank,
following sublet and custom-sublet relationships.
"""

__version__ = "1.0.0"

from .datastore import BranchCode, DataStore, get_datastore, load_datastore, normalize_branch_code
from .errors import (
    DataLoadError, IFSCError, InvalidBankCodeError, InvalidCodeError,
    MalformedCodeError, SubletResolutionError, UnknownBankCodeError, UnknownBranchError
)
from .resolver import (
    BankDetails, IFSCResolver, bank_code_exists, get_bank_details_from_bank_code,
    get_bank_details_from_ifsc_code, get_resolver, is_well_formed, resolve_bank_code,
    resolve_bank_name, validate
)
