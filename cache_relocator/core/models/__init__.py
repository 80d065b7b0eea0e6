"""
Domain models — descriptors, receipts, records and results.

    from cache_relocator.core.models import PackageManagerDescriptor, Catalog, VerificationResult
"""

from cache_relocator.core.models.descriptor import Catalog, PackageManagerDescriptor
from cache_relocator.core.models.migration import MigrationRecord
from cache_relocator.core.models.receipt import STAGES, StageReceipt
from cache_relocator.core.models.settings import Settings
from cache_relocator.core.models.verification import (
    ProbeReport,
    ProbeStatus,
    VerificationResult,
)

__all__ = [
    "STAGES",
    "Catalog",
    "MigrationRecord",
    "PackageManagerDescriptor",
    "ProbeReport",
    "ProbeStatus",
    "Settings",
    "StageReceipt",
    "VerificationResult",
]
