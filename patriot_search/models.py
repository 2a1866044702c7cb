"""Core data models shared by the search reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Provenance(str, Enum):
    """Where a displayed result came from, strongest trust signal first."""

    PRIMARY = "primary"
    NEARBY_DATABASE = "nearby_database"
    CHAIN = "chain"
    EXTERNAL_UNLISTED = "external_unlisted"


class MatchReason(str, Enum):
    PLACE_ID = "place_id"
    NAME_AND_ADDRESS = "name_and_address"
    NAME_AND_PHONE = "name_and_phone"
    NONE = "none"


class DuplicateOutcome(str, Enum):
    DUPLICATE = "duplicate"
    NO_DUPLICATE = "no_duplicate"
    SKIPPED = "skipped"


@dataclass(slots=True)
class BusinessRecord:
    """A business listed in the internal directory, as returned by the search API."""

    id: str
    name: str
    address1: str = ""
    address2: Optional[str] = None
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: Optional[str] = None
    chain_id: Optional[str] = None
    chain_name: Optional[str] = None
    external_place_id: Optional[str] = None
    coordinates: Optional[Tuple[float, float]] = None
    category: Optional[str] = None
    website: Optional[str] = None
    incentives: List[Dict[str, Any]] = field(default_factory=list)
    is_external: bool = False
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def has_incentives(self) -> bool:
        return bool(self.incentives)


@dataclass(frozen=True)
class ExternalPlace:
    """Point of interest returned by the mapping provider; never persisted."""

    external_id: Optional[str]
    display_name: Optional[str]
    formatted_address: str = ""
    phone_number: Optional[str] = None
    website_url: Optional[str] = None
    location: Optional[Tuple[float, float]] = None
    street_address: str = ""
    city: str = ""
    state_code: str = ""
    postal_code: str = ""
    types: Tuple[str, ...] = ()
    category: str = ""


@dataclass(frozen=True)
class MatchDecision:
    matched: bool
    reason: MatchReason = MatchReason.NONE


@dataclass(frozen=True)
class ReconciledResult:
    """A classified search result ready for display."""

    record: Union[BusinessRecord, ExternalPlace]
    provenance: Provenance
    duplicate_of_internal_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.duplicate_of_internal_id and self.provenance is Provenance.EXTERNAL_UNLISTED:
            raise ValueError("a place matched to an internal record cannot be presented as external_unlisted")


@dataclass
class DuplicateCheckResult:
    outcome: DuplicateOutcome
    match: Optional[ReconciledResult] = None
    reason: MatchReason = MatchReason.NONE
    prefill: Optional[Dict[str, Any]] = None
    # Parsed place, kept for display even when the check is skipped.
    place: Optional[ExternalPlace] = None

    @property
    def is_duplicate(self) -> bool:
        return self.outcome is DuplicateOutcome.DUPLICATE


@dataclass
class SearchOutcome:
    results: List[ReconciledResult]
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def with_incentives(self) -> List[ReconciledResult]:
        # Display filter only; provenance is untouched.
        return [
            result
            for result in self.results
            if isinstance(result.record, BusinessRecord) and result.record.has_incentives
        ]
