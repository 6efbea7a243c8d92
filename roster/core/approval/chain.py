"""Approval chain resolution.

The chain is an explicit table built once from the position reference data:

- ``approvers``: approval level -> id of the position that decides at it
- ``entry_levels``: requester position id -> level a new request starts at

Position names are matched against the rules below only while building the
table. A missing approver position fails the build instead of producing
requests that no approver can see.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple
from uuid import UUID

from .errors import ChainConfigurationError, InvalidApprovalLevelError
from .states import ApprovalLevel

logger = logging.getLogger(__name__)

Matcher = Callable[[str], bool]


class PositionLike(Protocol):
    id: UUID
    name: str


def contains(token: str) -> Matcher:
    return lambda name: token in name


def contains_ignore_case(token: str) -> Matcher:
    lowered = token.lower()
    return lambda name: lowered in name.lower()


def equals(token: str) -> Matcher:
    return lambda name: name == token


@dataclass(frozen=True)
class EntryRule:
    """Requesters whose position matches start at ``level``."""
    match: Matcher
    level: ApprovalLevel
    label: str


@dataclass(frozen=True)
class ApproverRule:
    """The first position matching decides at ``level``."""
    match: Matcher
    level: ApprovalLevel
    label: str


# Evaluated in order, first match wins.
ENTRY_RULES: List[EntryRule] = [
    EntryRule(contains("SOS"), ApprovalLevel.GSL, "SOS"),
    EntryRule(contains("GSL"), ApprovalLevel.KOORDINATOR, "GSL"),
    EntryRule(contains_ignore_case("koordinator"), ApprovalLevel.MANAGER, "Koordinator"),
]

# Requesters matching no entry rule, or holding no position at all.
DEFAULT_ENTRY_LEVEL = ApprovalLevel.MANAGER

APPROVER_RULES: List[ApproverRule] = [
    ApproverRule(contains("GSL"), ApprovalLevel.GSL, "position containing 'GSL'"),
    ApproverRule(contains("Koordinator"), ApprovalLevel.KOORDINATOR, "position containing 'Koordinator'"),
    ApproverRule(equals("Manager"), ApprovalLevel.MANAGER, "position named 'Manager'"),
]


@dataclass(frozen=True)
class ApprovalChain:
    """Resolved approval chain: who decides at each level, and where requests start."""

    approvers: Mapping[int, UUID]
    entry_levels: Mapping[UUID, int] = field(default_factory=dict)

    def approver_for(self, level: int) -> UUID:
        """Position id deciding at ``level``."""
        try:
            return self.approvers[level]
        except KeyError:
            raise InvalidApprovalLevelError(level) from None

    def entry_for(self, position_id: Optional[UUID]) -> Tuple[UUID, int]:
        """Resolve (first approver position id, starting level) for a requester position."""
        level = self.entry_levels.get(position_id, int(DEFAULT_ENTRY_LEVEL))
        return self.approver_for(level), level

    def level_of(self, position_id: Optional[UUID]) -> Optional[int]:
        """Level at which ``position_id`` decides, or None if it approves nothing."""
        for level, approver_id in self.approvers.items():
            if approver_id == position_id:
                return level
        return None

    @property
    def manager_position_id(self) -> UUID:
        return self.approver_for(ApprovalLevel.MANAGER)

    def references(self, position_id: UUID) -> bool:
        """Check if the chain routes decisions to ``position_id``."""
        return position_id in self.approvers.values()


def build_approval_chain(positions: Iterable[PositionLike]) -> ApprovalChain:
    """
    Build the chain table from the position reference set.

    Args:
        positions: All known positions, in a stable order (first match wins)

    Returns:
        The resolved ApprovalChain

    Raises:
        ChainConfigurationError: If a level has no matching approver position
    """
    positions = list(positions)
    approvers: Dict[int, UUID] = {}
    missing = []

    for rule in APPROVER_RULES:
        matches = [p for p in positions if rule.match(p.name)]
        if not matches:
            missing.append(rule.label)
            continue
        if len(matches) > 1:
            logger.warning(
                "Several positions match the level %d approver (%s); using %r",
                rule.level, ", ".join(p.name for p in matches), matches[0].name,
            )
        approvers[int(rule.level)] = matches[0].id

    if missing:
        raise ChainConfigurationError(details=f"No {' / '.join(missing)} found")

    entry_levels: Dict[UUID, int] = {}
    for position in positions:
        for rule in ENTRY_RULES:
            if rule.match(position.name):
                entry_levels[position.id] = int(rule.level)
                break

    return ApprovalChain(approvers=approvers, entry_levels=entry_levels)


class ApprovalChainProvider:
    """
    Caches the resolved chain between requests.

    Call ``invalidate()`` after any change to position master data.
    """

    def __init__(self):
        self._chain: Optional[ApprovalChain] = None
        self._lock = threading.Lock()

    def get(self, load_positions: Callable[[], Iterable[PositionLike]]) -> ApprovalChain:
        with self._lock:
            if self._chain is None:
                self._chain = build_approval_chain(load_positions())
                logger.info("Approval chain resolved: %s", dict(self._chain.approvers))
            return self._chain

    def invalidate(self) -> None:
        with self._lock:
            self._chain = None


chain_provider = ApprovalChainProvider()


def check_position_change(before: Iterable[PositionLike], after: Iterable[PositionLike]) -> None:
    """
    Verify that a change to position data keeps the chain buildable.

    Position data that is already incomplete (e.g. during initial setup) is
    not held to this.

    Raises:
        ChainConfigurationError: If ``before`` forms a chain and ``after`` does not
    """
    try:
        build_approval_chain(before)
    except ChainConfigurationError:
        return
    build_approval_chain(after)
