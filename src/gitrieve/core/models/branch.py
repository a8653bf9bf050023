"""Branch reconciliation state."""

from enum import Enum

from pydantic import BaseModel


class BranchStatus(str, Enum):
    """Outcome of reconciling one branch."""

    UP_TO_DATE = "up_to_date"
    FAST_FORWARDED = "fast_forwarded"
    CREATED = "created"
    FAILED = "failed"


class BranchState(BaseModel):
    """Reconciliation state for a single remote branch."""

    remote_ref: str
    local_name: str
    existed: bool
    is_default: bool = False
    status: BranchStatus = BranchStatus.UP_TO_DATE
    tip: str | None = None

    @property
    def changed(self) -> bool:
        return self.status in (BranchStatus.CREATED, BranchStatus.FAST_FORWARDED)
