"""Tagged result of a profile sync pass."""

from dataclasses import dataclass
from enum import Enum
from sync.models import UserProfile


class SyncError(str, Enum):
    PROFILE_UNAVAILABLE = "profile_unavailable"
    QUOTA_UNAVAILABLE = "quota_unavailable"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class SyncSuccess:
    profile: UserProfile

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class SyncFailure:
    error: SyncError
    cause: BaseException | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def profile(self) -> None:
        return None


SyncResult = SyncSuccess | SyncFailure
