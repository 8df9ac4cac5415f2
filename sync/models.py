"""Account and user profile data classes."""

from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class Account:
    """One authenticated server connection."""
    name: str
    server_url: str
    username: str

    @classmethod
    def for_server(cls, username: str, server_url: str) -> "Account":
        """Build an account named ``user@host[:port][/path]``."""
        parsed = urlparse(server_url.rstrip("/"))
        location = parsed.netloc or parsed.path
        if parsed.netloc and parsed.path:
            location += parsed.path
        return cls(name=f"{username}@{location}", server_url=server_url.rstrip("/"), username=username)


@dataclass(frozen=True)
class UserQuota:
    available: int
    relative: float
    total: int
    used: int


@dataclass(frozen=True)
class UserAvatar:
    cache_key: str
    mime_type: str
    etag: str


@dataclass
class UserProfile:
    """Identity, quota and avatar of the user behind an account.

    Quota and avatar are attached once while the profile is assembled
    and are not mutated afterwards.
    """
    account_name: str
    user_id: str
    display_name: str
    email: str | None = None
    quota: UserQuota | None = None
    avatar: UserAvatar | None = None
