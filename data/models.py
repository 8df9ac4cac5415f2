"""Payloads returned by the ownCloud remote client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserInfo:
    id: str
    display_name: str
    email: str | None = None


@dataclass(frozen=True)
class RemoteQuota:
    free: int
    used: int
    total: int
    relative: float


@dataclass(frozen=True)
class RemoteAvatar:
    data: bytes
    mime_type: str
    etag: str

    def __repr__(self) -> str:
        return f"RemoteAvatar(mime_type={self.mime_type!r}, etag={self.etag!r}, size={len(self.data)})"
