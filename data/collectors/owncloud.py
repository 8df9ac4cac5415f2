"""ownCloud remote client: user info (OCS), quota (WebDAV) and avatar."""

import xml.etree.ElementTree as ET
from urllib.parse import quote
import aiohttp
import orjson
import structlog
from data.collectors.base import BaseCollector, RemoteError
from data.models import RemoteAvatar, RemoteQuota, UserInfo
from config.constants import (
    AVATAR_PATH,
    DAV_FILES_PATH,
    DAV_NAMESPACE,
    OCS_SUCCESS_CODES,
    OCS_USER_PATH,
    QUOTA_PROPFIND_BODY,
    STATUS_PATH,
)

log = structlog.get_logger(__name__)

_DAV = f"{{{DAV_NAMESPACE}}}"


def parse_user_info(body: bytes) -> UserInfo:
    """Read the ``ocs.data`` block of a cloud/user response."""
    try:
        payload = orjson.loads(body)
        ocs = payload["ocs"]
        status = int(ocs["meta"]["statuscode"])
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise RemoteError(200, f"Malformed OCS user response: {e}") from e

    if status not in OCS_SUCCESS_CODES:
        raise RemoteError(status, f"OCS status {status}: {ocs['meta'].get('message', '')}")

    data = ocs.get("data") or {}
    if not isinstance(data, dict):
        raise RemoteError(status, f"OCS user data is a {type(data).__name__}, expected an object")
    user_id = data.get("id")
    if not user_id:
        raise RemoteError(status, "OCS user response has no id")
    return UserInfo(
        id=user_id,
        display_name=data.get("display-name") or data.get("displayname") or user_id,
        email=data.get("email") or None,
    )


def compute_quota(available: int, used: int) -> RemoteQuota:
    """Derive total and relative usage from the two WebDAV quota properties.

    Negative ``available`` values are server sentinels (pending, unknown,
    unlimited); total and relative are reported as zero for them.
    """
    if available < 0:
        return RemoteQuota(free=available, used=used, total=0, relative=0.0)
    total = available + used
    relative = round(used * 100 / total, 2) if total > 0 else 0.0
    return RemoteQuota(free=available, used=used, total=total, relative=relative)


def parse_quota(body: bytes) -> RemoteQuota:
    """Read quota properties from a PROPFIND multistatus response."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise RemoteError(207, f"Malformed multistatus: {e}") from e

    available: int | None = None
    used: int | None = None
    for propstat in root.iter(f"{_DAV}propstat"):
        status = propstat.findtext(f"{_DAV}status", default="")
        if " 200 " not in f"{status} ":
            continue
        prop = propstat.find(f"{_DAV}prop")
        if prop is None:
            continue
        available_text = prop.findtext(f"{_DAV}quota-available-bytes")
        used_text = prop.findtext(f"{_DAV}quota-used-bytes")
        try:
            if available_text:
                available = int(float(available_text))
            if used_text:
                used = int(float(used_text))
        except ValueError as e:
            raise RemoteError(207, f"Non-numeric quota property: {e}") from e

    if available is None or used is None:
        raise RemoteError(207, "Quota properties missing from multistatus")
    return compute_quota(available, used)


class OwnCloudCollector(BaseCollector):
    api_name = "owncloud"

    def __init__(self, server_url: str, username: str, password: str = "", token: str = "") -> None:
        super().__init__()
        self.server_url = server_url.rstrip("/")
        self._username = username
        self._password = password
        self._token = token

    def _auth(self) -> aiohttp.BasicAuth | None:
        if self._token:
            return None
        return aiohttp.BasicAuth(self._username, self._password)

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def health_check(self) -> bool:
        try:
            resp = await self._request("GET", f"{self.server_url}{STATUS_PATH}")
            return bool(orjson.loads(resp.body).get("installed"))
        except Exception:
            return False

    async def get_user_info(self) -> UserInfo:
        """Get id, display name and email of the authenticated user."""
        resp = await self._request(
            "GET",
            f"{self.server_url}{OCS_USER_PATH}",
            params={"format": "json"},
            headers={"OCS-APIRequest": "true", "Accept": "application/json"},
        )
        info = parse_user_info(resp.body)
        log.debug("user_info_received", user_id=info.id)
        return info

    async def get_user_quota(self, user_id: str) -> RemoteQuota:
        """Get storage quota of the user's root folder."""
        resp = await self._request(
            "PROPFIND",
            f"{self.server_url}{DAV_FILES_PATH}/{quote(user_id)}/",
            headers={"Depth": "0", "Content-Type": "application/xml; charset=utf-8"},
            data=QUOTA_PROPFIND_BODY,
        )
        return parse_quota(resp.body)

    async def get_avatar(self, user_id: str, dimension: int, etag: str | None = None) -> RemoteAvatar:
        """Download the avatar at ``dimension`` pixels.

        Raises NotModifiedError when ``etag`` still matches, NotFoundError
        when the user has no avatar.
        """
        headers = {}
        if etag:
            headers["If-None-Match"] = f'"{etag}"'
        resp = await self._request(
            "GET",
            f"{self.server_url}{AVATAR_PATH}/{quote(user_id)}/{dimension}",
            headers=headers,
        )
        mime_type = resp.content_type
        if not mime_type.startswith("image"):
            raise RemoteError(resp.status, f"Avatar response is not an image: {mime_type or 'no content type'}")
        return RemoteAvatar(
            data=resp.body,
            mime_type=mime_type,
            etag=resp.headers.get("etag", "").removeprefix("W/").strip('"'),
        )
