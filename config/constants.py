"""Constants used across the application."""

from enum import IntEnum


# Account user-data keys
KEY_DISPLAY_NAME = "oc_display_name"
KEY_ID = "oc_id"

# Thumbnail cache keys for avatars are the account name with this prefix
AVATAR_KEY_PREFIX = "a_"

# ownCloud endpoints (relative to the server URL)
OCS_USER_PATH = "/ocs/v2.php/cloud/user"
DAV_FILES_PATH = "/remote.php/dav/files"
AVATAR_PATH = "/index.php/avatar"
STATUS_PATH = "/status.php"

# OCS meta status codes that mean success (v1 and v2)
OCS_SUCCESS_CODES = (100, 200)

DAV_NAMESPACE = "DAV:"

QUOTA_PROPFIND_BODY = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<d:propfind xmlns:d="DAV:">'
    "<d:prop><d:quota-available-bytes/><d:quota-used-bytes/></d:prop>"
    "</d:propfind>"
)


# Negative values of quota-available-bytes are sentinels
class QuotaSentinel(IntEnum):
    PENDING = -1    # not computed yet, e.g. external storage still scanning
    UNKNOWN = -2    # storage gives no way to ask for free space
    UNLIMITED = -3


USER_AGENT = "ProfileSync/0.1 (ownCloud client)"
HTTP_TIMEOUT = 30
