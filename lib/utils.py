# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from urllib.parse import urlsplit, urlunsplit

from bson import ObjectId
from bson.errors import InvalidId


# =============================================================================
# ObjectId Utilities
# =============================================================================

def to_object_id(value: str | ObjectId) -> ObjectId | None:
    """
    Convert a document id to an ObjectId.

    Args:
        value: 24-character hex string or ObjectId

    Returns:
        ObjectId, or None if the value is not a valid id

    Example:
        to_object_id("65a1f0c2e4b0a1b2c3d4e5f6")  # ObjectId('65a1...')
        to_object_id("not-an-id")                 # None
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


# =============================================================================
# URL Utilities
# =============================================================================

def mask_url_credentials(url: str) -> str:
    """
    Replace the password in a connection URL with asterisks.

    Example:
        mask_url_credentials("mongodb://admin:s3cret@db:27017/app")
        # "mongodb://admin:****@db:27017/app"
    """
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url

    userinfo, hosts = parts.netloc.rsplit("@", 1)
    if ":" not in userinfo:
        return url

    username = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:****@{hosts}"))
