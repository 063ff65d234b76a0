"""Credential management helpers for the promptlib CLI."""

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from supabase import create_client

from promptlib.library import PromptLibrary
from promptlib.utils import get_promptlib_home

logger = logging.getLogger(__name__)

# Refresh the access token when it expires within this many seconds
REFRESH_MARGIN_SECONDS = 5 * 60


def get_credentials_path() -> Path:
    """Get the path to the credentials file."""
    return get_promptlib_home() / "credentials.json"


def load_credentials() -> Optional[Dict[str, Any]]:
    """Load credentials from ~/.promptlib/credentials.json."""
    creds_path = get_credentials_path()
    if not creds_path.exists():
        return None
    try:
        with open(creds_path) as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError):
        return None


def save_credentials(credentials: dict):
    """Save credentials to ~/.promptlib/credentials.json."""
    creds_path = get_credentials_path()
    creds_path.parent.mkdir(parents=True, exist_ok=True)
    with open(creds_path, "w") as f:
        json.dump(credentials, f, indent=2)
    # Owner read/write only
    creds_path.chmod(0o600)


def clear_credentials() -> bool:
    """Remove the credentials file."""
    creds_path = get_credentials_path()
    if creds_path.exists():
        creds_path.unlink()
        return True
    return False


def _is_local_http(url: str) -> bool:
    """True for http://localhost and http://127.0.0.1 URLs.

    Compares the parsed hostname, so http://localhost.evil.com and
    http://localhost@evil.com do not qualify.
    """
    try:
        parsed = urlparse(url)
        return parsed.scheme == "http" and parsed.hostname in ("localhost", "127.0.0.1")
    except ValueError:
        return False


def require_https_url(url: str, source: str = None) -> None:
    """Block non-HTTPS, non-localhost URLs. Raises SystemExit."""
    if not url or url.startswith("https://"):
        return
    if _is_local_http(url):
        return
    source_msg = f" (from {source})" if source else ""
    print(f"\n⚠  BLOCKED: Refusing to send credentials over plaintext HTTP{source_msg}")
    print(f"   URL: {url}")
    print("   Use https:// or http://localhost for development.")
    sys.exit(1)


def resolve_backend(creds: Optional[Dict[str, Any]] = None) -> Dict[str, Optional[str]]:
    """Backend URL and key: credentials file first, then environment."""
    creds = creds or {}
    url = (
        creds.get("supabase_url")
        or os.environ.get("PROMPTLIB_SUPABASE_URL")
        or os.environ.get("SUPABASE_URL")
    )
    key = (
        creds.get("supabase_key")
        or os.environ.get("PROMPTLIB_SUPABASE_KEY")
        or os.environ.get("SUPABASE_KEY")
        or os.environ.get("SUPABASE_ANON_KEY")
    )
    source = "credentials" if creds.get("supabase_url") else "env"
    return {"url": url, "key": key, "source": source}


def session_to_credentials(session: Any, url: str, key: str) -> Dict[str, Any]:
    user = getattr(session, "user", None)
    return {
        "supabase_url": url,
        "supabase_key": key,
        "user_id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
    }


def needs_refresh(creds: Dict[str, Any], now: Optional[float] = None) -> bool:
    expires_at = creds.get("expires_at")
    if not expires_at or not creds.get("refresh_token"):
        return False
    now = time.time() if now is None else now
    return float(expires_at) - now < REFRESH_MARGIN_SECONDS


def refresh_if_needed(creds: Dict[str, Any], client_factory=create_client) -> Dict[str, Any]:
    """Refresh the stored session when it expires within five minutes.

    On failure the stored session is kept; the request that follows decides
    whether the old token still works.
    """
    if not needs_refresh(creds):
        return creds
    try:
        client = client_factory(creds["supabase_url"], creds["supabase_key"])
        response = client.auth.refresh_session(creds["refresh_token"])
    except Exception as e:
        logger.warning(f"Session refresh failed: {e}")
        return creds
    if not response or not response.session:
        logger.warning("Session refresh returned no session")
        return creds

    refreshed = session_to_credentials(
        response.session, creds["supabase_url"], creds["supabase_key"]
    )
    refreshed["user_id"] = refreshed["user_id"] or creds.get("user_id")
    refreshed["email"] = refreshed["email"] or creds.get("email")
    save_credentials(refreshed)
    logger.info("Access token refreshed")
    return refreshed


def get_library(user_id: Optional[str] = None) -> PromptLibrary:
    """Build a PromptLibrary from stored credentials and the environment."""
    creds = load_credentials() or {}
    if creds:
        creds = refresh_if_needed(creds)
    backend = resolve_backend(creds)
    require_https_url(backend["url"], backend["source"])

    return PromptLibrary(
        user_id=user_id or creds.get("user_id") or os.environ.get("PROMPTLIB_USER_ID"),
        supabase_url=backend["url"],
        supabase_key=backend["key"],
        access_token=creds.get("access_token") or os.environ.get("PROMPTLIB_ACCESS_TOKEN"),
    )
