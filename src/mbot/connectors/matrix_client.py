# src/mbot/connectors/matrix_client.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse

logger = logging.getLogger(__name__)

try:
    import olm  # type: ignore  # noqa: F401

    OLM_AVAILABLE = True
except ImportError:
    OLM_AVAILABLE = False


def session_path(store_dir: Path) -> Path:
    return store_dir / "session.json"


def load_session(path: Path) -> dict[str, str]:
    """Read a stored session; raises ValueError if it is incomplete."""
    val = json.loads(path.read_text("utf-8"))
    if not isinstance(val, dict):
        raise ValueError("Expected JSON object")
    out: dict[str, str] = {}
    for field in ("access_token", "user_id", "device_id"):
        raw: Any = val.get(field)
        if not raw:
            raise ValueError(f"session.json is missing {field}")
        out[field] = str(raw)
    return out


def save_session(path: Path, data: dict[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    try:
        os.chmod(path, 0o600)
    except OSError:
        # Not critical on Windows or restricted FS.
        logger.debug("chmod 600 failed for %s", path, exc_info=True)


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Create a logged-in Matrix AsyncClient, or None if Matrix is not usable.

    The access token is kept in <matrix_store_path>/session.json so restarts do not log
    in again. The password is only needed once to bootstrap that file.
    """
    homeserver = (getattr(settings, "matrix_homeserver", "") or "").strip()
    user_id = (getattr(settings, "matrix_user_id", "") or "").strip()
    password = (getattr(settings, "matrix_password", "") or "").strip()
    store_dir = Path(getattr(settings, "matrix_store_path", Path(".local/mbot/matrix_store")))

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set MBOT_MATRIX_HOMESERVER and MBOT_MATRIX_USER_ID")
        return None

    store_dir.mkdir(parents=True, exist_ok=True)
    session_file = session_path(store_dir)

    encryption_enabled = bool(OLM_AVAILABLE)
    if not encryption_enabled:
        logger.info("python-olm not installed: reminders go to unencrypted rooms only")

    client = AsyncClient(
        homeserver,
        user_id,
        store_path=str(store_dir) if encryption_enabled else None,
        config=AsyncClientConfig(encryption_enabled=encryption_enabled, store_sync_tokens=True),
    )

    if session_file.exists():
        try:
            data = load_session(session_file)
            client.restore_login(
                user_id=data["user_id"],
                device_id=data["device_id"],
                access_token=data["access_token"],
            )
            logger.info("Matrix session restored for %s", client.user_id)
            return client
        except (OSError, ValueError) as e:
            logger.warning("Failed to restore Matrix session.json, will try password login: %r", e)

    if not password:
        logger.error(
            "Matrix session.json not found and password is not set. "
            "Set MBOT_MATRIX_PASSWORD once to bootstrap a session."
        )
        await client.close()
        return None

    device_name = f"{getattr(settings, 'app_name', 'mbot')} (Python)"
    logger.info("Logging in to Matrix to bootstrap a new session (device_name=%r)...", device_name)

    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    try:
        save_session(
            session_file,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
        logger.info("Matrix session saved to %s (user=%s)", session_file, resp.user_id)
    except OSError as e:
        # Still usable for this run; next start will log in again.
        logger.warning("Failed to write Matrix session.json (%s): %r", session_file, e)

    return client
