import json
import os
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.logger import logger
from app.models.booking import Role, Session

USER_ID_KEYS = ("userId", "id", "customerId", "vendorId")


def resolve_user_id(user: Dict[str, Any]) -> Optional[str]:
    for key in USER_ID_KEYS:
        if user.get(key):
            return str(user[key])
    return None


def resolve_role(user: Dict[str, Any]) -> Optional[Role]:
    raw = user.get("role")
    if not raw:
        return None
    try:
        return Role(str(raw).strip().lower())
    except ValueError:
        logger.warning(f"⚠️ Unknown role in session: {raw}")
        return None


def load_session(path: Optional[str] = None) -> Optional[Session]:
    """
    Loads the persisted login session (token + user object).
    Returns None if the file is missing, unreadable or has no token.
    """
    path = path or settings.SESSION_FILE
    if not os.path.exists(path):
        logger.info(f"ℹ️ No session file at '{path}'")
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            stored = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"❌ Could not read session file '{path}': {e}")
        return None

    if not isinstance(stored, dict) or not stored.get("token"):
        logger.warning(f"⚠️ Session file '{path}' has no token")
        return None

    user = stored.get("user") or {}
    if not isinstance(user, dict):
        user = {}

    session = Session(
        token=str(stored["token"]),
        user_id=resolve_user_id(user) or (str(stored["customerId"]) if stored.get("customerId") else None),
        role=resolve_role(user),
    )
    logger.info(f"✅ Session loaded for user {session.user_id} ({session.role.value if session.role else 'no role'})")
    return session
