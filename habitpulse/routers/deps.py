from typing import Optional

from fastapi import Header

from habitpulse.core.config import settings


def get_user_id(
    x_user_id: Optional[str] = Header(
        default=None,
        max_length=64,
        description="Scopes every read and write. Defaults to DEFAULT_USER_ID.",
    ),
) -> str:
    return x_user_id or settings.DEFAULT_USER_ID
