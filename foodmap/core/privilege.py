import hmac

from fastapi import Header
from foodmap.core.config import get_settings


async def resolve_privilege(
    x_admin_key: str | None = Header(default=None),
) -> bool:
    """
    Dependency telling whether the caller may see privileged comment fields.
    - True only when ADMIN_API_KEY is configured and 'X-Admin-Key' matches it.
    """
    expected = get_settings().ADMIN_API_KEY
    if not expected or not x_admin_key:
        return False
    return hmac.compare_digest(x_admin_key.encode(), expected.encode())
