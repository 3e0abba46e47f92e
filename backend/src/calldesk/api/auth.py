"""Admin-code authentication for area administrators.

Admin codes are stored as SHA-512 hex digests on the area. Clients may
send the plain code, or the digest itself with the "already hashed"
flag set.
"""

import hashlib
import re
from uuid import UUID

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import areas, campaigns
from . import AuthenticationError, BadRequestError

SHA512_HEX = re.compile(r"^[a-f0-9]{128}$")


def hash_admin_code(code: str, already_hashed: bool = False) -> str:
    """Return the SHA-512 hex digest to compare against the area.

    Args:
        code: Plain admin code, or its digest
        already_hashed: Whether code is already a digest

    Raises:
        BadRequestError: If code claims to be hashed but is not a digest
    """
    if already_hashed:
        if not SHA512_HEX.match(code):
            raise BadRequestError("bad hash for admin code")
        return code
    return hashlib.sha512(code.encode("utf-8")).hexdigest()


async def authenticate_area(
    session: AsyncSession, area_id: UUID, admin_hash: str
) -> UUID:
    """Return the area id if the admin hash matches, else raise 401."""
    stmt = select(areas.c.id).where(
        areas.c.id == area_id,
        areas.c.admin_password == admin_hash,
    )
    result = await session.execute(stmt)
    found = result.scalar_one_or_none()
    if found is None:
        raise AuthenticationError()
    return found


async def resolve_campaign(
    session: AsyncSession, area_id: UUID, campaign_id: UUID | None = None
) -> UUID | None:
    """Pick the campaign a request targets.

    An explicit campaign must belong to the area; without one, the
    area's active campaign is used.
    """
    stmt = select(campaigns.c.id).where(campaigns.c.area_id == area_id)
    if campaign_id is not None:
        stmt = stmt.where(campaigns.c.id == campaign_id)
    else:
        stmt = stmt.where(campaigns.c.active.is_(True))
    result = await session.execute(stmt.limit(1))
    return result.scalar_one_or_none()


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, falling back to the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "no IP"
