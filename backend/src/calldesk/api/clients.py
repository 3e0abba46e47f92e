"""Client search API endpoints for calldesk."""

from typing import AsyncIterator
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..db import get_db
from ..logging import get_context_logger
from ..models import SearchRequest
from ..resolution import ClientResolver, ClientStore, SQLClientStore, StoreUnavailable
from . import APIResponse, AuthenticationError, NotFoundError, ServiceUnavailableError
from .auth import authenticate_area, get_client_ip, hash_admin_code, resolve_campaign

router = APIRouter(prefix="/admin/client")


# =========================
# Request Models
# =========================


class SearchCompleteBody(BaseModel):
    """Body of POST /admin/client/searchComplete."""

    name: str
    firstName: str
    phoneFragmentStart: str | None = None
    phoneFragmentEnd: str | None = None
    adminCode: str
    area: UUID
    CampaignId: UUID | None = None
    allreadyHaseded: bool = Field(
        default=False, description="adminCode is already a SHA-512 digest"
    )


# =========================
# Dependencies
# =========================


async def get_client_store(
    session: AsyncSession = Depends(get_db),
) -> AsyncIterator[ClientStore]:
    """Client store bound to the request's database session."""
    yield SQLClientStore(session, batch_size=get_settings().resolution_stream_batch_size)


# =========================
# Search
# =========================


@router.post("/searchComplete", response_model=APIResponse)
async def search_complete(
    body: SearchCompleteBody,
    request: Request,
    session: AsyncSession = Depends(get_db),
    store: ClientStore = Depends(get_client_store),
):
    """Search a campaign's clients by name, first name and partial phone.

    Phone fragments narrow the candidate set considerably; send them
    whenever they are known.
    """
    ip = get_client_ip(request)
    logger = get_context_logger(__name__, area=str(body.area), client_ip=ip)

    admin_hash = hash_admin_code(body.adminCode, body.allreadyHaseded)
    try:
        area_id = await authenticate_area(session, body.area, admin_hash)
    except AuthenticationError:
        logger.warning(f"[!{body.area}, {ip}] Wrong admin code")
        raise

    campaign_id = await resolve_campaign(session, area_id, body.CampaignId)
    if campaign_id is None:
        logger.warning(f"[!{body.area}, {ip}] No campaign in progress")
        raise NotFoundError("No campaign in progress")

    search = SearchRequest(
        campaign_id=campaign_id,
        name=body.name,
        first_name=body.firstName,
        phone_fragment_start=body.phoneFragmentStart,
        phone_fragment_end=body.phoneFragmentEnd,
    )

    try:
        result = await ClientResolver.from_settings(store, get_settings()).resolve(search)
    except StoreUnavailable as e:
        logger.error(f"[{body.area}, {ip}] Client store unavailable: {e}")
        raise ServiceUnavailableError("Client store unavailable") from e

    if not result.found:
        logger.info(f"[{body.area}, {ip}] no client found")
        raise NotFoundError("no client found")

    logger.info(
        f"[{body.area}, {ip}] client found on {result.match_pass.value} pass"
    )
    return APIResponse(data=result.record.to_payload())
