from __future__ import annotations

import logging
from uuid import UUID

from fellowship_chat.application.dto.message import SenderView
from fellowship_chat.application.ports.media import MediaUrlResolver

logger = logging.getLogger(__name__)


async def resolve_media_url(media: MediaUrlResolver | None, reference: str | None) -> str | None:
    """Best effort: on failure the stored reference is returned unchanged."""
    if not reference or media is None:
        return reference
    try:
        return await media.resolve(reference)
    except Exception:  # noqa: BLE001
        logger.warning("Could not resolve media URL for %r", reference, exc_info=True)
        return reference


async def sender_view(
    identity_id: UUID,
    name: str,
    email: str | None,
    profile: str | None,
    media: MediaUrlResolver | None,
) -> SenderView:
    return SenderView(
        id=identity_id,
        name=name,
        email=email,
        profile=await resolve_media_url(media, profile),
    )
