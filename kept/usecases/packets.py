from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kept.domain.entities import HomeId, PacketId, SystemId
from kept.domain.ports import BackendPort, UseCaseError
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error

log = logging.getLogger(__name__)

DEFAULT_SHARE_BASE_URL = "https://kept.app/shared"
SHARE_MESSAGE_TEMPLATE = "Check out my home service packet: {url}"


@dataclass(frozen=True)
class SharedPacket:
    """Share token plus the link and message handed to the share sheet."""

    token: str
    url: str
    message: str


def share_url(token: str, base_url: str = DEFAULT_SHARE_BASE_URL) -> str:
    base = (base_url or DEFAULT_SHARE_BASE_URL).rstrip("/")
    return f"{base}/{token}"


@dataclass
class CreatePacket:
    """Request a new service packet for a symptom; the title is the symptom."""

    backend: BackendPort

    def __call__(
        self,
        *,
        home_id: Optional[HomeId],
        symptom: str,
        system_id: Optional[SystemId] = None,
        description: str = "",
    ) -> PacketId:
        if not home_id:
            raise UseCaseError("PACKET_NO_HOME", "No home selected")
        symptom_text = (symptom or "").strip()
        if not symptom_text:
            raise UseCaseError("PACKET_NO_SYMPTOM", "Please describe the symptom or issue")
        fields = {
            "homeId": home_id,
            "systemId": system_id or None,
            "title": symptom_text,
            "symptom": symptom_text,
            "description": (description or "").strip() or None,
        }
        try:
            return self.backend.create_packet(
                {key: value for key, value in fields.items() if value is not None}
            )
        except BACKEND_FAILURES as exc:
            log.warning("Creating packet failed: %s", exc)
            raise map_api_error(
                exc, default_code="PACKET_CREATE_FAILED", default_message="Failed to create packet"
            ) from exc


@dataclass
class SharePacket:
    backend: BackendPort
    share_base_url: str = DEFAULT_SHARE_BASE_URL

    def __call__(self, packet_id: PacketId) -> SharedPacket:
        if not packet_id:
            raise UseCaseError("PACKET_MISSING", "No packet selected.")
        try:
            token = self.backend.share_packet(packet_id)
        except BACKEND_FAILURES as exc:
            log.warning("Sharing packet %s failed: %s", packet_id, exc)
            raise map_api_error(
                exc, default_code="PACKET_SHARE_FAILED", default_message="Failed to share packet"
            ) from exc
        url = share_url(token, self.share_base_url)
        return SharedPacket(
            token=token, url=url, message=SHARE_MESSAGE_TEMPLATE.format(url=url)
        )


__all__ = [
    "CreatePacket",
    "DEFAULT_SHARE_BASE_URL",
    "SharePacket",
    "SharedPacket",
    "share_url",
]
