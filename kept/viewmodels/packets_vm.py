"""Home packet list, packet detail and new-packet form.

Call context:
    ``/packets`` feeds ``getHomePackets`` into ``PacketsVM``;
    ``/packet/<id>`` feeds ``getPacket`` into ``PacketDetailVM``;
    ``/packet/new`` drives ``NewPacketVM`` with the home systems, optionally
    pre-filled with a symptom chosen on the troubleshoot screen.
    Sharing hands the resulting ``SharedPacket`` to ``on_share`` (clipboard
    or share sheet in the view).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from kept.domain.entities import HomeId, HomeSystem, Packet, PacketId, SystemId
from kept.domain.formatting import format_currency, format_time_ago
from kept.domain.ports import UseCaseError
from kept.domain.query import QueryResult
from kept.domain.time_utils import parse_backend_datetime
from kept.usecases.packets import CreatePacket, SharedPacket, SharePacket

from .common import AlertCallback, Clock, ERROR_TITLE, NavigateCallback, default_clock
from .status_format import EMPTY_HOMES, EMPTY_PACKETS, EmptyState

log = logging.getLogger(__name__)

ShareCallback = Callable[[SharedPacket], None]


@dataclass
class PacketCard:
    packet_id: PacketId
    title: str
    symptom: str
    age_label: str
    is_shared: bool
    views_label: str
    system_label: str
    likely_issue: str


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return dict(value) if isinstance(value, Mapping) else {}


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _share(
    share_packet: Optional[SharePacket],
    packet_id: PacketId,
    on_share: Optional[ShareCallback],
    on_alert: Optional[AlertCallback],
) -> Optional[SharedPacket]:
    if share_packet is None:
        return None
    try:
        shared = share_packet(packet_id)
    except UseCaseError as exc:
        if on_alert:
            on_alert(ERROR_TITLE, "Failed to share packet")
        log.debug("Share failed for %s: %s", packet_id, exc.message)
        return None
    if on_share:
        on_share(shared)
    return shared


class PacketsVM:
    def __init__(
        self,
        *,
        share_packet: Optional[SharePacket] = None,
        on_share: Optional[ShareCallback] = None,
        on_alert: Optional[AlertCallback] = None,
        clock: Clock = default_clock,
    ) -> None:
        self.share_packet = share_packet
        self.on_share = on_share
        self.on_alert = on_alert
        self.clock = clock
        self.packets: QueryResult[List[Packet]] = QueryResult.pending()
        self.sharing_packet_id: Optional[PacketId] = None

    def set_packets(self, result: QueryResult[List[Packet]]) -> None:
        self.packets = result

    @property
    def is_loading(self) -> bool:
        return self.packets.is_loading

    @property
    def is_skipped(self) -> bool:
        return self.packets.is_skipped

    def is_sharing(self, packet_id: PacketId) -> bool:
        return self.sharing_packet_id == packet_id

    def cards(self) -> List[PacketCard]:
        now = self.clock()
        cards = []
        for packet in self.packets.data_or([]) or []:
            system_info = _section(packet.packet_data, "systemInfo")
            diagnosis = _section(packet.packet_data, "diagnosis")
            cards.append(
                PacketCard(
                    packet_id=packet.id,
                    title=packet.title,
                    symptom=packet.symptom,
                    age_label=format_time_ago(packet.created_at, now),
                    is_shared=packet.is_shared,
                    views_label=f"{packet.views_count} views" if packet.is_shared else "",
                    system_label=(
                        str(system_info.get("name") or "General") if system_info else ""
                    ),
                    likely_issue=(
                        str(diagnosis.get("likelyIssue") or "-") if diagnosis else ""
                    ),
                )
            )
        return cards

    def empty_state(self) -> Optional[EmptyState]:
        if self.packets.is_skipped:
            return EMPTY_HOMES
        if self.packets.is_resolved and not self.packets.value:
            return EMPTY_PACKETS
        return None

    def share(self, packet_id: PacketId) -> Optional[SharedPacket]:
        """Share one packet; a second press on the same packet is ignored."""
        if self.sharing_packet_id == packet_id:
            return None
        self.sharing_packet_id = packet_id
        try:
            return _share(self.share_packet, packet_id, self.on_share, self.on_alert)
        finally:
            self.sharing_packet_id = None


class PacketDetailVM:
    """Sections of a generated packet: system, diagnosis, pricing, questions."""

    def __init__(
        self,
        *,
        share_packet: Optional[SharePacket] = None,
        on_share: Optional[ShareCallback] = None,
        on_alert: Optional[AlertCallback] = None,
    ) -> None:
        self.share_packet = share_packet
        self.on_share = on_share
        self.on_alert = on_alert
        self.packet: QueryResult[Optional[Packet]] = QueryResult.pending()
        self.is_sharing = False

    def set_packet(self, result: QueryResult[Optional[Packet]]) -> None:
        self.packet = result

    @property
    def current(self) -> Optional[Packet]:
        return self.packet.value if self.packet.is_resolved else None

    @property
    def is_loading(self) -> bool:
        return self.current is None

    def _data(self) -> Mapping[str, Any]:
        packet = self.current
        return packet.packet_data if packet else {}

    def meta_line(self) -> str:
        packet = self.current
        if packet is None:
            return ""
        created = parse_backend_datetime(packet.created_at)
        parts = []
        if created is not None:
            local = created.astimezone()
            parts.append(f"Created {local.month}/{local.day}/{local.year}")
        if packet.is_shared:
            parts.append(f"{packet.views_count} views")
        return " • ".join(parts)

    def system_info(self) -> List[tuple]:
        info = _section(self._data(), "systemInfo")
        rows = []
        if info.get("name"):
            rows.append(("System", str(info["name"])))
        if info.get("age"):
            rows.append(("Age", f"{info['age']} years"))
        if info.get("manufacturer"):
            rows.append(("Brand", str(info["manufacturer"])))
        if info.get("modelNumber"):
            rows.append(("Model", str(info["modelNumber"])))
        return rows

    def diagnosis(self) -> Optional[dict]:
        diag = _section(self._data(), "diagnosis")
        if not diag:
            return None
        confidence = diag.get("confidence")
        return {
            "likely_issue": str(diag.get("likelyIssue") or ""),
            "confidence": f"{confidence}% confidence" if confidence else "",
            "explanation": str(diag.get("explanation") or ""),
            "alternatives": _strings(diag.get("alternativeCauses")),
        }

    def cost_estimate(self) -> Optional[dict]:
        cost = _section(self._data(), "costEstimate")
        if not cost:
            return None
        return {
            "diy": f"{format_currency(cost.get('diyLow') or 0)} - "
            f"{format_currency(cost.get('diyHigh') or 0)}",
            "pro": f"{format_currency(cost.get('proLow') or 0)} - "
            f"{format_currency(cost.get('proHigh') or 0)}",
            "factors": _strings(cost.get("factors")),
        }

    def questions(self) -> List[str]:
        return [f"{i}. {q}" for i, q in enumerate(_strings(self._data().get("questionsToAsk")), 1)]

    def red_flags(self) -> List[str]:
        return _strings(self._data().get("redFlags"))

    def share(self) -> Optional[SharedPacket]:
        packet = self.current
        if packet is None or self.is_sharing:
            return None
        self.is_sharing = True
        try:
            return _share(self.share_packet, packet.id, self.on_share, self.on_alert)
        finally:
            self.is_sharing = False


class NewPacketVM:
    """Form for ``/packet/new``; ``create`` navigates to the new packet."""

    def __init__(
        self,
        *,
        create_packet: Optional[CreatePacket] = None,
        on_alert: Optional[AlertCallback] = None,
        on_created: Optional[NavigateCallback] = None,
        symptom: str = "",
    ) -> None:
        self.create_packet = create_packet
        self.on_alert = on_alert
        self.on_created = on_created
        self.home_id: Optional[HomeId] = None
        self.systems: QueryResult[List[HomeSystem]] = QueryResult.pending()
        self.selected_system_id: Optional[SystemId] = None
        self.symptom = symptom or ""
        self.description = ""
        self.is_creating = False

    def set_home_id(self, home_id: Optional[HomeId]) -> None:
        self.home_id = home_id

    def set_systems(self, result: QueryResult[List[HomeSystem]]) -> None:
        self.systems = result

    def select_system(self, system_id: Optional[SystemId]) -> None:
        """``None`` selects "Not sure / General"."""
        self.selected_system_id = system_id or None

    def system_options(self) -> List[tuple]:
        options = [("", "Not sure / General", "")]
        options += [
            (s.id, s.display_name, s.category) for s in self.systems.data_or([]) or []
        ]
        return options

    @property
    def can_create(self) -> bool:
        return bool(self.symptom.strip()) and not self.is_creating

    def create(self) -> Optional[PacketId]:
        if self.create_packet is None or self.is_creating:
            return None
        self.is_creating = True
        try:
            packet_id = self.create_packet(
                home_id=self.home_id,
                symptom=self.symptom,
                system_id=self.selected_system_id,
                description=self.description,
            )
        except UseCaseError as exc:
            if self.on_alert:
                self.on_alert(ERROR_TITLE, exc.message or "Failed to create packet")
            return None
        finally:
            self.is_creating = False
        if self.on_created:
            self.on_created(f"/packet/{packet_id}")
        return packet_id


__all__ = ["NewPacketVM", "PacketCard", "PacketDetailVM", "PacketsVM", "ShareCallback"]
