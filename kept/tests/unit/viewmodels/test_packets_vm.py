from __future__ import annotations

from datetime import timedelta
from typing import List

from kept.domain.query import QueryResult
from kept.usecases.fetch_query import run_query
from kept.usecases.packets import CreatePacket, SharedPacket, SharePacket
from kept.viewmodels.packets_vm import NewPacketVM, PacketDetailVM, PacketsVM
from kept.viewmodels.status_format import EMPTY_HOMES, EMPTY_PACKETS

from kept.tests.unit.viewmodels.helpers import NOW, AlertRecorder, fixed_clock, make_backend

PACKET_DATA = {
    "systemInfo": {"name": "Furnace", "age": 12, "manufacturer": "Carrier"},
    "diagnosis": {
        "likelyIssue": "Igniter failure",
        "confidence": 70,
        "explanation": "Burners never light.",
        "alternativeCauses": ["Flame sensor", None, " "],
    },
    "costEstimate": {"diyLow": 30, "diyHigh": 60, "proLow": 150, "proHigh": 350},
    "questionsToAsk": ["Is it under warranty?", "Can you test the sensor?"],
    "redFlags": ["Full replacement for one part"],
}


def _backend():
    backend = make_backend()
    backend.add_packet(
        {
            "_id": "packet_1",
            "homeId": "home_1",
            "title": "Furnace: No heat",
            "symptom": "No heat",
            "createdAt": int((NOW - timedelta(hours=3)).timestamp() * 1000),
            "isShared": True,
            "viewsCount": 4,
            "packetData": PACKET_DATA,
        }
    )
    backend.add_packet(
        {
            "_id": "packet_2",
            "homeId": "home_1",
            "title": "Leak",
            "symptom": "Water leak",
            "createdAt": int((NOW - timedelta(days=2)).timestamp() * 1000),
        }
    )
    return backend


def test_packet_cards() -> None:
    backend = _backend()
    vm = PacketsVM(clock=fixed_clock)
    vm.set_packets(run_query(backend.get_home_packets, "home_1"))

    cards = vm.cards()

    assert [c.packet_id for c in cards] == ["packet_1", "packet_2"]
    assert cards[0].age_label == "3h ago"
    assert cards[0].views_label == "4 views"
    assert cards[0].system_label == "Furnace"
    assert cards[0].likely_issue == "Igniter failure"
    assert (cards[1].age_label, cards[1].system_label, cards[1].views_label) == ("2d ago", "", "")
    assert vm.empty_state() is None


def test_empty_packet_list() -> None:
    vm = PacketsVM(clock=fixed_clock)
    assert vm.empty_state() is None

    vm.set_packets(QueryResult.resolved([]))
    assert vm.empty_state() == EMPTY_PACKETS


def test_packets_without_home_show_no_home_state() -> None:
    backend = _backend()
    vm = PacketsVM(clock=fixed_clock)

    vm.set_packets(run_query(backend.get_home_packets, ""))

    assert vm.is_skipped and not vm.is_loading
    assert vm.cards() == []
    assert vm.empty_state() == EMPTY_HOMES
    assert backend.operations() == []


def test_share_hands_link_to_callback() -> None:
    backend = _backend()
    shared: List[SharedPacket] = []
    vm = PacketsVM(
        share_packet=SharePacket(backend, share_base_url="https://share.example"),
        on_share=shared.append,
        clock=fixed_clock,
    )

    result = vm.share("packet_2")

    assert result is not None
    assert shared == [result]
    assert result.url.startswith("https://share.example/")
    assert vm.sharing_packet_id is None


def test_share_failure_shows_generic_alert() -> None:
    backend = _backend()
    alerts = AlertRecorder()
    shared: List[SharedPacket] = []
    vm = PacketsVM(share_packet=SharePacket(backend), on_share=shared.append, on_alert=alerts)

    assert vm.share("missing") is None

    assert alerts.alerts == [("Error", "Failed to share packet")]
    assert shared == []
    assert vm.is_sharing("missing") is False


def test_detail_sections() -> None:
    backend = _backend()
    vm = PacketDetailVM()
    vm.set_packet(run_query(backend.get_packet, "packet_1"))

    assert vm.system_info() == [("System", "Furnace"), ("Age", "12 years"), ("Brand", "Carrier")]
    diagnosis = vm.diagnosis()
    assert diagnosis["confidence"] == "70% confidence"
    assert diagnosis["alternatives"] == ["Flame sensor"]
    assert vm.cost_estimate()["pro"] == "$150 - $350"
    assert vm.questions() == ["1. Is it under warranty?", "2. Can you test the sensor?"]
    assert vm.red_flags() == ["Full replacement for one part"]
    assert vm.meta_line().endswith("4 views")


def test_detail_without_packet_data() -> None:
    backend = _backend()
    vm = PacketDetailVM()
    vm.set_packet(run_query(backend.get_packet, "packet_2"))

    assert vm.system_info() == []
    assert vm.diagnosis() is None
    assert vm.cost_estimate() is None
    assert vm.questions() == []


def test_detail_share_clears_flag() -> None:
    backend = _backend()
    vm = PacketDetailVM(share_packet=SharePacket(backend))
    vm.set_packet(run_query(backend.get_packet, "packet_1"))

    shared = vm.share()

    assert shared is not None
    assert vm.is_sharing is False
    assert PacketDetailVM().share() is None


def test_new_packet_creates_and_navigates() -> None:
    backend = _backend()
    paths: List[str] = []
    vm = NewPacketVM(create_packet=CreatePacket(backend), on_created=paths.append, symptom="No heat")
    vm.set_home_id("home_1")
    vm.set_systems(run_query(backend.get_home_systems, "home_1"))
    vm.select_system("sys_furnace")

    packet_id = vm.create()

    assert packet_id is not None
    assert paths == [f"/packet/{packet_id}"]
    assert backend.get_packet(packet_id).system_id == "sys_furnace"
    assert vm.system_options()[0] == ("", "Not sure / General", "")
    assert vm.is_creating is False


def test_new_packet_validation_alert() -> None:
    backend = _backend()
    alerts = AlertRecorder()
    paths: List[str] = []
    vm = NewPacketVM(create_packet=CreatePacket(backend), on_alert=alerts, on_created=paths.append)
    vm.set_home_id("home_1")

    assert vm.can_create is False
    assert vm.create() is None

    assert alerts.alerts == [("Error", "Please describe the symptom or issue")]
    assert paths == []
    assert vm.is_creating is False
