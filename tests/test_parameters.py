from __future__ import annotations

from knxdevinfo.core.model import DeviceInfoItem
from knxdevinfo.core.parameters import (
    CommonParameter,
    InternalParameter,
    KnxipParameter,
    RfParameter,
)
from knxdevinfo.core.sink import ResultSink


def test_friendly_names() -> None:
    assert KnxipParameter.CurrentIPAddress.friendly_name == "Current IP Address"
    assert KnxipParameter.TransmitToIP.friendly_name == "Transmit To IP"
    assert CommonParameter.GroupObjTableLocation.friendly_name == "Group Obj Table Location"
    assert InternalParameter.IndividualAddressWriteEnabled.friendly_name == "Individual Address Write Enabled"


def test_groups_keep_same_names_apart() -> None:
    assert CommonParameter.DomainAddress.group == "Common"
    assert RfParameter.DomainAddress.group == "RF"
    assert KnxipParameter.MacAddress.group == "KNX IP"
    assert CommonParameter.DomainAddress is not RfParameter.DomainAddress


def test_sink_labels_items_with_current_category() -> None:
    received: list[DeviceInfoItem] = []
    sink = ResultSink(received.append)

    sink.put(CommonParameter.SerialNumber, "00c5:01020304", bytes.fromhex("00c501020304"))
    sink.enter("cEMI Server Object")
    item = sink.put(CommonParameter.SerialNumber, "00c5:01020305", bytes.fromhex("00c501020305"))

    assert [i.category for i in received] == ["General", "cEMI Server Object"]
    assert item.to_dict() == {
        "category": "cEMI Server Object",
        "parameter": "SerialNumber",
        "name": "Serial Number",
        "value": "00c5:01020305",
        "raw": "00c501020305",
    }
    assert sink.count(CommonParameter.SerialNumber) == 2
    assert sink.cursor.announced == {"General", "cEMI Server Object"}
