from __future__ import annotations

from typing import Any

import orjson
import pytest

from tsslink.state.envelope import Envelope
from tsslink.protocol import (
    Unknown,
    WrongPin,
    PinSerial,
    SignResult,
    ManagerInfo,
    EnrollmentResult,
    EnrollmentStatus,
    classify,
    decode_inbound,
    classify_frame,
    encode_outbound,
    normalize_frame,
)

HASH = "ab" * 32


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('{"ParticipantsEnrolled":0}', ManagerInfo),
        ('{"ParticipantsEnrolled":3}', EnrollmentStatus),
        ('{"ParticipantsEnrolled":"0"}', ManagerInfo),
        ('{"ParticipantsEnrolled":"2"}', EnrollmentStatus),
        ("SUCCESS.ENROLL", EnrollmentResult),
        ('"success.enroll"', EnrollmentResult),
        ("SUCCESS.SIGNATURE_ADDED", SignResult),
        ('{"Message":"SUCCESS.SIGNATURE_ENDED"}', SignResult),
        (HASH, SignResult),
        ("0x" + HASH.upper(), SignResult),
        ('{"TxHash":"deadbeef"}', SignResult),
        ('{"SerialNumber":"ABC123"}', PinSerial),
        ("TK-0042", PinSerial),
        ("ERROR.WRONG_PIN", WrongPin),
        (' {"Message":" error.wrong_pin "} ', WrongPin),
        ('{"foo":"bar"}', Unknown),
        ("SUCCESS.SIGNATURE_PENDING", Unknown),
        ("[1, 2]", Unknown),
        ("42", Unknown),
        ("", Unknown),
    ],
)
def test_classification_golden_cases(raw: str, expected: type) -> None:
    assert isinstance(classify_frame(raw), expected)


def test_rule_order_participants_win_over_message() -> None:
    event = classify({"ParticipantsEnrolled": 0, "Message": "SUCCESS.ENROLL"})
    assert isinstance(event, ManagerInfo)
    assert event.participants_enrolled == 0


def test_booleans_are_not_participant_counts() -> None:
    assert isinstance(classify({"ParticipantsEnrolled": False}), Unknown)
    assert isinstance(classify({"ParticipantsEnrolled": True}), Unknown)


def test_negative_participants_fall_through() -> None:
    assert isinstance(classify({"ParticipantsEnrolled": -1}), Unknown)


def test_enrollment_status_carries_count_and_payload() -> None:
    payload = {"ParticipantsEnrolled": 2, "Total": 3}
    event = classify(payload)
    assert isinstance(event, EnrollmentStatus)
    assert event.participants_enrolled == 2
    assert event.payload == payload
    assert event.tag == "ENROLLMENT_STATUS"


def test_sign_result_extracts_tx_hash() -> None:
    from_text = classify_frame(HASH)
    assert isinstance(from_text, SignResult)
    assert from_text.tx_hash == HASH

    from_field = classify({"txid": "abc", "Message": "done"})
    assert isinstance(from_field, SignResult)
    assert from_field.tx_hash == "abc"
    assert from_field.message == "done"

    marker = classify_frame("SUCCESS.SIGNATURE_ADDED")
    assert marker.tx_hash is None


def test_bare_text_becomes_serial_payload() -> None:
    event = classify_frame("  TK-0042 ")
    assert isinstance(event, PinSerial)
    assert event.serial_number == "TK-0042"
    assert event.payload == {"SerialNumber": "TK-0042", "Message": "TK-0042"}
    assert event.tag == "SUCCESS.PIN_SERIAL"


def test_serial_number_field_wins_over_message() -> None:
    event = classify({"SerialNumber": "SN-1", "Message": "ERROR.WRONG_PIN"})
    assert isinstance(event, PinSerial)
    assert event.serial_number == "SN-1"


def test_empty_serial_number_is_ignored() -> None:
    assert isinstance(classify({"SerialNumber": "", "Message": "ERROR.WRONG_PIN"}), WrongPin)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("plain text", {"Message": "plain text"}),
        (b'{"a": 1}', {"a": 1}),
        ('"  quoted  "', {"Message": "quoted"}),
        ('"{\\"ParticipantsEnrolled\\": 1}"', {"ParticipantsEnrolled": 1}),
        ('"{not json}"', {"Message": "{not json}"}),
        ("[1]", {"Value": [1]}),
        ("true", {"Value": True}),
        (b"\xff\xfe", {"Message": "\ufffd\ufffd"}),
    ],
)
def test_normalize_frame(raw: Any, expected: dict[str, Any]) -> None:
    assert normalize_frame(raw) == expected


def test_decode_inbound_wraps_event_in_envelope() -> None:
    envelope = decode_inbound('{"ParticipantsEnrolled":0,"Total":3}')
    assert envelope.type == "MANAGER_INFO"
    assert envelope.id is None
    assert not envelope.is_reply
    assert isinstance(envelope.payload, ManagerInfo)


@pytest.mark.parametrize("method", ["Info_ManagerForEnroll", "Enrollment", "Info_Enrollment"])
def test_encode_flattens_enrollment_methods(method: str) -> None:
    frame = encode_outbound(Envelope(type=method, id="x-1", payload={"WalletId": "w1"}))
    assert orjson.loads(frame) == {"Method": method, "WalletId": "w1"}


def test_encode_flattened_method_without_payload() -> None:
    frame = encode_outbound(Envelope(type="Info_Enrollment"))
    assert orjson.loads(frame) == {"Method": "Info_Enrollment"}


def test_encode_other_types_send_raw_payload() -> None:
    payload = {"PIN": "MTIzNA==", "Method": "CheckPIN"}
    assert orjson.loads(encode_outbound(Envelope(type="CheckPIN", payload=payload))) == payload


def test_encode_without_payload_sends_envelope() -> None:
    frame = encode_outbound(Envelope(type="Sign", id="r-1"))
    assert orjson.loads(frame) == {"type": "Sign", "id": "r-1"}
