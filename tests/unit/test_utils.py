from __future__ import annotations

import pytest

from tsslink.utils import ws_url, to_base36, set_query_param, request_id_factory


def test_to_base36() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_request_ids_are_unique_with_stalled_clock() -> None:
    next_id = request_id_factory(now_ms=lambda: 36)
    ids = [next_id() for _ in range(100)]
    assert len(set(ids)) == 100
    assert ids[0] == "10-1"
    assert ids[35] == "10-10"


def test_set_query_param_replaces_and_keeps_others() -> None:
    assert set_query_param("ws://h/ws", "token", "a") == "ws://h/ws?token=a"
    assert set_query_param("ws://h/ws?x=1&token=old", "token", "new") == "ws://h/ws?x=1&token=new"


@pytest.mark.parametrize(
    ("server", "secure", "expected"),
    [
        ("localhost:8081/ws", False, "ws://localhost:8081/ws"),
        ("localhost:8081/ws", True, "wss://localhost:8081/ws"),
        ("https://tss.example/ws", False, "wss://tss.example/ws"),
        ("http://tss.example/ws", False, "ws://tss.example/ws"),
        ("ws://already/ws", True, "ws://already/ws"),
    ],
)
def test_ws_url(server: str, secure: bool, expected: str) -> None:
    assert ws_url(server, secure=secure) == expected
