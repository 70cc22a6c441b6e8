"""models のユニットテスト"""

import dataclasses

import pytest
from setbit import FlagResult, TrackEvent


def test_flag_result_from_dict() -> None:
    """enabled と variant が読み込まれること。"""
    result = FlagResult.from_dict({"enabled": True, "variant": "b"})
    assert result == FlagResult(enabled=True, variant="b")


def test_flag_result_missing_enabled_defaults_false() -> None:
    """enabled が無い場合は False。"""
    result = FlagResult.from_dict({"variant": "b"})
    assert result.enabled is False
    assert result.variant == "b"


def test_flag_result_malformed_fields() -> None:
    """真偽値でない enabled、文字列でない variant は無視されること。"""
    result = FlagResult.from_dict({"enabled": "yes", "variant": 3})
    assert result.enabled is False
    assert result.variant is None


def test_flag_result_is_immutable() -> None:
    """FlagResult は変更できないこと。"""
    result = FlagResult(enabled=True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.enabled = False  # type: ignore[misc]


def test_track_event_to_dict_minimal() -> None:
    """None のフィールドはボディに含まれないこと。"""
    event = TrackEvent(event_name="signup", user_id="u1")
    assert event.to_dict() == {"eventName": "signup", "userId": "u1"}


def test_track_event_to_dict_full() -> None:
    """全フィールドが camelCase で出力され、metadata の順序が保たれること。"""
    event = TrackEvent(
        event_name="purchase",
        user_id="u1",
        flag_name="pricing",
        variant="b",
        metadata={"amount": 99.99, "currency": "USD", "items": [{"sku": "x"}]},
    )
    data = event.to_dict()
    assert data["flagName"] == "pricing"
    assert data["variant"] == "b"
    assert list(data["metadata"]) == ["amount", "currency", "items"]
    assert data["metadata"]["items"] == [{"sku": "x"}]
