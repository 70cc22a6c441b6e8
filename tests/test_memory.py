"""InMemoryFlagClient のユニットテスト"""

from setbit import FlagClientProtocol, FlagResult, InMemoryFlagClient


async def test_enabled_and_variant() -> None:
    """設定したフラグの評価。"""
    client = InMemoryFlagClient({"pricing": FlagResult(enabled=True, variant="variant_a")})
    await client.init()
    assert await client.enabled("pricing") is True
    assert await client.variant("pricing") == "variant_a"


async def test_unknown_flag_returns_defaults() -> None:
    """未設定フラグはデフォルト値。"""
    client = InMemoryFlagClient()
    assert await client.enabled("missing", default_value=True) is True
    assert await client.variant("missing", default_variant="x") == "x"


async def test_disabled_flag_returns_default_variant() -> None:
    """無効フラグはデフォルトのバリアント。"""
    client = InMemoryFlagClient()
    client.set_flag("pricing", FlagResult(enabled=False, variant="variant_a"))
    assert await client.enabled("pricing") is False
    assert await client.variant("pricing") == "control"


async def test_track_records_events() -> None:
    """track したイベントが記録されること。"""
    client = InMemoryFlagClient({"pricing": FlagResult(enabled=True, variant="variant_a")})
    await client.track("purchase", user_id="u1", flag_name="pricing", metadata={"amount": 1})
    await client.track("signup")
    assert [e.event_name for e in client.events] == ["purchase", "signup"]
    assert client.events[0].variant == "variant_a"
    assert client.events[0].metadata == {"amount": 1}
    assert client.events[1].variant is None


async def test_usable_as_flag_client() -> None:
    """FlagClientProtocol を受け取るアプリケーションコードに差し込めること。"""

    async def checkout_price(client: FlagClientProtocol, user_id: str) -> int:
        variant = await client.variant("pricing", user_id=user_id)
        return {"variant_a": 99, "variant_b": 149}.get(variant, 129)

    client = InMemoryFlagClient({"pricing": FlagResult(enabled=True, variant="variant_b")})
    assert await checkout_price(client, "u1") == 149
    assert await checkout_price(InMemoryFlagClient(), "u1") == 129
