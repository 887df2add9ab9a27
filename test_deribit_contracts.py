from datetime import date, datetime, timedelta, timezone

import pytest
from deribit_contracts import OptionId, OptionQuote, expiry_code


def test_expiry_code_no_zero_pad():
    assert expiry_code(date(2024, 12, 16)) == "16DEC24"
    assert expiry_code(date(2024, 5, 5)) == "5MAY24"


def test_expiry_code_uses_utc():
    late_ny = datetime(2024, 12, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert expiry_code(late_ny) == "16DEC24"


def test_parse():
    oid = OptionId.parse("BTC-27MAR26-300000-C")
    assert oid == OptionId("BTC", "27MAR26", 300000.0, True)
    assert OptionId.parse("ETH-5MAY24-3100.5-P") == OptionId("ETH", "5MAY24", 3100.5, False)


@pytest.mark.parametrize("name", [
    "BTC-PERPETUAL",
    "BTC-27MAR26-300000",
    "BTC-27MAR26-abc-C",
    "BTC-27MAR26-300000-X",
    "BTC-27MAR26-300000-C-extra",
])
def test_parse_malformed(name):
    with pytest.raises(ValueError):
        OptionId.parse(name)


def test_quote_from_json():
    q = OptionQuote.from_json({
        "instrument_name": "BTC-27MAR26-100000-P",
        "mark_iv": 55.0,
        "bid_price": None,
        "ask_price": 0.031,
        "mark_price": 0.029,
        "underlying_price": 97000.0,
        "open_interest": 12.5,
    })
    assert q.option_id.strike == 100000.0
    assert q.sigma == pytest.approx(0.55)
    assert q.bid is None and q.ask == 0.031
    assert not q.option_id.call


def test_quote_without_iv_or_valid_name():
    q = OptionQuote("BTC-PERPETUAL")
    assert q.option_id is None
    assert q.sigma == 0.0
