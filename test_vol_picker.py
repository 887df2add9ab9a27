from datetime import datetime, timezone

from deribit_contracts import OptionQuote
from vol_picker import chain_for_expiry, nearest_strike, strike_rows


def _q(name, iv=50.0):
    return OptionQuote(name, mark_iv=iv)


def test_nearest_strike_picks_closest():
    chain = [_q("BTC-27DEC24-90000-C"), _q("BTC-27DEC24-100000-C"), _q("BTC-27DEC24-110000-C")]
    assert nearest_strike(chain, 101000).instrument_name == "BTC-27DEC24-100000-C"


def test_nearest_strike_ties_keep_input_order():
    chain = [_q("BTC-27DEC24-110000-P", 61.0), _q("BTC-27DEC24-90000-C", 58.0),
             _q("BTC-27DEC24-110000-C", 60.0)]
    assert nearest_strike(chain, 100000).mark_iv == 61.0


def test_nearest_strike_skips_malformed():
    chain = [_q("BTC-PERPETUAL"), _q("junk"), _q("BTC-27DEC24-120000-C")]
    assert nearest_strike(chain, 100000).instrument_name == "BTC-27DEC24-120000-C"


def test_nearest_strike_empty_cases():
    chain = [_q("BTC-27DEC24-100000-C")]
    assert nearest_strike([], 100000) is None
    assert nearest_strike(chain, 0) is None
    assert nearest_strike(chain, -5) is None
    assert nearest_strike(chain, None) is None
    assert nearest_strike([_q("BTC-PERPETUAL")], 100000) is None


def test_chain_for_expiry_exact_code():
    chain = [
        _q("BTC-5MAY24-60000-C"),
        _q("BTC-15MAY24-60000-C"),     # contains "5MAY24" as a substring
        _q("BTC-5MAY24-65000-P"),
        _q("BTC-PERPETUAL"),
    ]
    picked = chain_for_expiry(chain, datetime(2024, 5, 5, 8, tzinfo=timezone.utc))
    assert [q.instrument_name for q in picked] == ["BTC-5MAY24-60000-C", "BTC-5MAY24-65000-P"]


def test_strike_rows_group_and_sort():
    chain = [
        _q("BTC-27DEC24-90000-C"), _q("BTC-27DEC24-90000-P"),
        _q("BTC-27DEC24-100000-P"),
        _q("BTC-27DEC24-120000-C"),
        _q("bad-name"),
    ]
    rows = strike_rows(chain, spot=98000)
    assert [r.strike for r in rows] == [100000.0, 90000.0, 120000.0]
    assert rows[0].call is None and rows[0].put is not None
    assert rows[1].call is not None and rows[1].put is not None
    assert rows[0].near_spot(98000)
    assert not rows[2].near_spot(98000)
    assert len(strike_rows(chain, 98000, limit=2)) == 2
