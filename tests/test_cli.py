import pytest
from click.testing import CliRunner

import main
from mcapfeed.models import MarketCapPoint, MarketCapSeries, Source
from mcapfeed.storage import load_saved_tokens


@pytest.fixture
def tokens_file(tmp_path, monkeypatch):
    path = tmp_path / "tokens.json"
    monkeypatch.setattr(main, "TOKENS_FILE", path)
    return path


def test_parse_contract():
    assert main.parse_contract("Base: 0xabc ") == ("base", "0xabc")
    with pytest.raises(ValueError):
        main.parse_contract("0xabc")
    with pytest.raises(ValueError):
        main.parse_contract("tron:0xabc")


def test_disable_then_enable_persists_flag(tokens_file):
    runner = CliRunner()

    result = runner.invoke(main.cli, ["disable", "bonk"])
    assert result.exit_code == 0
    assert "BONK disabled" in result.output
    saved = {s["id"]: s["enabled"] for s in load_saved_tokens(tokens_file)}
    assert saved["bonk"] is False
    assert not any(t.enabled for t in main.load_tokens() if t.symbol == "BONK")

    result = runner.invoke(main.cli, ["enable", "BONK"])
    assert result.exit_code == 0
    assert all(t.enabled for t in main.load_tokens())


def test_unknown_symbol_exits_non_zero(tokens_file):
    result = CliRunner().invoke(main.cli, ["disable", "NOPE"])
    assert result.exit_code == 1
    assert not tokens_file.exists()


def test_fetch_filters_by_symbol_and_prints_summary(tokens_file, monkeypatch):
    seen = {}

    async def fake_fetch(tokens, contracts, days):
        seen.update(symbols=[t.symbol for t in tokens], contracts=contracts, days=days)
        return [
            MarketCapSeries(
                token=tokens[0],
                points=(MarketCapPoint(1000, 2_000_000.0),),
                source=Source.GECKOTERMINAL,
                current_market_cap=2_000_000.0,
            )
        ]

    monkeypatch.setattr(main, "_fetch", fake_fetch)

    result = CliRunner().invoke(main.cli, ["fetch", "--days", "7d", "--token", "pepe", "--contract", "base:0xdef"])

    assert result.exit_code == 0
    assert seen == {"symbols": ["PEPE"], "contracts": [("base", "0xdef")], "days": 7}
    assert "geckoterminal" in result.output
    assert "$2.00M" in result.output


def test_fetch_rejects_bad_contract(tokens_file, monkeypatch):
    monkeypatch.setattr(main, "_fetch", None)

    result = CliRunner().invoke(main.cli, ["fetch", "--contract", "nowhere"])

    assert result.exit_code == 1
