import json

from mcapfeed.models import Token, default_tokens
from mcapfeed.storage import load_saved_tokens, merge_token_preferences, save_tokens


def test_save_then_load_keeps_only_preference_fields(tmp_path):
    path = tmp_path / "nested" / "tokens.json"
    tokens = [t.with_enabled(t.symbol != "BONK") for t in default_tokens()]

    assert save_tokens(tokens, path) is True

    saved = load_saved_tokens(path)
    assert [s["id"] for s in saved] == [t.id for t in tokens]
    assert set(saved[0]) == {"id", "symbol", "name", "color", "enabled", "isCustom"}
    assert [s["enabled"] for s in saved] == [t.enabled for t in tokens]


def test_load_missing_file(tmp_path):
    assert load_saved_tokens(tmp_path / "nope.json") is None


def test_load_corrupt_or_wrong_shape(tmp_path):
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert load_saved_tokens(corrupt) is None

    wrong = tmp_path / "wrong.json"
    wrong.write_text(json.dumps({"tokens": []}), encoding="utf-8")
    assert load_saved_tokens(wrong) is None


def test_load_skips_records_without_id(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps([{"id": "pepe", "enabled": False}, {"symbol": "X"}, "junk"]), encoding="utf-8")

    assert load_saved_tokens(path) == [{"id": "pepe", "enabled": False}]


def test_merge_applies_enabled_flag_only():
    tokens = list(default_tokens())
    saved = [{"id": "pepe", "enabled": False, "color": "#000000"}, {"id": "unknown", "enabled": False}]

    merged = merge_token_preferences(tokens, saved)

    pepe = next(t for t in merged if t.id == "pepe")
    assert pepe.enabled is False
    assert pepe.color == next(t for t in tokens if t.id == "pepe").color
    assert all(t.enabled for t in merged if t.id != "pepe")
    assert len(merged) == len(tokens)


def test_merge_without_saved_returns_defaults():
    tokens = list(default_tokens())
    assert merge_token_preferences(tokens, None) == tokens
    assert merge_token_preferences(tokens, []) == tokens
    assert isinstance(merge_token_preferences(tokens, None)[0], Token)
