"""Tests for the medscan-match command line."""

import json

import pytest

from medscan.batchmatch.cli import main

LABEL = "LOT AB1234 EXP 03/31/2026"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("MEDSCAN_SIMILARITY_THRESHOLD", raising=False)
    monkeypatch.delenv("MEDSCAN_LOG_LEVEL", raising=False)


@pytest.fixture
def catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            [
                {"batchNumber": "AB1234", "expiryDate": "2026-03-31", "itemCode": "ITM-1"},
                {"batchNumber": "ZZ0000", "expiryDate": "2027-01-01"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_no_command_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "medscan-match" in capsys.readouterr().out


def test_match_json(capsys, catalog):
    main(["match", "--text", LABEL, "--catalog", str(catalog), "--json"])
    data = json.loads(capsys.readouterr().out)

    assert data["success"] is True
    assert [m["batch"]["batchNumber"] for m in data["matches"]] == ["AB1234"]
    assert data["matches"][0]["expiryValid"] is True
    assert data["nearestMatches"] == []


def test_match_text_file_nearest(capsys, catalog, tmp_path):
    text_file = tmp_path / "scan.txt"
    text_file.write_text("LOT AB1235\n", encoding="utf-8")

    main(["match", "--text-file", str(text_file), "--catalog", str(catalog)])
    out = capsys.readouterr().out
    assert "No exact match" in out
    assert "AB1234" in out


def test_match_blank_text(capsys, catalog):
    main(["match", "--text", "  ", "--catalog", str(catalog)])
    assert "No text extracted from image" in capsys.readouterr().out


def test_match_missing_catalog(capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["match", "--text", LABEL, "--catalog", str(tmp_path / "none.json")])
    assert exc.value.code == 1
    assert "Cannot load catalog" in capsys.readouterr().err


def test_match_catalog_must_be_list(capsys, tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text('{"batchNumber": "AB1234"}', encoding="utf-8")
    with pytest.raises(SystemExit):
        main(["match", "--text", LABEL, "--catalog", str(path)])
    assert "must be a JSON list" in capsys.readouterr().err


def test_invalid_config(capsys, tmp_path, catalog):
    config = tmp_path / "bad.toml"
    config.write_text("[ranking]\ntop_k = 0\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config), "match", "--text", LABEL, "--catalog", str(catalog)])
    assert exc.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_rank_json(capsys, catalog, tmp_path):
    quantities = tmp_path / "quantities.json"
    quantities.write_text('{"ITM-1": 12}', encoding="utf-8")

    main([
        "rank", "--text", LABEL, "--catalog", str(catalog),
        "--quantities", str(quantities), "--json",
    ])
    data = json.loads(capsys.readouterr().out)

    assert len(data) == 1
    assert data[0]["batchNumber"] == "AB1234"
    assert data[0]["rank"] == 1
    assert data[0]["requestedQuantity"] == 12
    assert data[0]["quantityInferred"] is False


def test_rank_nothing_admitted(capsys, catalog):
    main(["rank", "--text", "unrelated words", "--catalog", str(catalog)])
    assert "No batch scored high enough" in capsys.readouterr().out


def test_formats_json(capsys):
    main(["formats", "2026-03-31", "--json"])
    formats = json.loads(capsys.readouterr().out)
    assert "03/31/2026" in formats
    assert "31 MAR 2026" in formats


def test_extract_json(capsys):
    main(["extract", "--text", "BATCH B77 EXP 03/31/2026", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["batch_number"] == "B77"
    assert data["expiry_date"] == "03/31/2026"
    assert data["lot_number"] is None


def test_unknown_log_level_from_env(capsys, monkeypatch):
    monkeypatch.setenv("MEDSCAN_LOG_LEVEL", "verbose")
    with pytest.raises(SystemExit) as exc:
        main(["formats", "2026-03-31"])
    assert exc.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_non_numeric_config_value(capsys, tmp_path):
    config = tmp_path / "bad.toml"
    config.write_text('[matching]\nnearest_floor = "close"\n', encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config), "formats", "2026-03-31"])
    assert exc.value.code == 1
    assert "nearest_floor" in capsys.readouterr().err
