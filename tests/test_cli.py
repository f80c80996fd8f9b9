import json

import pytest

from pokecatalog import main as cli
from pokecatalog.fetch import ProviderClient


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.delenv("POKECATALOG_DATABASE_URL", raising=False)
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"database_url": f"sqlite:///{tmp_path / 'cli.db'}", "log_level": "WARNING"}),
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def fake_provider(monkeypatch, provider, creature_payload, move_payload):
    provider.add_creature(creature_payload(25, "pikachu", ["electric"], move_ids=[84, 98]))
    provider.add_move(move_payload(84, "electric", power=40, name="thunder-shock"))
    provider.add_move(move_payload(98, "normal", power=40, name="quick-attack"))
    monkeypatch.setattr(ProviderClient, "from_settings", classmethod(lambda cls, settings: provider))
    return provider


def test_resolve_json(config_path, fake_provider, capsys):
    assert cli.main(["--config", config_path, "resolve", "Pikachu", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["id"] == 25
    assert out["type1"] == "electric"


def test_moves_text(config_path, fake_provider, capsys):
    assert cli.main(["--config", config_path, "moves", "25"]) == 0
    out = capsys.readouterr().out
    assert "Thunder Shock" in out
    assert "Quick Attack" in out
    assert out.index("Thunder Shock") < out.index("Quick Attack")


def test_unknown_creature_exit_code(config_path, fake_provider, capsys):
    assert cli.main(["--config", config_path, "resolve", "missingno"]) == 1
    assert "Unknown creature" in capsys.readouterr().err


def test_export_command(config_path, fake_provider, tmp_path, capsys):
    cli.main(["--config", config_path, "resolve", "pikachu"])
    output = tmp_path / "catalog.json"

    assert cli.main(["--config", config_path, "export", "--format", "json", "--output", str(output)]) == 0
    snapshot = json.loads(output.read_text(encoding="utf-8"))
    assert [c["name"] for c in snapshot["creatures"]] == ["pikachu"]


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 2
    assert "usage" in capsys.readouterr().out
