import csv

from click.testing import CliRunner

from roster_sync.main import cli


def write_players(path, rows):
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["firstName", "lastName", "email"])
        writer.writerows(rows)


def test_sync_with_mock_writes_unregistered_players(tmp_path):
    players = tmp_path / "players.csv"
    missing = tmp_path / "missing.csv"
    write_players(players, [["A", "B", "a@x.com"], ["C", "D", ""], ["E", "F", "unknown@x.com"]])

    result = CliRunner().invoke(
        cli,
        [
            "sync",
            "--event-id",
            "mock-event-1",
            "--input",
            str(players),
            "--output",
            str(missing),
            "--mock",
            "--mock-account",
            "a@x.com",
        ],
    )

    assert result.exit_code == 0, result.output
    with open(missing, newline="", encoding="utf-8") as fh:
        assert list(csv.DictReader(fh)) == []


def test_sync_exits_non_zero_on_malformed_row(tmp_path):
    players = tmp_path / "players.csv"
    missing = tmp_path / "missing.csv"
    write_players(players, [["A", "", "a@x.com"]])

    result = CliRunner().invoke(
        cli,
        ["sync", "--event-id", "mock-event-1", "--input", str(players), "--output", str(missing), "--mock"],
    )

    assert result.exit_code == 1
    assert not missing.exists()


def test_sync_without_credentials_exits_non_zero(tmp_path, monkeypatch):
    monkeypatch.delenv("EVENTLINK_USERNAME", raising=False)
    monkeypatch.delenv("EVENTLINK_PASSWORD", raising=False)
    players = tmp_path / "players.csv"
    write_players(players, [["A", "B", "a@x.com"]])

    result = CliRunner().invoke(
        cli,
        ["sync", "--event-id", "event-1", "--input", str(players), "--output", str(tmp_path / "missing.csv")],
    )

    assert result.exit_code == 1


def test_sync_custom_columns(tmp_path):
    players = tmp_path / "players.csv"
    missing = tmp_path / "missing.csv"
    with open(players, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["Given", "Family", "Mail"])
        writer.writerow(["A", "B", "a@x.com"])

    result = CliRunner().invoke(
        cli,
        [
            "sync",
            "--event-id",
            "mock-event-1",
            "--input",
            str(players),
            "--output",
            str(missing),
            "--first-name-column",
            "Given",
            "--last-name-column",
            "Family",
            "--email-column",
            "Mail",
            "--mock",
        ],
    )

    assert result.exit_code == 0, result.output
    assert missing.read_text(encoding="utf-8").splitlines() == ["Given,Family,Mail"]


def test_events_lists_mock_events():
    result = CliRunner().invoke(cli, ["events", "--mock"])

    assert result.exit_code == 0, result.output
    assert "Mock Game Store" in result.output
    assert "mock-event-1" in result.output
