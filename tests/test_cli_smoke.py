from typer.testing import CliRunner

from foundersync.main import app

runner = CliRunner()


def dirs(tmp_path) -> list[str]:
    return [
        "--log-dir", str(tmp_path / "logs"),
        "--report-dir", str(tmp_path / "reports"),
        "--out-dir", str(tmp_path / "out"),
    ]


def test_help_shows_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("parse", "import", "count", "tokenize"):
        assert command in result.output


def test_tokenize_requires_csv():
    result = runner.invoke(app, ["tokenize"])
    assert result.exit_code == 2


def test_invalid_log_level_is_usage_error(tmp_path):
    result = runner.invoke(app, [*dirs(tmp_path), "--log-level", "LOUD", "tokenize", "--csv", "x.csv"])
    assert result.exit_code == 2
    assert "Unsupported log level" in result.output


def test_tokenize_prints_quoted_csv(tmp_path):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text('name,company\n"Lee, Ann",Acme\n', encoding="utf-8")

    result = runner.invoke(app, [*dirs(tmp_path), "tokenize", "--csv", str(csv_path)])

    assert result.exit_code == 0, result.output
    assert '"name","company"\n"Lee, Ann","Acme"\n' in result.output


def test_tokenize_writes_out_file(tmp_path):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text("a,b\r\nc,d\r\n", encoding="utf-8")
    out_path = tmp_path / "res" / "tokens.csv"

    result = runner.invoke(app, [*dirs(tmp_path), "tokenize", "--csv", str(csv_path), "--out", str(out_path)])

    assert result.exit_code == 0, result.output
    assert out_path.read_text(encoding="utf-8") == '"a","b"\n"c","d"\n'


def test_tokenize_missing_file(tmp_path):
    result = runner.invoke(app, [*dirs(tmp_path), "tokenize", "--csv", str(tmp_path / "missing.csv")])

    assert result.exit_code == 2
    assert "Source file is not readable" in result.output
