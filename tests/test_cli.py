import json

import pytest

from dealscope import __version__
from dealscope.cli import main

CSV_CONTENT = (
    "period,account,value,statement\n"
    "2023,Sales,900,is\n"
    "2024,Sales,1000,is\n"
    "2024,Cost of Goods Sold,600,is\n"
    "2024,Total Current Assets,300,bs\n"
    "2024,Total Current Liabilities,200,bs\n"
)


@pytest.fixture
def financials(tmp_path, monkeypatch):
    """CSV input in an isolated working directory (no config file)."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "acme.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    return path


def test_version(capsys) -> None:
    main(["--version"])

    assert capsys.readouterr().out.strip() == f"dealscope version {__version__}"


def test_json_output(financials, capsys) -> None:
    main([str(financials), "--display-mode", "json", "--concentration", "0.1"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["deal_id"] == "acme"
    assert payload["periods"] == ["2023", "2024"]
    assert payload["metrics"]["gross_margin"] == pytest.approx(0.40)
    assert payload["metrics"]["current_ratio"] == pytest.approx(1.5)
    assert payload["signals"]["concentration"]["status"] == "pass"
    assert payload["inventory"]["present"] == ["income_statement", "balance_sheet"]


def test_table_output(financials, capsys) -> None:
    main([str(financials), "--deal-id", "deal-42"])

    out = capsys.readouterr().out
    assert "Deal: deal-42 | periodicity: annual | periods: 2023, 2024" in out
    assert "=== Metrics (latest period) ===" in out
    assert "=== Due-diligence signals ===" in out
    assert "=== Document inventory ===" in out
    assert "gross_margin" in out


def test_csv_output(financials, tmp_path, capsys) -> None:
    out_dir = tmp_path / "out"

    main([str(financials), "--display-mode", "csv", "--output", str(out_dir)])

    names = sorted(p.name.rsplit("_", 1)[0] for p in out_dir.glob("*.csv"))
    assert names == ["inventory", "metrics", "metrics_by_period", "signals"]
    assert "Wrote" in capsys.readouterr().out


def test_config_file_sets_defaults(financials, tmp_path, capsys) -> None:
    (tmp_path / "dealscope_config.toml").write_text(
        '[display]\nmode = "json"\n\n[analysis]\nconcentration_ratio = 0.5\n',
        encoding="utf-8",
    )

    main([str(financials)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["signals"]["concentration"]["status"] == "fail"


def test_aliases_file(financials, tmp_path, capsys) -> None:
    aliases = tmp_path / "aliases.csv"
    aliases.write_text("alias,canonical\nTurnover,revenue\n", encoding="utf-8")
    data = tmp_path / "extra.csv"
    data.write_text("period,account,value\n2024,Turnover,500\n", encoding="utf-8")

    main([str(data), "--aliases", str(aliases), "--display-mode", "json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["deal_id"] == "extra"
    assert payload["periods"] == ["2024"]
    assert payload["inventory"] is None


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["missing.csv"],
        ["{file}", "--concentration", "1.5"],
        ["{file}", "--config", "nope.toml"],
    ],
)
def test_usage_errors(financials, args) -> None:
    argv = [a.format(file=financials) for a in args]

    with pytest.raises(SystemExit) as excinfo:
        main(argv)

    assert excinfo.value.code == 2


def test_legacy_xls_is_a_usage_error(financials, tmp_path, capsys) -> None:
    xls_path = tmp_path / "acme.xls"
    xls_path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)

    with pytest.raises(SystemExit) as excinfo:
        main([str(xls_path)])

    assert excinfo.value.code == 2
    assert "Legacy .xls workbooks" in capsys.readouterr().err
