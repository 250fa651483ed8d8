from __future__ import annotations

import json

from ganzhi.run import main


def test_cli_prints_payload(capsys) -> None:
    code = main(["--birth-date", "2008-08-08", "--birth-time", "20:08", "--utc-offset", "8"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["pillars"]["day"]["label"] == "Geng-Chen"
    assert len(payload["useful_gods"]) == 3


def test_cli_method_filter(capsys) -> None:
    main(["--birth-date", "2008-08-08", "--birth-time", "20:08", "--utc-offset", "8",
          "--method", "climate", "--language", "zh-hant"])
    payload = json.loads(capsys.readouterr().out)
    assert list(payload["useful_gods"]) == ["climate"]
    assert payload["day_master"]["element"]["label"] == "金"


def test_cli_reports_bad_date(capsys) -> None:
    code = main(["--birth-date", "2008-02-30", "--birth-time", "20:08"])
    assert code == 2
    assert "Invalid birth date" in capsys.readouterr().err
