from __future__ import annotations

import json
import logging
import pathlib
import sys

import pytest
from typer.testing import CliRunner

from cakedays.cli import app, configure_logging

runner = CliRunner()


def _write_birthdays(tmp_path: pathlib.Path, rows: list[str]) -> str:
    path = tmp_path / "birthdays.csv"
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return str(path)


class TestScheduleCommand:
    def test_schedule_text(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-10-21"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020"])
        assert result.exit_code == 0
        assert "CAKE DAYS 2020" in result.output
        assert "Thu, Oct 22" in result.output
        assert "Andrew" in result.output

    def test_schedule_json(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-05-21", "Katie,1978-05-21"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["year"] == 2020
        assert data["cake_days"] == [
            {"date": "2020-05-22", "small": 0, "large": 1, "names": ["Andrew", "Katie"]}
        ]

    def test_schedule_writes_csv(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(
            tmp_path,
            ["Dave,1979-06-26", "Rob,1950-07-05", "Sam,1971-07-13", "Kate,1983-07-14"],
        )
        output = tmp_path / "cakedays.csv"
        result = runner.invoke(app, ["schedule", path, "--year", "2020", "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8").splitlines() == [
            "2020-06-29,1,0,Dave",
            "2020-07-07,1,0,Rob",
            "2020-07-15,0,1,Kate Sam",
        ]

    def test_schedule_skips_blank_lines(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-10-21", "", "Rob, 1950-07-05"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [d["names"] for d in data["cake_days"]] == [["Rob"], ["Andrew"]]

    def test_schedule_no_holidays_preset(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-12-25"])
        result = runner.invoke(
            app, ["schedule", path, "--year", "2020", "--preset", "none", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["holidays"] == []
        assert data["cake_days"][0]["date"] == "2020-12-28"

    def test_schedule_extra_holiday(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-10-21"])
        result = runner.invoke(
            app, ["schedule", path, "--year", "2020", "-H", "22 October", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["cake_days"][0]["date"] == "2020-10-23"

    def test_schedule_duplicate_name(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Dave,1979-06-26", "Dave,1980-01-01"])
        output = tmp_path / "cakedays.csv"
        result = runner.invoke(app, ["schedule", path, "--year", "2020", "-o", str(output)])
        assert result.exit_code == 1
        assert "DuplicateName" in result.output
        assert not output.exists()

    def test_schedule_invalid_date(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Dave,1979-19-26"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020"])
        assert result.exit_code == 1
        assert "InvalidDate" in result.output

    def test_schedule_missing_birthdate_column(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Dave"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020"])
        assert result.exit_code == 1
        assert "InvalidDate" in result.output

    def test_schedule_missing_file(self, tmp_path: pathlib.Path) -> None:
        result = runner.invoke(app, ["schedule", str(tmp_path / "nope.csv")])
        assert result.exit_code == 1
        assert "Problem with input file" in result.output

    def test_schedule_empty_file(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, [""])
        result = runner.invoke(app, ["schedule", path])
        assert result.exit_code == 1
        assert "Problem with input file" in result.output

    def test_schedule_unknown_preset(self, tmp_path: pathlib.Path) -> None:
        path = _write_birthdays(tmp_path, ["Andrew,1979-10-21"])
        result = runner.invoke(app, ["schedule", path, "--preset", "zz"])
        assert result.exit_code == 1
        assert "Unknown holiday preset" in result.output

    def test_schedule_verbose_logs_progress(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="cakedays")
        path = _write_birthdays(tmp_path, ["Andrew,1979-10-21"])
        result = runner.invoke(app, ["schedule", path, "--year", "2020", "-v"])
        assert result.exit_code == 0
        assert "Computed 1 cake days for 2020 from 1 birthdays" in caplog.text

    @pytest.mark.parametrize(
        ("verbose", "level"), [(True, logging.INFO), (False, logging.WARNING)]
    )
    def test_configure_logging_writes_to_stderr(
        self, monkeypatch: pytest.MonkeyPatch, verbose: bool, level: int
    ) -> None:
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging(verbose)
        assert calls[0]["level"] == level
        assert calls[0]["stream"] is sys.stderr


class TestClosuresCommand:
    def test_closures_default(self) -> None:
        result = runner.invoke(app, ["closures", "--year", "2020"])
        assert result.exit_code == 0
        assert "Office closures 2019-2021" in result.output
        assert "Mon, Dec 28 2020  Boxing Day" in result.output
        assert "Christmas Day" in result.output

    def test_closures_none_preset(self) -> None:
        result = runner.invoke(app, ["closures", "--year", "2020", "--preset", "none"])
        assert result.exit_code == 0
        assert "Boxing Day" not in result.output
