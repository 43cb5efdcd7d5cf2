"""Unit tests for the sweep CLI command."""

import pytest

from redflag.cli.commands import sweep
from redflag.config import Config
from redflag.domain.retention.model.resource import UploadedResourceId
from redflag.domain.retention.model.value import SweepFailure, SweepReport


def _patch_sweep(monkeypatch: pytest.MonkeyPatch, report: SweepReport) -> None:
    async def fake_run_sweep(config: Config) -> SweepReport:
        return report

    monkeypatch.setattr(sweep, "_run_sweep", fake_run_sweep)


class TestSweepCommand:
    def test_clean_sweep_exits_normally(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        _patch_sweep(monkeypatch, SweepReport(deleted=[UploadedResourceId.generate()]))

        sweep.sweep()

        assert "Sweep complete" in capsys.readouterr().out

    def test_failures_exit_with_status_2(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        failure = SweepFailure(
            resource_id=UploadedResourceId.generate(), storage_id="abc", reason="status 500"
        )
        _patch_sweep(monkeypatch, SweepReport(failed=[failure]))

        with pytest.raises(SystemExit) as exc:
            sweep.sweep()

        assert exc.value.code == 2
        assert "abc: status 500" in capsys.readouterr().out
