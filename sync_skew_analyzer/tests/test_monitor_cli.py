"""Smoke tests for the command-line monitor."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from sync_skew_analyzer.ingest.sources import VoltageLogReplaySource
from sync_skew_analyzer.models.profile import AcquisitionProfile
from sync_skew_analyzer.scripts.monitor import build_profile, main


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


def test_build_profile_layers_json_and_overrides(tmp_path: Path) -> None:
    path = tmp_path / "profile.json"
    path.write_text(json.dumps({"samples_per_channel": 2000, "bin_policy": "max_magnitude"}), encoding="utf-8")

    p = build_profile(profile_path=str(path), overrides={"sample_rate_hz": 20000.0, "bin_policy": None})
    assert p.samples_per_channel == 2000
    assert p.bin_policy == "max_magnitude"
    assert p.sample_rate_hz == 20000.0
    assert build_profile() == AcquisitionProfile()


def test_synthetic_run_writes_logs(tmp_path: Path, capsys) -> None:
    rc = main(["--blocks", "3", "--out-dir", str(tmp_path), "--quiet", "--log-level", "WARNING"])
    assert rc == 0

    out = capsys.readouterr().out
    assert "Blocks processed: 3" in out
    assert "Blocks with detection: 3" in out

    v = (tmp_path / "VoltageData.csv").read_text().splitlines()
    s = (tmp_path / "DFTData.csv").read_text().splitlines()
    assert len(v) == 3 * 1001
    assert len(s) == 3 * 502


def test_replay_run(tmp_path: Path, capsys) -> None:
    rec = tmp_path / "rec"
    assert main(["--blocks", "2", "--out-dir", str(rec), "--quiet", "--skew-deg", "12"]) == 0
    capsys.readouterr()

    rc = main(
        [
            "--source", "replay",
            "--replay-file", str(rec / "VoltageData.csv"),
            "--scheme", "channel_expansion",
            "--no-log-files",
            "--quiet",
        ]
    )
    assert rc == 0
    out = capsys.readouterr().out
    assert "Blocks processed: 2" in out
    assert len(list(VoltageLogReplaySource(rec / "VoltageData.csv", AcquisitionProfile()))) == 2


def test_invalid_profile_exit_code(tmp_path: Path) -> None:
    assert main(["--samples", "999", "--no-log-files", "--quiet"]) == 2
    assert main(["--source", "replay", "--no-log-files", "--quiet"]) == 2


def test_plot_option(tmp_path: Path) -> None:
    pytest.importorskip("matplotlib")
    plot = tmp_path / "last.png"
    rc = main(["--blocks", "1", "--no-log-files", "--quiet", "--plot", str(plot)])
    assert rc == 0
    assert plot.exists()


def test_configure_logging_writes_rotating_file(tmp_path: Path) -> None:
    from sync_skew_analyzer.logging_config import configure_logging

    log_file = tmp_path / "logs" / "monitor.log"
    configure_logging("debug", log_file=log_file)
    logging.getLogger("sync_skew_analyzer.test").debug("hello from the monitor")
    for h in logging.getLogger().handlers:
        h.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "| DEBUG    | sync_skew_analyzer.test | hello from the monitor" in log_file.read_text()


def test_unknown_log_level(tmp_path: Path) -> None:
    from sync_skew_analyzer.logging_config import configure_logging

    with pytest.raises(ValueError):
        configure_logging("chatty")
    assert main(["--log-level", "chatty", "--no-log-files", "--quiet"]) == 2


def test_zero_threshold_is_an_invalid_profile() -> None:
    assert main(["--threshold", "0", "--no-log-files", "--quiet"]) == 2
