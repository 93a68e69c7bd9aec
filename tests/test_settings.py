"""Tests for YAML settings."""

from __future__ import annotations

from pathlib import Path

from lifeplan.config import Settings


class TestSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = Settings.load(tmp_path / "nope.yaml")
        assert settings.analysis.window_size == 7
        assert settings.calibration.use_trend is False
        assert settings.logging.level == "WARNING"

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        settings = Settings()
        settings.database.path = tmp_path / "life.db"
        settings.analysis.window_size = 10
        settings.calibration.use_trend = True
        settings.defaults.output_format = "markdown"
        settings.save(path)

        loaded = Settings.load(path)
        assert loaded.database.path == tmp_path / "life.db"
        assert loaded.analysis.window_size == 10
        assert loaded.calibration.use_trend is True
        assert loaded.defaults.output_format == "markdown"

    def test_partial_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: debug\n")
        loaded = Settings.load(path)
        assert loaded.logging.level == "DEBUG"
        assert loaded.analysis.weight_stall_threshold_kg == 0.3
