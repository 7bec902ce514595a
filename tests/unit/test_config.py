import json
from pathlib import Path

from omnisearch.core import logger as logger_module
from omnisearch.core.config import Config, config


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in (
            "OMNISEARCH_QUERY_DEBOUNCE_MS",
            "OMNISEARCH_DIRECTORY_DEBOUNCE_MS",
            "OMNISEARCH_LOADING_EVENT_DELAY_MS",
            "OMNISEARCH_MAX_OMNI_RESULTS",
            "OMNISEARCH_MAX_CACHED_QUERIES",
            "OMNISEARCH_LOG_LEVEL",
            "OMNISEARCH_LOG_TO_FILE",
            "OMNISEARCH_LOGS_DIR",
        ):
            monkeypatch.delenv(name, raising=False)
        cfg = Config.load()
        assert cfg.query_debounce_ms == 200
        assert cfg.directory_debounce_ms == 100
        assert cfg.loading_event_delay_ms == 200
        assert cfg.max_omni_results_per_provider == 5
        assert cfg.max_cached_queries == 50
        assert cfg.log_level == "INFO"
        assert cfg.log_to_file is False
        assert cfg.logs_dir == cfg.project_root / "logs"
        assert cfg.validate() == []

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("OMNISEARCH_QUERY_DEBOUNCE_MS", "50")
        monkeypatch.setenv("OMNISEARCH_LOG_TO_FILE", "yes")
        monkeypatch.setenv("OMNISEARCH_LOG_LEVEL", "debug")
        monkeypatch.setenv("OMNISEARCH_LOGS_DIR", str(tmp_path))
        cfg = Config.load()
        assert cfg.query_debounce_ms == 50
        assert cfg.log_to_file is True
        assert cfg.log_level == "DEBUG"
        assert cfg.logs_dir == Path(tmp_path)

    def test_validate_reports_bad_values(self, monkeypatch):
        monkeypatch.setenv("OMNISEARCH_QUERY_DEBOUNCE_MS", "-1")
        monkeypatch.setenv("OMNISEARCH_MAX_CACHED_QUERIES", "0")
        monkeypatch.setenv("OMNISEARCH_LOG_LEVEL", "chatty")
        errors = Config.load().validate()
        assert len(errors) == 3
        assert any("query_debounce_ms" in e for e in errors)
        assert any("max_cached_queries" in e for e in errors)
        assert any("CHATTY" in e for e in errors)


class TestEventLog:
    def test_events_written_as_json_lines(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "log_to_file", True)
        monkeypatch.setattr(config, "logs_dir", tmp_path / "logs")
        log = logger_module.OmnisearchLogger()
        log.provider_failed("Files", "global", "Files (global): disk gone", 0.25)
        log.stale_discarded("Files", "global", 1, 2)
        log.close()

        lines = (tmp_path / "logs" / "omnisearch.log").read_text().splitlines()
        events = [json.loads(line) for line in lines]
        assert [e["event_type"] for e in events] == ["PROVIDER_FAILED", "STALE_DISCARDED"]
        assert events[0]["data"]["error_reason"] == "Files (global): disk gone"
        assert events[1]["data"]["current_generation"] == 2

    def test_no_file_unless_enabled(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "log_to_file", False)
        monkeypatch.setattr(config, "logs_dir", tmp_path / "logs")
        log = logger_module.OmnisearchLogger()
        log.query_dispatched("yolo", 1, 2)
        assert not (tmp_path / "logs").exists()

    def test_format_duration(self):
        assert logger_module._format_duration(0) == "0s"
        assert logger_module._format_duration(0.25) == "250ms"
        assert logger_module._format_duration(1.5) == "1.5s"
        assert logger_module._format_duration(90) == "1m 30s"
