"""Configuration from environment variables (.env)."""

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    log_level: str
    log_to_file: bool
    query_debounce_ms: int
    directory_debounce_ms: int
    loading_event_delay_ms: int
    max_omni_results_per_provider: int
    max_cached_queries: int

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        logs_dir = os.getenv("OMNISEARCH_LOGS_DIR", "")
        return cls(
            project_root=project_root,
            logs_dir=Path(logs_dir) if logs_dir else project_root / "logs",
            log_level=os.getenv("OMNISEARCH_LOG_LEVEL", "INFO").strip().upper(),
            log_to_file=_env_bool("OMNISEARCH_LOG_TO_FILE"),
            query_debounce_ms=int(os.getenv("OMNISEARCH_QUERY_DEBOUNCE_MS", "200")),
            directory_debounce_ms=int(os.getenv("OMNISEARCH_DIRECTORY_DEBOUNCE_MS", "100")),
            loading_event_delay_ms=int(os.getenv("OMNISEARCH_LOADING_EVENT_DELAY_MS", "200")),
            max_omni_results_per_provider=int(os.getenv("OMNISEARCH_MAX_OMNI_RESULTS", "5")),
            max_cached_queries=int(os.getenv("OMNISEARCH_MAX_CACHED_QUERIES", "50")),
        )

    def validate(self) -> list[str]:
        errors = []
        for name in ("query_debounce_ms", "directory_debounce_ms", "loading_event_delay_ms"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.max_omni_results_per_provider < 1:
            errors.append(
                f"max_omni_results_per_provider must be >= 1, got {self.max_omni_results_per_provider}"
            )
        if self.max_cached_queries < 1:
            errors.append(f"max_cached_queries must be >= 1, got {self.max_cached_queries}")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.log_level}")
        return errors


config = Config.load()
