from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(autouse=True, scope="session")
def _ensure_repo_on_syspath(repo_root: Path) -> None:
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


def _write_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


@pytest.fixture()
def tmp_config_dir(tmp_path: Path) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)

    _write_yaml(
        config_dir / "paths_config.yaml",
        {
            "general": {
                "logs_dir": "logs",
                "output_dir": "output",
                "allow_relative_paths": True,
                "base_directory": str(tmp_path),
                "default_backend": "ollama",
            },
        },
    )

    _write_yaml(
        config_dir / "model_config.yaml",
        {
            "backends": {
                "ollama": {
                    "base_url": "http://localhost:11434",
                    "model": "gemma3:1b",
                    "temperature": 0.2,
                    "top_k": 16,
                    "max_output_tokens": 10000,
                    "timeout": 5,
                },
                "llamacpp": {
                    "base_url": "http://localhost:8080",
                    "model": "local-gguf",
                    "temperature": 0.2,
                    "top_k": 16,
                    "max_output_tokens": 10000,
                    "timeout": 5,
                    "slot_id": 0,
                },
                "gemini": {
                    "model": "gemini-2.0-flash",
                    "temperature": 0.2,
                    "top_k": 16,
                    "max_output_tokens": 8192,
                    "timeout": 5,
                    "max_retries": 0,
                },
            }
        },
    )

    _write_yaml(
        config_dir / "retry_config.yaml",
        {
            "retry": {
                "initial_wait_ms": 100,
                "max_wait_ms": None,
                "max_attempts": None,
            }
        },
    )

    return config_dir


@pytest.fixture()
def config_loader(tmp_config_dir: Path):
    from llmbatch.config.loader import ConfigLoader

    loader = ConfigLoader(config_dir=tmp_config_dir)
    loader.load_configs()
    return loader


@pytest.fixture(autouse=True)
def _patch_global_config_cache(config_loader):
    import llmbatch.config.loader as loader_module

    loader_module._config_cache = config_loader
    yield
    loader_module._config_cache = None
