"""テスト共通のフィクスチャ。"""

import json
import logging
from pathlib import Path

import pytest


def _write_artifact(directory: Path, module: str, **fields) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{module}.xmod.json"
    path.write_text(json.dumps({"module": module, **fields}), encoding="utf-8")
    return path


@pytest.fixture
def make_artifact():
    """成果物ファイルを書き出す関数を返す。"""
    return _write_artifact


@pytest.fixture
def scenario_dir(tmp_path):
    """3モジュール構成の成果物ディレクトリ。

    a:foo/0 が b の未定義関数 bar/1 を呼び、b の baz/0 は未使用、
    c は契約 my_contract に準拠して init/1 だけをエクスポートする。
    """
    artifacts = tmp_path / "artifacts"
    library = tmp_path / "lib"

    _write_artifact(
        artifacts, "a",
        exports=[["foo", 0]],
        functions=[{
            "name": "foo", "arity": 0,
            "calls": [{"module": "b", "function": "bar", "arity": 1}]
        }],
        debug_info={
            "source": "src/a.src",
            "definitions": [{"name": "foo", "arity": 0, "line": 3}]
        }
    )
    _write_artifact(
        artifacts, "b",
        functions=[{"name": "baz", "arity": 0}],
        debug_info={
            "source": "src/b.src",
            "definitions": [{"name": "baz", "arity": 0, "line": 5}]
        }
    )
    _write_artifact(
        artifacts, "c",
        exports=[["init", 1]],
        functions=[{"name": "init", "arity": 1}],
        attributes={"behaviour": ["my_contract"]},
        debug_info={
            "source": "src/c.src",
            "definitions": [{"name": "init", "arity": 1, "line": 2}]
        }
    )
    _write_artifact(
        library, "my_contract",
        exports=[["behaviour_info", 1]],
        attributes={"callbacks": [["init", 1]]}
    )

    return artifacts, library


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_loggingが差し替えたルートロガーのハンドラーを元に戻す。"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clean_xref_env(monkeypatch):
    """環境変数による設定の上書きを無効にする。"""
    monkeypatch.delenv("XREF_ARTIFACT_DIR", raising=False)
    monkeypatch.delenv("XREF_LIBRARY_PATH", raising=False)
