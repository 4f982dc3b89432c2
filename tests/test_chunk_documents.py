"""Tests for the chunk_documents command line script."""

import importlib.util
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from chunking.storage import ChunkingStorage

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "chunk_documents.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("chunk_documents", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    docs_dir = tmp_path / "docs"
    docs_dir.mkdir()
    (docs_dir / "a.txt").write_text("Notes\nThe command line chunks whole directories.", encoding="utf-8")
    return docs_dir


@pytest.fixture
def ollama_client():
    with patch("vector_store.embedder.ollama.Client") as MockClient:
        client = MockClient.return_value
        client.embed.return_value = {"embeddings": [[0.1] * 768]}
        client.list.return_value = MagicMock(models=[MagicMock(model="nomic-embed-text:latest")])
        yield client


def _run(cli, monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["chunk_documents.py", *args])
    return cli.main()


def test_writes_jsonl(cli, monkeypatch, docs: Path, tmp_path: Path) -> None:
    output = tmp_path / "out" / "chunks.jsonl"

    code = _run(cli, monkeypatch, "--input_data_path", str(docs), "--output_file_path", str(output))

    assert code == 0
    records = ChunkingStorage.load_jsonl(output)
    assert [r["id"] for r in records] == ["0"]
    assert records[0]["filepath"] == "a.txt"


def test_missing_input_directory(cli, monkeypatch, tmp_path: Path) -> None:
    output = tmp_path / "chunks.jsonl"
    code = _run(
        cli, monkeypatch,
        "--input_data_path", str(tmp_path / "missing"), "--output_file_path", str(output),
    )
    assert code == 1
    assert not output.exists()


def test_ollama_embeddings(cli, monkeypatch, ollama_client, docs: Path, tmp_path: Path) -> None:
    output = tmp_path / "chunks.jsonl"

    code = _run(
        cli, monkeypatch,
        "--input_data_path", str(docs), "--output_file_path", str(output),
        "--add-embeddings", "--embedding-provider", "ollama",
    )

    assert code == 0
    ollama_client.list.assert_called_once()
    records = ChunkingStorage.load_jsonl(output)
    assert records[0]["contentVector"] == [0.1] * 768


def test_ollama_model_missing_stops_before_chunking(
    cli, monkeypatch, ollama_client, docs: Path, tmp_path: Path
) -> None:
    ollama_client.list.return_value = MagicMock(models=[MagicMock(model="llama3:latest")])
    output = tmp_path / "chunks.jsonl"

    code = _run(
        cli, monkeypatch,
        "--input_data_path", str(docs), "--output_file_path", str(output),
        "--add-embeddings", "--embedding-provider", "ollama",
    )

    assert code == 1
    ollama_client.embed.assert_not_called()
    assert not output.exists()


def test_ollama_not_running(cli, monkeypatch, ollama_client, docs: Path, tmp_path: Path) -> None:
    ollama_client.list.side_effect = ConnectionError("refused")
    output = tmp_path / "chunks.jsonl"

    code = _run(
        cli, monkeypatch,
        "--input_data_path", str(docs), "--output_file_path", str(output),
        "--add-embeddings", "--embedding-provider", "ollama",
    )

    assert code == 1
    assert not output.exists()
