from pathlib import Path

import pytest

from chunking.models import ChunkingResult, Document
from chunking.storage import ChunkingStorage, assign_ids


def _result() -> ChunkingResult:
    return ChunkingResult(
        chunks=[
            Document(content="first chunk", title="Doc", filepath="a.md", metadata={"lang": "en"}),
            Document(content="zweiter Abschnitt über Größen", title="Doc", filepath="a.md"),
        ],
        total_files=1,
    )


def test_assign_ids() -> None:
    chunks = assign_ids(_result().chunks)
    assert [c.id for c in chunks] == ["0", "1"]
    assert chunks[0].metadata == {"lang": "en", "chunk_id": "0"}
    assert chunks[1].metadata == {"chunk_id": "1"}


def test_assign_ids_does_not_modify_input() -> None:
    result = _result()
    assign_ids(result.chunks, start=10)
    assert result.chunks[0].id == ""
    assert "chunk_id" not in result.chunks[0].metadata


def test_chunking_storage_paths(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path / "out"))
    paths = storage.save(_result())
    assert paths.output_dir == tmp_path / "out"
    assert paths.chunk_file == tmp_path / "out" / "chunks.jsonl"
    assert paths.chunk_file.exists()


def test_jsonl_round_trip(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path))
    paths = storage.save(_result(), output_name="run.jsonl")

    records = ChunkingStorage.load_jsonl(paths.chunk_file)

    assert [r["id"] for r in records] == ["0", "1"]
    assert records[1]["content"] == "zweiter Abschnitt über Größen"
    assert records[0]["metadata"] == '{"lang": "en", "chunk_id": "0"}'
    assert "contentVector" not in records[0]


def test_non_ascii_written_verbatim(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path))
    paths = storage.save(_result())
    assert "Größen" in paths.chunk_file.read_text(encoding="utf-8")


def test_write_jsonl_count(tmp_path: Path) -> None:
    storage = ChunkingStorage(str(tmp_path))
    assert storage.write_jsonl([], tmp_path / "empty.jsonl") == 0
    assert storage.write_jsonl(_result().chunks, tmp_path / "two.jsonl") == 2


@pytest.mark.parametrize("output_name", ["../run.jsonl", "nested/run.jsonl", "/tmp/run.jsonl", "", ".."])
def test_build_paths_rejects_names_outside_data_dir(tmp_path: Path, output_name: str) -> None:
    storage = ChunkingStorage(str(tmp_path / "out"))
    with pytest.raises(ValueError, match="output name"):
        storage.build_paths(output_name)
    assert not (tmp_path / "run.jsonl").exists()
