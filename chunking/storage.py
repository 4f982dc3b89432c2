import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .models import ChunkingResult, Document


@dataclass
class ChunkingPaths:
    output_dir: Path
    chunk_file: Path


def assign_ids(chunks: Iterable[Document], start: int = 0) -> list[Document]:
    """Number chunks sequentially; the id is mirrored into metadata["chunk_id"]."""
    numbered = []
    for index, chunk in enumerate(chunks, start=start):
        chunk_id = str(index)
        metadata = {**chunk.metadata, "chunk_id": chunk_id}
        numbered.append(chunk.model_copy(update={"id": chunk_id, "metadata": metadata}))
    return numbered


class ChunkingStorage:
    """Writes chunking results as JSON Lines, one index record per line."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    @staticmethod
    def check_output_name(output_name: str) -> None:
        """Reject output names that would leave the data directory."""
        if not output_name or output_name in (".", "..") or Path(output_name).name != output_name:
            raise ValueError(f"Invalid output name: {output_name!r} (expected a plain file name)")

    def build_paths(self, output_name: str) -> ChunkingPaths:
        self.check_output_name(output_name)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return ChunkingPaths(output_dir=self.data_dir, chunk_file=self.data_dir / output_name)

    def write_jsonl(self, chunks: Iterable[Document], path: Path) -> int:
        """Write chunks to ``path`` with sequential ids. Returns the line count."""
        count = 0
        with open(path, "w", encoding="utf-8") as f:
            for chunk in assign_ids(chunks):
                f.write(json.dumps(chunk.to_index_record(), ensure_ascii=False) + "\n")
                count += 1
        return count

    def save(self, result: ChunkingResult, output_name: Optional[str] = None) -> ChunkingPaths:
        paths = self.build_paths(output_name or "chunks.jsonl")
        self.write_jsonl(result.chunks, paths.chunk_file)
        return paths

    @staticmethod
    def load_jsonl(path: Path) -> list[dict]:
        with open(path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
