from pathlib import Path
from typing import Callable, Optional

from layout.analyzer import LayoutAnalyzer

from .config import ChunkingServiceConfig
from .models import ChunkingResult
from .pipeline import ChunkPipeline
from .storage import ChunkingStorage


class ChunkingService:
    def __init__(
        self,
        config: ChunkingServiceConfig | None = None,
        analyzer: Optional[LayoutAnalyzer] = None,
        embedder: Optional[Callable[[str], list[float]]] = None,
    ):
        self.config = config or ChunkingServiceConfig()
        self.pipeline = ChunkPipeline(self.config.chunking, analyzer=analyzer, embedder=embedder)
        self.storage = ChunkingStorage(self.config.data_dir)

    def chunk_directory(self, directory_path: str) -> ChunkingResult:
        if not Path(directory_path).is_dir():
            raise FileNotFoundError(f"Directory not found: {directory_path}")
        return self.pipeline.chunk_directory(directory_path)

    def chunk_content(
        self,
        content: str,
        file_name: Optional[str] = None,
        url: str = "",
    ) -> ChunkingResult:
        return self.pipeline.chunk_content(content, file_name=file_name, url=url)

    def chunk_and_save(
        self,
        directory_path: str,
        output_name: Optional[str] = None,
    ) -> tuple[ChunkingResult, str]:
        output_name = output_name or self.config.output_name
        # Fail before chunking, not after
        self.storage.check_output_name(output_name)
        result = self.chunk_directory(directory_path)
        paths = self.storage.save(result, output_name)
        return result, str(paths.chunk_file)
