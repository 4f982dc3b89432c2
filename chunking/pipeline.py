"""
Chunk Pipeline - turns files and directories into chunk records

Per file:
1. Detect the format from the file extension (restricted to
   config.extensions_to_process).
2. Extract content: text files are read as UTF-8; PDF/DOCX/PPTX go through
   the layout analyzer and the structural extractor.
3. Parse: clean whitespace and extract a title (format handler table).
4. Split into token-bounded, overlapping chunks.
5. Drop chunks below config.min_chunk_size (counted as skipped).
6. Optionally embed every chunk through the EmbeddingRetrier.

Error policy:
- Unsupported files are counted in num_unsupported_format_files.
- Any other per-file failure is counted in num_files_with_errors and the
  file's partial chunks are discarded.
- With config.strict both are raised instead of counted.
- ConfigurationError (no tokenizer, no analyzer for PDFs, no embedder) is
  always raised.

Usage:
    from chunking import ChunkPipeline, ChunkingConfig

    pipeline = ChunkPipeline(ChunkingConfig(chunk_size=512, token_overlap=64))
    result = pipeline.chunk_directory("data/docs")
    print(result.total_files, len(result.chunks), result.skipped_chunks)
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from layout.analyzer import LayoutAnalyzer
from layout.models import AnalysisMode

from .exceptions import (
    ChunkingError,
    ConfigurationError,
    ExtractionFailureError,
    UnsupportedFormatError,
    format_error_chain,
)
from .formats import (
    LAYOUT_FORMATS,
    DocumentFormat,
    get_file_format,
    parse_content,
    split_content,
)
from .models import ChunkingConfig, ChunkingResult, Document, RawChunk
from .pdf_structure import extract_layout_text
from .retry import EmbeddingRetrier
from .token_counter import TokenCounter, get_token_counter

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def to_posix(path: str) -> str:
    """Convert an (escaped) Windows path to forward slashes."""
    return path.replace("\\\\", "\\").replace("\\", "/")


def read_text_file(path: Path) -> str:
    """Read a file as UTF-8, replacing undecodable bytes instead of failing."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning(f"{path.name} is not valid UTF-8, decoding with replacement characters")
        return path.read_bytes().decode("utf-8", errors="replace")


class ChunkPipeline:
    """
    Chunks content, files and directory trees into Document records.

    The pipeline holds no per-call state and can be shared between worker
    threads.
    """

    def __init__(
        self,
        config: Optional[ChunkingConfig] = None,
        token_counter: Optional[TokenCounter] = None,
        analyzer: Optional[LayoutAnalyzer] = None,
        embedder: Optional[Callable[[str], list[float]]] = None,
        retrier: Optional[EmbeddingRetrier] = None,
    ):
        self.config = config or ChunkingConfig()
        self.token_counter = token_counter or get_token_counter()
        self.analyzer = analyzer
        self.embedder = embedder
        self.retrier = retrier or EmbeddingRetrier()

        if self.config.add_embeddings and self.embedder is None:
            raise ConfigurationError("add_embeddings is set but no embedder was provided")

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def chunk_content(
        self,
        content: str,
        file_name: Optional[str] = None,
        url: str = "",
        cracked_pdf: bool = False,
    ) -> ChunkingResult:
        """
        Chunk already extracted content.

        Args:
            content: Document text (or HTML)
            file_name: Used to detect the format; None means plain text
            url: Copied to every chunk
            cracked_pdf: Content came out of layout analysis

        Returns:
            ChunkingResult for exactly one file
        """
        try:
            file_format = self._content_format(file_name, cracked_pdf)
            raw_chunks = self._raw_chunks(content, file_name or "", file_format, url)
            chunks, skipped = self._finalize(raw_chunks)
        except ConfigurationError:
            raise
        except UnsupportedFormatError as e:
            if self.config.strict:
                raise
            logger.warning(f"Skipping {e.file_name}: unsupported format")
            return ChunkingResult.unsupported()
        except Exception as e:
            if self.config.strict:
                raise
            logger.error(f"Chunking {file_name or '<content>'} failed:\n{format_error_chain(e)}")
            return ChunkingResult.failed()

        return ChunkingResult(chunks=chunks, total_files=1, skipped_chunks=skipped)

    def _content_format(self, file_name: Optional[str], cracked_pdf: bool) -> DocumentFormat:
        if file_name is None or (cracked_pdf and not self.config.use_layout):
            return DocumentFormat.TEXT
        if cracked_pdf:
            return DocumentFormat.PDF_HTML

        file_format = get_file_format(file_name, self.config.extensions_to_process)
        if file_format is None or file_format in LAYOUT_FORMATS:
            raise UnsupportedFormatError(file_name)
        return file_format

    def _raw_chunks(
        self,
        content: str,
        file_name: str,
        file_format: DocumentFormat,
        url: str,
    ) -> list[RawChunk]:
        cleaned, title = parse_content(content, file_format, file_name, self.token_counter)
        document = Document(content=cleaned, title=title, url=url)
        pieces = split_content(
            cleaned,
            file_format,
            chunk_size=self.config.chunk_size,
            chunk_overlap=self.config.token_overlap,
            token_counter=self.token_counter,
        )
        return [RawChunk(text, token_count, document) for text, token_count in pieces]

    def _finalize(self, raw_chunks: Iterable[RawChunk]) -> tuple[list[Document], int]:
        chunks: list[Document] = []
        skipped = 0
        for raw in raw_chunks:
            if raw.token_count < self.config.min_chunk_size:
                skipped += 1
                continue
            chunk = Document(content=raw.text, title=raw.document.title, url=raw.document.url)
            if self.config.add_embeddings:
                chunk.content_vector = self.retrier.embed(self.embedder, raw.text)
            chunks.append(chunk)
        return chunks, skipped

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def chunk_file(self, file_path: PathLike, url: str = "") -> ChunkingResult:
        """
        Chunk one file.

        Raises:
            ConfigurationError: The file needs layout analysis and no
                analyzer was provided
            UnsupportedFormatError / ChunkingError: Only in strict mode
        """
        path = Path(file_path)
        file_name = path.name
        file_format = get_file_format(file_name, self.config.extensions_to_process)

        if file_format is None:
            if self.config.strict:
                raise UnsupportedFormatError(file_name)
            logger.info(f"Skipping {file_name}: unsupported format")
            return ChunkingResult.unsupported()

        if file_format in LAYOUT_FORMATS and self.analyzer is None:
            raise ConfigurationError(f"A layout analyzer is required for {file_format.value} files")

        cracked_pdf = file_format in LAYOUT_FORMATS
        try:
            if cracked_pdf:
                content = self._extract_layout_content(path, file_format)
            else:
                content = read_text_file(path)
        except Exception as e:
            error = e if isinstance(e, ChunkingError) else ExtractionFailureError(file_name, e)
            if self.config.strict:
                if error is e:
                    raise
                raise error from e
            logger.error(f"Extraction of {file_name} failed:\n{format_error_chain(error)}")
            return ChunkingResult.failed()

        return self.chunk_content(content, file_name=file_name, url=url, cracked_pdf=cracked_pdf)

    def _extract_layout_content(self, path: Path, file_format: DocumentFormat) -> str:
        mode = AnalysisMode.LAYOUT if self.config.use_layout else AnalysisMode.READ
        try:
            result = self.analyzer.analyze(path.read_bytes(), mode, file_format.value)
        except Exception as e:
            raise ExtractionFailureError(path.name, e) from e
        return extract_layout_text(result)

    def process_file(
        self,
        file_path: PathLike,
        directory_path: PathLike,
    ) -> tuple[ChunkingResult, bool]:
        """
        Chunk a file found while walking ``directory_path``.

        Sets the chunk URL to url_prefix + the relative path (forward
        slashes) and the chunk filepath to the relative path.

        Returns:
            (result, is_error)
        """
        relative_path = os.path.relpath(file_path, directory_path)
        url = to_posix(self.config.url_prefix + relative_path) if self.config.url_prefix else ""

        try:
            result = self.chunk_file(file_path, url=url)
        except ConfigurationError:
            raise
        except Exception as e:
            if self.config.strict:
                raise
            logger.error(f"File ({file_path}) failed:\n{format_error_chain(e)}")
            return ChunkingResult.failed(), True

        chunks = [chunk.model_copy(update={"filepath": relative_path}) for chunk in result.chunks]
        result = result.model_copy(update={"chunks": chunks})
        return result, result.num_files_with_errors > 0

    # -------------------------------------------------------------------------
    # Directories
    # -------------------------------------------------------------------------

    def chunk_directory(
        self,
        directory_path: PathLike,
        njobs: Optional[int] = None,
    ) -> ChunkingResult:
        """
        Chunk every file below ``directory_path``.

        Files are processed in sorted path order; with njobs > 1 they run
        in a thread pool and the per-file results are reduced in that same
        order.
        """
        njobs = njobs or self.config.njobs
        all_files = sorted(Path(directory_path).rglob("*"))
        files = [path for path in all_files if path.is_file()]
        self._check_analyzer(files)

        logger.info(
            f"Total files to process={len(files)} out of total directory size={len(all_files)}"
        )

        if njobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=njobs) as executor:
                outcomes = list(
                    executor.map(lambda path: self.process_file(path, directory_path), files)
                )
        else:
            outcomes = [self.process_file(path, directory_path) for path in files]

        result = ChunkingResult.combine(result for result, _ in outcomes)
        logger.info(
            f"Chunked {result.total_files} files into {len(result.chunks)} chunks "
            f"(unsupported={result.num_unsupported_format_files}, "
            f"errors={result.num_files_with_errors}, skipped chunks={result.skipped_chunks})"
        )
        return result

    def _check_analyzer(self, files: list[Path]) -> None:
        if self.analyzer is not None:
            return
        for path in files:
            file_format = get_file_format(path.name, self.config.extensions_to_process)
            if file_format in LAYOUT_FORMATS:
                raise ConfigurationError(
                    f"A layout analyzer is required for {file_format.value} files",
                    details=str(path),
                )
