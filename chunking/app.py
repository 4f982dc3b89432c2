from typing import Optional

from fastapi import FastAPI, HTTPException

from .exceptions import ChunkingError, ConfigurationError
from .logging_config import setup_logging
from .models import (
    ChunkRequest,
    ChunkResponse,
    ContentChunkRequest,
    ContentChunkResponse,
)
from .service import ChunkingService


def create_app(service: Optional[ChunkingService] = None) -> FastAPI:
    service = service or ChunkingService()
    app = FastAPI(
        title="Chunking Service",
        version="1.0.0",
        description="Token-bounded document chunking service.",
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/chunk", response_model=ChunkResponse)
    def chunk(request: ChunkRequest) -> ChunkResponse:
        try:
            result, output_path = service.chunk_and_save(
                request.directory_path, request.output_name
            )
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ConfigurationError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ChunkingError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return ChunkResponse(
            output_path=output_path,
            total_files=result.total_files,
            num_unsupported_format_files=result.num_unsupported_format_files,
            num_files_with_errors=result.num_files_with_errors,
            skipped_chunks=result.skipped_chunks,
            total_chunks=len(result.chunks),
        )

    @app.post("/chunk/content", response_model=ContentChunkResponse)
    def chunk_content(request: ContentChunkRequest) -> ContentChunkResponse:
        try:
            result = service.chunk_content(request.content, request.file_name, request.url)
        except ChunkingError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        if result.num_unsupported_format_files:
            raise HTTPException(
                status_code=415, detail=f"{request.file_name} is not supported"
            )
        if result.num_files_with_errors:
            raise HTTPException(status_code=500, detail="Chunking failed")
        return ContentChunkResponse(chunks=result.chunks, skipped_chunks=result.skipped_chunks)

    return app


def main() -> None:
    import uvicorn

    setup_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
