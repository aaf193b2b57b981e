import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdf_extractor.infrastructure import GeminiExtractionClient, configure_extraction_client
from pdf_extractor.routes import export, extraction, fields, summary
from pdf_extractor.settings import load_settings


def create_app() -> FastAPI:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    client: GeminiExtractionClient | None = None
    if settings.gemini_api_key:
        client = GeminiExtractionClient(
            settings.gemini_api_key,
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
            timeout=settings.extraction_timeout,
        )
        configure_extraction_client(client)
    else:
        logging.getLogger(__name__).warning("GEMINI_API_KEY not set; extractions will fail")

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        if client is not None:
            client.close()

    app = FastAPI(title="PDF Extractor API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(fields.router, prefix="/api")
    app.include_router(extraction.router, prefix="/api")
    app.include_router(summary.router, prefix="/api")
    app.include_router(export.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "PDF Extractor API",
                "docs": "/docs",
                "health": "/api/extractions",
            }
        )

    return app


app = create_app()
