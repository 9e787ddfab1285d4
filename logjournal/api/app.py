"""
HTTP endpoint for on-demand PDF generation.
"""

import asyncio
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.logging import get_logger, log_error_with_context
from ..export.pdf_pages import PagePerEntryPdfRenderer, to_data_uri
from ..export.schemas import ExportRequest
from ..settings import AppSettings, get_settings


logger = get_logger(__name__)

PDF_ERROR_MESSAGE = "PDF 생성 중 오류가 발생했습니다."


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Build the FastAPI application serving ``POST /api/pdf``."""
    settings = settings or get_settings()
    renderer = PagePerEntryPdfRenderer(
        font_path=settings.export.font_path,
        cid_font=settings.export.cid_font
    )

    app = FastAPI(title=settings.name, version=settings.version)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/api/pdf")
    async def generate_pdf(request: Request):
        try:
            body = await request.json()
            export_request = ExportRequest.model_validate(body)
            # Rendering blocks, so it runs off the event loop.
            payload = await asyncio.to_thread(
                renderer.render, export_request.logs, export_request.template
            )
        except Exception as e:
            log_error_with_context(e, {"endpoint": "/api/pdf"}, __name__)
            return JSONResponse(status_code=500, content={"error": PDF_ERROR_MESSAGE})

        logger.info(
            f"Generated PDF for {len(export_request.logs)} entries "
            f"({payload.page_count} pages, file name '{export_request.file_name}')"
        )
        return {"pdfUrl": to_data_uri(payload)}

    return app
