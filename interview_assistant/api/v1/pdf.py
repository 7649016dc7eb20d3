import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Response

from interview_assistant.schemas.interview import PdfDownloadRequest
from interview_assistant.services.tools.report_generator import render_interview_report_pdf

logger = logging.getLogger(__name__)

pdf_router = APIRouter()


@pdf_router.post("/download-report")
async def download_report(request: PdfDownloadRequest):
    """
    Render the interview report and transcript as a PDF attachment.
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    download_filename = f"interview_report_{timestamp}.pdf"

    # reportlab is synchronous
    pdf_bytes = await asyncio.to_thread(render_interview_report_pdf, request.report, request.chat_history)

    logger.info(f"Generating download PDF file: {download_filename} ({len(pdf_bytes)} bytes)")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{download_filename}"'},
    )
