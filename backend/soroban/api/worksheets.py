import logging
from fastapi import APIRouter, HTTPException, Response

from soroban.api.schemas import WorksheetPdfRequest, WorksheetRequest
from soroban.core.errors import ConfigurationError
from soroban.services.pdf import get_pdf_service
from soroban.services.telemetry import instrument
from soroban.services.worksheet import generate_worksheet

logger = logging.getLogger("soroban.api.worksheets")
router = APIRouter(prefix="/api/v1/worksheets", tags=["worksheets-v1"])


def _build(req: WorksheetRequest) -> dict:
    try:
        config = req.config.to_rule_config()
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return generate_worksheet(
        config,
        examples_count=req.examples_count,
        show_answers=req.show_answers,
        seed=req.seed,
    )


@router.post("/generate")
@instrument(route="/api/v1/worksheets/generate", version="v1")
def create_worksheet(req: WorksheetRequest):
    return _build(req)


@router.post("/export-pdf")
@instrument(route="/api/v1/worksheets/export-pdf", version="v1")
def export_worksheet_pdf(req: WorksheetPdfRequest):
    worksheet = _build(req)
    pdf_bytes = get_pdf_service().generate_worksheet_pdf(worksheet, pdf_type=req.pdf_type)
    filename = f"soroban-worksheet-{req.pdf_type}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
