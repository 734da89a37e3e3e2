"""Static consent collection page."""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

STATIC_DIR = Path(__file__).resolve().parents[2] / "static"

router = APIRouter(prefix="/consent", tags=["consent-page"])


@router.get("", include_in_schema=False)
async def show_consent_page() -> FileResponse:
    """Serve the consent page.

    The page reads its ``consent_jwt`` and ``target`` query parameters and
    does all of its work client-side.
    """
    return FileResponse(STATIC_DIR / "consent.html", media_type="text/html")
