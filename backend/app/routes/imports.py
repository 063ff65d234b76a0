"""Import routes.

The client uploads the file contents as text in a JSON body; the response
is the import report its progress bar and toast read.
"""

from fastapi import APIRouter, Request

from ..auth import CurrentUser
from ..database import Library
from ..logging_config import log_import_operation
from ..models import ImportReport, ImportRequest
from ..rate_limit import IMPORT_RATE_LIMIT, limiter

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/csv", response_model=ImportReport)
@limiter.limit(IMPORT_RATE_LIMIT)
async def import_csv(request: Request, payload: ImportRequest, user: CurrentUser, lib: Library):
    """Import CSV text into a category.

    Row failures are counted in ``errors`` and never fail the request.
    """
    progress = lib.import_csv(
        payload.content, payload.category_id, dry_run=payload.dry_run, from_text=True
    )
    report = progress.snapshot()
    log_import_operation(user.user_id, "csv", report)
    return report


@router.post("/json", response_model=ImportReport)
@limiter.limit(IMPORT_RATE_LIMIT)
async def import_json(request: Request, payload: ImportRequest, user: CurrentUser, lib: Library):
    """Import a JSON export into a category. A malformed document is a 400."""
    progress = lib.import_json(
        payload.content, payload.category_id, dry_run=payload.dry_run, from_text=True
    )
    report = progress.snapshot()
    log_import_operation(user.user_id, "json", report)
    return report
