"""Export routes returning downloadable files."""

from fastapi import APIRouter, Response

from promptlib.export import default_export_filename

from ..database import Library

router = APIRouter(prefix="/exports", tags=["exports"])

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
}


def _attachment(document: str, fmt: str) -> Response:
    filename = default_export_filename(fmt)
    return Response(
        content=document,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/csv")
async def export_csv(lib: Library):
    return _attachment(lib.export("csv"), "csv")


@router.get("/json")
async def export_json(lib: Library):
    return _attachment(lib.export("json"), "json")
