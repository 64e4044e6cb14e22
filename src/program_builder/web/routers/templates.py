"""Template library routes."""

from fastapi import APIRouter, Query, Request

from ...db.repositories import TemplateRepository
from ...models.templates import TemplateKind

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/{kind}")
async def search_templates(
    kind: TemplateKind,
    request: Request,
    search: str | None = None,
    ids: list[str] | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Search workout or exercise templates by name."""
    repo = TemplateRepository(request.app.state.db_path)
    filters = {}
    if search:
        filters["search"] = search
    if ids is not None:
        filters["ids"] = ids
    records = await repo.search(kind, filters, page, page_size)
    return {"kind": kind.value, "page": page, "pageSize": page_size, "data": records}
