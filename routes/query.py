from fastapi import APIRouter, Depends

from core.context import Context, get_context
from schemas.query import QueryRequest, QueryResponse, parse_selection
from services.resolver import QueryResolver

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResponse)
def run_query(data: QueryRequest, ctx: Context = Depends(get_context)):
    """Resolve one root query and only the nested fields it selects.

    An unknown id yields ``{"data": {<root>: null}}`` with a 200 status.
    """
    selection = parse_selection(data.fields)
    return QueryResolver(ctx).resolve(data.root, data.id, selection)
