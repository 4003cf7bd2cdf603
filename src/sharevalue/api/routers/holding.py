"""Share holding endpoints."""

from fastapi import APIRouter, Depends

from sharevalue.api.deps import get_context
from sharevalue.api.schemas import SharesResponse, SharesUpdate
from sharevalue.app_context import AppContext

router = APIRouter(prefix="/holding", tags=["holding"])


@router.get("", response_model=SharesResponse)
async def get_shares(context: AppContext = Depends(get_context)) -> SharesResponse:
    return SharesResponse(shares=context.holding.shares)


@router.put("", response_model=SharesResponse)
async def set_shares(
    data: SharesUpdate,
    context: AppContext = Depends(get_context),
) -> SharesResponse:
    """Set the number of shares held."""
    return SharesResponse(shares=context.set_shares(data.shares))


@router.delete("", status_code=204)
async def clear_user_data(context: AppContext = Depends(get_context)) -> None:
    """Forget the share count and every scenario."""
    context.clear_user_data()
