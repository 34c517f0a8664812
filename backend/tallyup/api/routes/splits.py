"""
Share allocation preview routes.
"""
from fastapi import APIRouter
from tallyup.api.dependencies import share_error
from tallyup.core.exceptions import ShareAllocationError
from tallyup.core.money import round_money, sum_money
from tallyup.schemas.split import ShareAllocationRequest, RedistributeRequest, SharesResponse
from tallyup.services.share_service import allocate_shares, redistribute_remainder

router = APIRouter(prefix="/splits", tags=["splits"])


@router.post("/allocate", response_model=SharesResponse)
async def allocate(request: ShareAllocationRequest):
    """Compute the shares of an expense before it is submitted."""
    try:
        shares = allocate_shares(
            request.total_amount,
            request.participant_ids,
            request.split_type,
            request.custom_shares
        )
    except ShareAllocationError as e:
        raise share_error(e)

    return SharesResponse(
        shares=shares,
        total_amount=request.total_amount,
        remaining_amount=round_money(request.total_amount - sum_money(shares.values()))
    )


@router.post("/redistribute", response_model=SharesResponse)
async def redistribute(request: RedistributeRequest):
    """Spread the unallocated amount over participants without a share."""
    try:
        shares = redistribute_remainder(
            request.existing_shares,
            request.participant_ids,
            request.total_amount
        )
    except ShareAllocationError as e:
        raise share_error(e)

    return SharesResponse(
        shares=shares,
        total_amount=request.total_amount,
        remaining_amount=round_money(request.total_amount - sum_money(shares.values()))
    )
