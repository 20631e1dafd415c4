"""Account endpoints.

Registration and certification are unauthenticated; the certification
token or the account id in the path is the only credential. Account reads
require a bearer access token.
"""

from fastapi import APIRouter

from accountkit.api.deps import CurrentAccountId, ServicesDep, unwrap
from accountkit.api.v1.schemas import AccountResponse, RegisterAccountRequest
from accountkit.core.responses import DataResponse

router = APIRouter()


# ===================================================================
# POST /accounts
# ===================================================================


@router.post("", status_code=201)
async def register_account(
    body: RegisterAccountRequest,
    services: ServicesDep,
) -> DataResponse[AccountResponse]:
    """Register an account and email its certification link.

    The account cannot log in until the link is redeemed.
    """
    registered = unwrap(
        await services.registration.register(
            body.email, body.screen_name, body.password
        )
    )
    return DataResponse(
        data=AccountResponse(id=registered.id, screen_name=registered.screen_name)
    )


# ===================================================================
# GET /accounts/me, GET /accounts/{account_id}
# ===================================================================


@router.get("/me")
async def get_current_account(
    account_id: CurrentAccountId,
    services: ServicesDep,
) -> DataResponse[AccountResponse]:
    """Profile of the account the access token was issued to."""
    profile = unwrap(await services.account_query.get_account(account_id))
    return DataResponse(
        data=AccountResponse(id=profile.id, screen_name=profile.screen_name)
    )


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    _caller: CurrentAccountId,
    services: ServicesDep,
) -> DataResponse[AccountResponse]:
    profile = unwrap(await services.account_query.get_account(account_id))
    return DataResponse(
        data=AccountResponse(id=profile.id, screen_name=profile.screen_name)
    )


# ===================================================================
# PUT /accounts/certification/...
# ===================================================================


@router.put("/certification/token/{account_id}", status_code=204)
async def resend_certification(account_id: str, services: ServicesDep) -> None:
    """Rotate the certification token and send a new link.

    The previous link stops working immediately.
    """
    unwrap(await services.certification.replace(account_id))


@router.put("/certification/{token}", status_code=204)
async def redeem_certification(token: str, services: ServicesDep) -> None:
    """Certificate the account the token was issued for."""
    unwrap(await services.certification.redeem(token))
