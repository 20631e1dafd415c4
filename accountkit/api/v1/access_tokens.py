"""Login and refresh endpoints.

Both return {"data": {"accessToken": ...}}. The refresh token itself is
never returned separately; it travels inside the access token's rft claim.
"""

from fastapi import APIRouter

from accountkit.api.deps import ServicesDep, unwrap
from accountkit.api.v1.schemas import AccessTokenResponse, LoginRequest
from accountkit.core.responses import DataResponse

router = APIRouter()


@router.post("/login")
async def login(
    body: LoginRequest,
    services: ServicesDep,
) -> DataResponse[AccessTokenResponse]:
    """Exchange email and password for an access token.

    Security: unknown email, pending account and wrong password all produce
    the same 400 response.
    """
    issued = unwrap(await services.authentication.login(body.email, body.password))
    return DataResponse(data=AccessTokenResponse(access_token=issued.access_token))


@router.put("/refresh")
async def refresh_access_token(
    token: str,
    services: ServicesDep,
) -> DataResponse[AccessTokenResponse]:
    """Rotate a refresh token (query parameter) into a new access token.

    A refresh token works once; replaying it returns 409.
    """
    issued = unwrap(await services.token_rotation.refresh(token))
    return DataResponse(data=AccessTokenResponse(access_token=issued.access_token))
