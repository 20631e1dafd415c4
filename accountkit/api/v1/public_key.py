"""Public key endpoint for independent access token verification."""

from fastapi import APIRouter

from accountkit.api.deps import ServicesDep
from accountkit.api.v1.schemas import PublicKeyResponse
from accountkit.core.responses import DataResponse

router = APIRouter()


@router.get("")
async def get_public_key(services: ServicesDep) -> DataResponse[PublicKeyResponse]:
    return DataResponse(
        data=PublicKeyResponse(public_key=services.key_material.public_key_der_base64)
    )
