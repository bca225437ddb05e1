from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from reelroll.api.dependencies import BundleFactory, build_credentials, get_bundle_factory

router = APIRouter(tags=["validate"])


class ValidateRequest(BaseModel):
    plexIp: str | None = Field(default=None, description="Plex server address")
    plexToken: str | None = Field(default=None, description="Plex authentication token")


class ValidateResponse(BaseModel):
    valid: bool
    message: str
    serverId: str | None = None


@router.post("/validate", response_model=ValidateResponse)
async def validate_credentials(
    payload: ValidateRequest, factory: BundleFactory = Depends(get_bundle_factory)
) -> ValidateResponse:
    """
    Check that the Plex server is reachable and accepts the token.

    Failures surface with distinct statuses: 503 unreachable, 401 bad token,
    500 anything else.
    """
    credentials = build_credentials(payload.plexIp, payload.plexToken)
    bundle = factory(credentials)
    try:
        server_id = await bundle.auth.check_connection()
    finally:
        await bundle.close()
    return ValidateResponse(valid=True, message="Credentials validated successfully", serverId=server_id)
