import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..errors import ConflictError, ValidationError
from ..facebook import FacebookTokenValidator
from ..guards import get_store, get_token_validator
from ..store import UserStore
from ..users import reconcile

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class FacebookLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str | None = Field(default=None, alias="accessToken")


@router.post("/facebook")
async def facebook_login(
    req: FacebookLoginRequest,
    store: UserStore = Depends(get_store),
    validator: FacebookTokenValidator = Depends(get_token_validator),
):
    """Log in with a Facebook access token, signing up on first visit.

    200 with the stored user for a returning user, 201 for a new one.
    """
    if not req.access_token:
        raise ValidationError("Access token is required.")

    identity = await validator.validate(req.access_token)

    try:
        user, created = await reconcile(store, identity)
    except ConflictError:
        # Another request inserted first; the retry sees its row.
        logger.info(
            "Signup for facebook_id=%s raced another request, retrying",
            identity.facebook_id,
        )
        user, created = await reconcile(store, identity)

    return JSONResponse(user.to_dict(), status_code=201 if created else 200)
