"""Facebook access token validation against the Graph API."""

import hashlib
import hmac
import logging
from dataclasses import dataclass

import httpx
from authlib.integrations.httpx_client import AsyncOAuth2Client

from .config import Settings
from .errors import InvalidTokenError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FacebookIdentity:
    """A verified Facebook profile."""

    facebook_id: str
    name: str
    email: str | None
    picture: str


def appsecret_proof(access_token: str, app_secret: str) -> str:
    """HMAC-SHA256 of the access token keyed by the app secret."""
    return hmac.new(
        app_secret.encode(), access_token.encode(), hashlib.sha256
    ).hexdigest()


def identity_from_profile(profile: dict) -> FacebookIdentity:
    """Build an identity from a ``/me`` response body.

    Raises:
        InvalidTokenError: a required field is absent or has the wrong shape.
    """
    facebook_id = profile.get("id")
    name = profile.get("name")
    if not isinstance(facebook_id, str) or not facebook_id:
        raise InvalidTokenError("Facebook profile is missing an id.")
    if not isinstance(name, str) or not name:
        raise InvalidTokenError("Facebook profile is missing a name.")

    picture = profile.get("picture")
    data = picture.get("data") if isinstance(picture, dict) else None
    url = data.get("url") if isinstance(data, dict) else None
    if not isinstance(url, str) or not url:
        raise InvalidTokenError("Facebook profile is missing a picture.")

    email = profile.get("email")
    return FacebookIdentity(
        facebook_id=facebook_id,
        name=name,
        email=email if isinstance(email, str) and email else None,
        picture=url,
    )


class FacebookTokenValidator:
    """Exchanges an opaque access token for a :class:`FacebookIdentity`.

    The token is sent as an OAuth2 bearer credential and never appears in a
    URL or a log line.
    """

    def __init__(
        self,
        graph_url: str = "https://graph.facebook.com",
        app_secret: str = "",
        timeout: float = 10.0,
        picture_size: int = 400,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.graph_url = graph_url.rstrip("/")
        self.app_secret = app_secret
        self.timeout = timeout
        self.fields = (
            f"id,name,email,picture.width({picture_size}).height({picture_size})"
        )
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "FacebookTokenValidator":
        return cls(
            graph_url=settings.facebook_graph_url,
            app_secret=settings.facebook_app_secret,
            timeout=settings.facebook_timeout_seconds,
            picture_size=settings.facebook_picture_size,
        )

    async def validate(self, access_token: str) -> FacebookIdentity:
        """Resolve ``access_token`` to the profile it belongs to.

        Raises:
            InvalidTokenError: the token is empty, Facebook rejected it, or
                the profile lacks a required field.
            UpstreamUnavailableError: the Graph API could not be reached or
                returned something other than a JSON profile or error.
        """
        if not access_token:
            raise InvalidTokenError("Access token is required.")

        params = {"fields": self.fields}
        if self.app_secret:
            params["appsecret_proof"] = appsecret_proof(access_token, self.app_secret)

        client = AsyncOAuth2Client(
            token={"access_token": access_token, "token_type": "Bearer"},
            timeout=self.timeout,
            transport=self._transport,
        )
        try:
            async with client:
                resp = await client.get(f"{self.graph_url}/me", params=params)
        except httpx.TimeoutException as exc:
            logger.warning("Facebook Graph API timed out after %ss", self.timeout)
            raise UpstreamUnavailableError() from exc
        except httpx.HTTPError as exc:
            logger.warning("Facebook Graph API request failed: %s", type(exc).__name__)
            raise UpstreamUnavailableError() from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            logger.warning(
                "Facebook Graph API returned a non-JSON body (status %s)",
                resp.status_code,
            )
            raise UpstreamUnavailableError() from exc

        if isinstance(payload, dict) and "error" in payload:
            error = payload["error"] if isinstance(payload["error"], dict) else {}
            logger.info(
                "Facebook rejected access token: type=%s code=%s",
                error.get("type"), error.get("code"),
            )
            raise InvalidTokenError()

        if resp.status_code >= 500 or not isinstance(payload, dict):
            logger.warning("Facebook Graph API answered status %s", resp.status_code)
            raise UpstreamUnavailableError()
        if resp.status_code >= 400:
            raise InvalidTokenError()

        return identity_from_profile(payload)
