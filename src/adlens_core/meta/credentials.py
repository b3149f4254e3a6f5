"""Meta app credentials and request signing."""
import hashlib
import hmac
import os

from pydantic import BaseModel, Field


DEFAULT_API_VERSION = "v24.0"


def generate_appsecret_proof(access_token: str, app_secret: str) -> str:
    """HMAC-SHA256 of the access token keyed by the app secret (hex digest)."""
    return hmac.new(
        app_secret.encode("utf-8"),
        access_token.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


class MetaCredentials(BaseModel):
    """Access token plus app secret used to sign every Graph request."""

    access_token: str = Field(..., min_length=1, description="User or system-user access token")
    app_secret: str = Field(..., min_length=1, description="App secret used for appsecret_proof")
    api_version: str = Field(DEFAULT_API_VERSION, description="Graph API version (e.g., v24.0)")

    @property
    def appsecret_proof(self) -> str:
        return generate_appsecret_proof(self.access_token, self.app_secret)

    @classmethod
    def from_env(cls) -> "MetaCredentials":
        """Load credentials from META_ACCESS_TOKEN / META_APP_SECRET.

        Raises:
            RuntimeError: If either variable is missing
        """
        access_token = os.getenv("META_ACCESS_TOKEN")
        app_secret = os.getenv("META_APP_SECRET")

        if not access_token or not app_secret:
            raise RuntimeError("META_ACCESS_TOKEN and META_APP_SECRET must be set")

        return cls(
            access_token=access_token,
            app_secret=app_secret,
            api_version=os.getenv("META_GRAPH_API_VERSION", DEFAULT_API_VERSION),
        )
