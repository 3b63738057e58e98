"""Identity provider HTTP client for social login"""

import httpx

from motorista_real.config import settings
from motorista_real.domain.exceptions import AuthProviderError
from motorista_real.domain.models import ProviderProfile


class IdentityProviderClient:
    """Client for the external identity provider (Google sign-in bridge)"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.identity_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_profile(self, id_token: str) -> ProviderProfile:
        """
        Exchange a provider ID token for the signed-in account's profile.

        Raises:
            AuthProviderError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/identity/me",
                    headers={"Authorization": f"Bearer {id_token}"},
                )
                response.raise_for_status()
                data = response.json()

                return ProviderProfile(
                    external_id=str(data["externalId"]),
                    email=data.get("email") or "",
                    display_name=data.get("displayName") or "",
                )

            except httpx.TimeoutException as e:
                raise AuthProviderError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AuthProviderError(f"Identity provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise AuthProviderError(f"Identity provider unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise AuthProviderError(f"Invalid profile data from identity provider: {e}") from e
