# storefront/services/identity_client.py
import requests
from requests import RequestException

from storefront.domain.errors import Internal, Unauthorized
from storefront.domain.principal import ROLES, Principal
from storefront.utils.retry import http_retry
from storefront.utils.settings import AUTH_SERVICE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class IdentityClient:
    """Resolves bearer credentials against the external auth service."""

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or AUTH_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _introspect(self, token: str) -> requests.Response:
        url = f"{self.base_url}/auth/introspect"
        logger.info(f"IdentityClient GET {url}")
        return requests.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )

    def resolve(self, token: str) -> Principal:
        try:
            resp = self._introspect(token)
        except RequestException as e:
            raise Internal(f"Identity service unavailable: {e}") from e

        if resp.status_code in (401, 403):
            raise Unauthorized("Unauthorized. Invalid or expired token.")
        if resp.status_code >= 400:
            raise Internal(f"Identity service returned {resp.status_code}")

        try:
            data = resp.json()
            principal = Principal(account_id=int(data["account_id"]), role=str(data["role"]))
        except (KeyError, TypeError, ValueError) as e:
            raise Internal(f"Malformed identity response: {e}") from e

        if principal.role not in ROLES:
            raise Unauthorized(f"Unknown role: {principal.role}")
        return principal
