"""Request headers carrying a tenant's Altinn credentials."""

from __future__ import annotations

from pydantic import SecretStr

from .config import AltinnConfig
from .errors import ConfigurationError
from .models import TenantConfig

HAL_JSON = "application/hal+json"
OCTET_STREAM = "application/octet-stream"


class CredentialProvider:
    """Builds per-tenant headers from the API keys in :class:`AltinnConfig`.

    JSON calls and binary downloads need different ``Accept`` headers;
    both carry the tenant's ``ApiKey``.
    """

    def __init__(self, config: AltinnConfig) -> None:
        self._config = config

    def _api_key(self, tenant: TenantConfig) -> SecretStr:
        key = self._config.api_keys.get(tenant.credential_ref, self._config.default_api_key)
        if key is None:
            raise ConfigurationError(
                f"no API key for credential reference {tenant.credential_ref!r} (org {tenant.org_id})"
            )
        return key

    def headers_for(self, tenant: TenantConfig) -> dict[str, str]:
        return {
            "Accept": HAL_JSON,
            "ApiKey": self._api_key(tenant).get_secret_value(),
        }

    def headers_for_download(self, tenant: TenantConfig) -> dict[str, str]:
        return {
            "Accept": OCTET_STREAM,
            "ApiKey": self._api_key(tenant).get_secret_value(),
        }
