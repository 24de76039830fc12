"""
Cliente del servicio de identidad externo (email/contraseña).

La consola no gestiona contraseñas ni sesiones: inicia sesión, crea y borra
cuentas y envía correos de restablecimiento a través de la API REST del
proveedor. Los códigos de error del proveedor se traducen a la taxonomía de
``app.core.errors``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.core.config import get_settings
from app.core.errors import (
    BackendUnavailableError,
    EmailAlreadyInUseError,
    IdentityServiceError,
    InvalidCredentialsError,
    WeakPasswordError,
)

logger = logging.getLogger(__name__)

_ERROR_MAP = {
    "EMAIL_EXISTS": EmailAlreadyInUseError,
    "WEAK_PASSWORD": WeakPasswordError,
    "INVALID_PASSWORD": InvalidCredentialsError,
    "EMAIL_NOT_FOUND": InvalidCredentialsError,
    "INVALID_LOGIN_CREDENTIALS": InvalidCredentialsError,
    "USER_DISABLED": InvalidCredentialsError,
}


@dataclass(frozen=True)
class IdentityAccount:
    uid: str
    email: str
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class IdentityServiceClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.AUTH_API_KEY
        self.base_url = (base_url or settings.AUTH_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS
        self.transport = transport

    async def _post(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/accounts:{action}"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Servicio de identidad no disponible ({action}): {e}")
            raise BackendUnavailableError("El servicio de autenticación no está disponible") from e

        if response.status_code >= 400:
            raise self._map_error(action, response)
        return response.json()

    @staticmethod
    def _map_error(action: str, response: httpx.Response) -> IdentityServiceError:
        try:
            message = response.json().get("error", {}).get("message", "")
        except ValueError:
            message = response.text
        # "WEAK_PASSWORD : Password should be at least 6 characters"
        code = message.split(":")[0].strip()
        logger.warning(f"Servicio de identidad rechazó {action}: {code} (HTTP {response.status_code})")
        error_cls = _ERROR_MAP.get(code)
        if error_cls is not None:
            return error_cls()
        return IdentityServiceError(f"Error del servicio de autenticación: {code or response.status_code}")

    @staticmethod
    def _account(data: Dict[str, Any]) -> IdentityAccount:
        expires_in = data.get("expiresIn")
        return IdentityAccount(
            uid=data["localId"],
            email=data.get("email", ""),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            expires_in=int(expires_in) if expires_in else None,
        )

    async def sign_in(self, email: str, password: str) -> IdentityAccount:
        data = await self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._account(data)

    async def create_account(self, email: str, password: str) -> IdentityAccount:
        data = await self._post(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info(f"Cuenta de identidad creada: {data.get('localId')}")
        return self._account(data)

    async def delete_account(self, id_token: str) -> None:
        await self._post("delete", {"idToken": id_token})
        logger.info("Cuenta de identidad eliminada")

    async def send_password_reset(self, email: str) -> None:
        await self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info(f"Email de restablecimiento de contraseña enviado a {email}")


def get_identity_client() -> IdentityServiceClient:
    """Dependencia FastAPI; los tests la sustituyen por un cliente con MockTransport."""
    return IdentityServiceClient()
