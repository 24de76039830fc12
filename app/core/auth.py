import logging
from typing import Dict, List, Optional

import httpx
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import jwt

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Esquema Bearer para Swagger UI y extracción del token
bearer_scheme = HTTPBearer(auto_error=False)


def unauthorized_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class TokenVerifier:
    """
    Verifica los ID tokens emitidos por el servicio de identidad.

    Las claves públicas (JWKS) se descargan una vez y se guardan en la
    instancia; si aparece un ``kid`` desconocido se vuelven a descargar.
    """

    def __init__(
        self,
        jwks_url: Optional[str] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        algorithms: Optional[List[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.jwks_url = jwks_url or settings.AUTH_JWKS_URL
        self.audience = audience if audience is not None else settings.AUTH_AUDIENCE
        self.issuer = issuer if issuer is not None else settings.AUTH_ISSUER
        self.algorithms = algorithms or settings.AUTH_ALGORITHMS
        self.timeout = settings.AUTH_TIMEOUT_SECONDS
        self.transport = transport
        self.jwks: Optional[Dict] = None

    async def get_jwks(self, refresh: bool = False) -> Dict:
        if self.jwks is None or refresh:
            try:
                async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                    response = await client.get(self.jwks_url)
                    response.raise_for_status()
                    self.jwks = response.json()
            except httpx.HTTPError as e:
                logger.error(f"No se pudieron obtener las claves JWKS: {e}")
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="El servicio de autenticación no está disponible",
                ) from e
        return self.jwks

    def _find_key(self, jwks: Dict, kid: Optional[str]) -> Optional[Dict]:
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key
        return None

    async def verify_token(self, token: str) -> Dict:
        if not self.audience or not self.issuer:
            # audience e issuer son obligatorios
            logger.error("AUTH_AUDIENCE/AUTH_ISSUER sin configurar: se rechazan todos los tokens")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="El servicio de autenticación no está configurado",
            )

        try:
            unverified_header = jwt.get_unverified_header(token)
        except jwt.JWTError:
            raise unauthorized_error("Credenciales de autenticación inválidas")

        kid = unverified_header.get("kid")
        rsa_key = self._find_key(await self.get_jwks(), kid)
        if rsa_key is None:
            # Rotación de claves: reintentar una vez con el JWKS actualizado
            rsa_key = self._find_key(await self.get_jwks(refresh=True), kid)
        if rsa_key is None:
            raise unauthorized_error("Credenciales de autenticación inválidas")

        try:
            return jwt.decode(
                token,
                rsa_key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": True, "verify_iss": True},
            )
        except jwt.ExpiredSignatureError:
            raise unauthorized_error("El token ha expirado")
        except jwt.JWTClaimsError:
            raise unauthorized_error("Claims incorrectos: verifica audience y issuer")
        except jwt.JWTError:
            raise unauthorized_error("No se pudieron validar las credenciales")


token_verifier = TokenVerifier()


def get_token_verifier() -> TokenVerifier:
    return token_verifier
