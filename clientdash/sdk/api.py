"""
API access layer for the client dashboard.

Single point of contact with the remote service: builds URLs from the
configured base URL, attaches the session's bearer token, decodes JSON
bodies and turns every failure into one :class:`ApiError`.

Usage:
    session = SessionContext(FileTokenStore("~/.config/clientdash/session.json"))
    async with ApiService() as api:
        await api.authenticate(session, "me@example.com", "secret1")
        clients = await api.list_clients(session)
"""

import logging
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from clientdash.core.config import normalize_url, settings
from clientdash.sdk.errors import ApiError, ErrorKind
from clientdash.sdk.models import ClientData, ClientPatch, ClientRecord, Message, User
from clientdash.sdk.session import SessionContext

logger = logging.getLogger(__name__)

ClientInput = Union[ClientData, Mapping[str, Any]]
ClientPatchInput = Union[ClientPatch, Mapping[str, Any]]

M = TypeVar("M", bound=BaseModel)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc']) or 'input'}: {e['msg']}" for e in error.errors()
    )


def _payload(model: Type[Union[ClientData, ClientPatch]], data: Any) -> dict:
    """
    Validate caller input with the form rules before it is sent.

    Raises:
        ApiError: VALIDATION, without a status, when a mapping breaks the rules
    """
    if not isinstance(data, model):
        try:
            data = model.model_validate(dict(data))
        except ValidationError as e:
            raise ApiError(None, _describe(e), ErrorKind.VALIDATION) from e
    return data.to_payload()


class ApiService:
    """
    Asynchronous REST client.

    Args:
        base_url: Service root; defaults to ``settings.CLIENTDASH_API_URL``.
            A trailing slash is stripped.
        timeout: Seconds per request; defaults to ``settings.API_TIMEOUT``.
        transport: Custom httpx transport (tests mount the ASGI app here).
        http_client: Pre-built ``httpx.AsyncClient``; not closed by this class.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = normalize_url(base_url or settings.CLIENTDASH_API_URL)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.API_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ==================== Transport ====================

    async def _send(
        self,
        method: str,
        path: str,
        *,
        session: Optional[SessionContext] = None,
        json: Any = None,
        log_path: Optional[str] = None,
    ) -> httpx.Response:
        """
        Perform one exchange.

        ``session`` is given for endpoints that require authentication.

        Raises:
            ApiError: non-2xx status (kind from the status) or transport
                failure (NETWORK)
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if session is not None:
            headers.update(session.auth_headers())

        try:
            response = await self._client.request(
                method, f"{self.base_url}{path}", json=json, headers=headers
            )
        except httpx.RequestError as e:
            logger.debug(f"{method} {log_path or path} failed: {e!r}")
            raise ApiError.network(f"Network error: {e}") from e

        logger.debug(f"{method} {log_path or path} -> {response.status_code}")
        if not response.is_success:
            raise ApiError.from_response(response.status_code, self._json_or_none(response))
        return response

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _decode(response: httpx.Response, model: Type[M], many: bool = False) -> Any:
        """
        Parse a 2xx body into ``model`` (or a list of them).

        Raises:
            ApiError: SERVER when the body is not JSON or has the wrong shape
        """
        try:
            payload = response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid JSON in response", ErrorKind.SERVER) from e

        try:
            if many:
                if not isinstance(payload, list):
                    raise ApiError(response.status_code, "Expected a list in response", ErrorKind.SERVER)
                return [model.model_validate(item) for item in payload]
            return model.model_validate(payload)
        except ValidationError as e:
            logger.debug(f"Unexpected response format: {_describe(e)}")
            raise ApiError(response.status_code, "Unexpected response format", ErrorKind.SERVER) from e

    async def _request(self, method: str, path: str, model: Type[M], *, many: bool = False, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)
        return self._decode(response, model, many=many)

    # ==================== Auth ====================

    def _begin_session(self, session: SessionContext, user: User) -> User:
        if not user.token:
            raise ApiError(200, "Response did not include a token", ErrorKind.SERVER)
        session.begin(user)
        return user

    async def authenticate(self, session: SessionContext, email: str, password: str) -> User:
        user = await self._request(
            "POST", "/users/loginUser", User, json={"email": email, "password": password}
        )
        return self._begin_session(session, user)

    async def register(self, session: SessionContext, name: str, email: str, password: str) -> User:
        user = await self._request(
            "POST", "/users/registerUser", User,
            json={"name": name, "email": email, "password": password},
        )
        return self._begin_session(session, user)

    async def end_session(self, session: SessionContext) -> None:
        """
        Best-effort remote logout. The local token is always cleared and a
        failed remote call is only logged.
        """
        try:
            if session.token:
                await self._send("POST", "/users/logoutUser", session=session)
        except ApiError as e:
            logger.warning(f"Logout API call failed: {e}")
        finally:
            session.clear()

    async def fetch_profile(self, session: SessionContext) -> User:
        """
        Profile of the token's owner. An auth failure (expired or revoked
        token) ends the local session before the error propagates.
        """
        try:
            user = await self._request("GET", "/users/getProfile", User, session=session)
        except ApiError as e:
            if e.kind is ErrorKind.AUTH:
                session.clear()
            raise
        session.user = user
        return user

    async def request_password_reset(self, session: SessionContext, email: str) -> Message:
        return await self._request("POST", "/users/forgot-password", Message, json={"email": email})

    async def complete_password_reset(
        self, session: SessionContext, reset_token: str, new_password: str
    ) -> Message:
        return await self._request(
            "POST", f"/users/reset-password/{_segment(reset_token)}", Message,
            json={"password": new_password},
            log_path="/users/reset-password/***",
        )

    # ==================== Clients ====================

    async def list_clients(self, session: SessionContext) -> List[ClientRecord]:
        return await self._request("GET", "/clients", ClientRecord, many=True, session=session)

    async def get_client(self, session: SessionContext, client_id: str) -> ClientRecord:
        return await self._request("GET", f"/clients/{_segment(client_id)}", ClientRecord, session=session)

    async def get_client_by_email(self, session: SessionContext, email: str) -> ClientRecord:
        return await self._request(
            "GET", f"/clients/email/{_segment(email)}", ClientRecord, session=session
        )

    async def create_client(self, session: SessionContext, data: ClientInput) -> ClientRecord:
        return await self._request(
            "POST", "/clients", ClientRecord, session=session, json=_payload(ClientData, data)
        )

    async def replace_client(
        self, session: SessionContext, client_id: str, data: ClientInput
    ) -> ClientRecord:
        return await self._request(
            "PUT", f"/clients/{_segment(client_id)}", ClientRecord,
            session=session, json=_payload(ClientData, data),
        )

    async def patch_client(
        self, session: SessionContext, client_id: str, partial: ClientPatchInput
    ) -> ClientRecord:
        return await self._request(
            "PATCH", f"/clients/{_segment(client_id)}", ClientRecord,
            session=session, json=_payload(ClientPatch, partial),
        )

    async def delete_client(self, session: SessionContext, client_id: str) -> Message:
        return await self._request("DELETE", f"/clients/{_segment(client_id)}", Message, session=session)
