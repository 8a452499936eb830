"""
Podio API Client - Remote operations for organizations, spaces, apps and fields.

The client holds fixed credentials and the access token obtained once by
authenticate_with_credentials(). Every request opens its own aiohttp
session, so one client can be shared by concurrent tasks.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from models import AppField, Application, Organization, Space

logger = logging.getLogger(__name__)

DEFAULT_WEB_URL = "https://podio.com"

ModelT = TypeVar("ModelT", bound=BaseModel)


class PodioAPIError(Exception):
    """Raised when a Podio API call fails."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{message}")

    @property
    def is_not_found(self) -> bool:
        # Podio answers 410 Gone for deleted objects
        return self.status in (404, 410)


def _parse(model: Type[ModelT], body: Any) -> ModelT:
    """Build a model from a response body."""
    try:
        return model.model_validate(body)
    except ModelValidationError as e:
        raise PodioAPIError(None, f"unexpected response: {e}") from e


def _created_id(body: Any, key: str) -> int:
    """Read the id of a newly created object from a create response."""
    try:
        return body[key]
    except (KeyError, TypeError) as e:
        raise PodioAPIError(None, f"unexpected response: missing {key}") from e


class PodioClient:
    """Async client for the subset of the Podio API the controllers need."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        api_url: str = "https://api.podio.com",
        user_agent: str = "podio-controller",
        timeout: int = 30,
        web_url: str = DEFAULT_WEB_URL,
    ):
        self.api_key = api_key
        self._api_secret = api_secret
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.web_url = web_url.rstrip("/")
        self._access_token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self._access_token is not None

    async def authenticate_with_credentials(self, username: str, password: str) -> None:
        """
        Obtain an access token using the password grant.

        Raises:
            PodioAPIError: If authentication fails
        """
        body = await self._request(
            "POST",
            "/oauth/token",
            data={
                "grant_type": "password",
                "username": username,
                "password": password,
                "client_id": self.api_key,
                "client_secret": self._api_secret,
            },
            authenticated=False,
        )
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise PodioAPIError(None, "authentication response contained no access token")
        self._access_token = token
        logger.info("Authenticated with Podio")

    async def _error_message(self, resp: aiohttp.ClientResponse) -> str:
        text = await resp.text()
        try:
            body = json.loads(text)
        except (ValueError, TypeError):
            return text or f"HTTP {resp.status}"
        if isinstance(body, dict):
            return (
                body.get("error_description")
                or body.get("error")
                or text
            )
        return text

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Make a request to the Podio API.

        Returns:
            The decoded JSON body, or None for empty responses

        Raises:
            PodioAPIError: On HTTP error status or transport failure
        """
        url = f"{self.api_url}{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if authenticated:
            if self._access_token is None:
                raise PodioAPIError(None, "client is not authenticated")
            headers["Authorization"] = f"OAuth2 {self._access_token}"

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        logger.debug(f"Podio request: {method} {path}")

        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
                async with session.request(
                    method, url, json=json_body, params=params, data=data
                ) as resp:
                    if resp.status >= 400:
                        raise PodioAPIError(resp.status, await self._error_message(resp))
                    if resp.status == 204:
                        return None
                    text = await resp.text()
                    try:
                        return json.loads(text) if text else None
                    except ValueError as e:
                        raise PodioAPIError(
                            resp.status, f"unexpected response: invalid JSON ({e})"
                        ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PodioAPIError(None, f"{method} {path} failed: {e}") from e

    # Organizations (read-only)

    async def get_organization(self, org_id: int) -> Organization:
        body = await self._request("GET", f"/org/{org_id}")
        return _parse(Organization, body)

    async def get_organization_by_slug(self, url_label: str) -> Organization:
        body = await self._request(
            "GET", "/org/url", params={"org_url": f"{self.web_url}/{url_label}"}
        )
        return _parse(Organization, body)

    # Spaces

    async def create_space(self, org_id: int, params: Dict[str, Any]) -> Space:
        body = await self._request("POST", f"/org/{org_id}/space/", json_body=params)
        return await self.get_space(_created_id(body, "space_id"))

    async def get_space(self, space_id: int) -> Space:
        body = await self._request("GET", f"/space/{space_id}")
        return _parse(Space, body)

    async def update_space(self, space_id: int, params: Dict[str, Any]) -> Space:
        await self._request("PUT", f"/space/{space_id}", json_body=params)
        return await self.get_space(space_id)

    async def delete_space(self, space_id: int) -> None:
        await self._request("DELETE", f"/space/{space_id}")

    # Apps

    async def create_application(
        self, space_id: int, config: Dict[str, Any]
    ) -> Application:
        body = await self._request(
            "POST", "/app/", json_body={"space_id": space_id, "config": config}
        )
        return await self.get_application(_created_id(body, "app_id"))

    async def get_application(self, app_id: int) -> Application:
        body = await self._request("GET", f"/app/{app_id}")
        return _parse(Application, body)

    async def update_application(
        self, app_id: int, config: Dict[str, Any]
    ) -> Application:
        await self._request("PUT", f"/app/{app_id}", json_body={"config": config})
        return await self.get_application(app_id)

    async def delete_application(self, app_id: int) -> None:
        await self._request("DELETE", f"/app/{app_id}")

    # App fields

    async def create_app_field(
        self, app_id: int, field_type: str, config: Dict[str, Any]
    ) -> AppField:
        body = await self._request(
            "POST",
            f"/app/{app_id}/field/",
            json_body={"type": field_type, "config": config},
        )
        return await self.get_app_field(app_id, _created_id(body, "field_id"))

    async def get_app_field(self, app_id: int, field_id: int) -> AppField:
        body = await self._request("GET", f"/app/{app_id}/field/{field_id}")
        if isinstance(body, dict):
            body = {**body, "app_id": app_id}
        return _parse(AppField, body)

    async def update_app_field(
        self, app_id: int, field_id: int, config: Dict[str, Any]
    ) -> AppField:
        await self._request(
            "PUT", f"/app/{app_id}/field/{field_id}", json_body=config
        )
        return await self.get_app_field(app_id, field_id)

    async def delete_app_field(self, app_id: int, field_id: int) -> None:
        await self._request("DELETE", f"/app/{app_id}/field/{field_id}")
