"""
HTTP client for the Pinot controller.

Responsibilities
----------------
- Hold an immutable ControllerConfig (URL, credentials, timeout).
- Pick exactly one authentication mode per request.
- Raise TransportError for network failures and any status >= 400
  (NotFoundError for 404), carrying the status and raw body.

Notes
-----
- Responses are returned raw; unwrapping and disambiguation live in
  documents.py and users.py.
- No retries: a failed call surfaces immediately.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from urllib.parse import quote

import requests
from requests.auth import AuthBase, HTTPBasicAuth

from src import settings
from src.pinot_engine.documents import JsonDocument, schema_name_of, table_name_of
from src.pinot_engine.errors import ConfigurationError, TransportError, ValidationError
from src.pinot_engine.identifiers import normalize_table_type

# ---------- configuration ----------


@dataclass(frozen=True)
class ControllerConfig:
    """Connection settings for one controller; built once and passed to the client."""

    controller_url: str
    username: str = ""
    password: str = field(default="", repr=False)
    token: str = field(default="", repr=False)
    database: str = ""
    timeout_seconds: float = 30.0

    @property
    def base_url(self) -> str:
        return self.controller_url.rstrip("/")

    @classmethod
    def resolve(
        cls,
        controller_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        database: str | None = None,
        timeout_seconds: float | None = None,
    ) -> ControllerConfig:
        """Explicit non-empty values win over the environment-backed settings."""
        url = controller_url or settings.PINOT_CONTROLLER_URL
        if not url:
            raise ConfigurationError("Set controller_url or PINOT_CONTROLLER_URL.")
        return cls(
            controller_url=url,
            username=username or settings.PINOT_USERNAME,
            password=password or settings.PINOT_PASSWORD,
            token=token or settings.PINOT_TOKEN,
            database=database or settings.PINOT_DATABASE,
            timeout_seconds=timeout_seconds or settings.PINOT_TIMEOUT_SECONDS,
        )


# ---------- authentication ----------


class AuthMode(StrEnum):
    PASSTHROUGH = "passthrough"  # token already carries "Bearer " / "Basic "
    BEARER = "bearer"  # JWT-shaped token
    TOKEN_BASIC = "token_basic"  # opaque token sent as pre-encoded basic credentials
    BASIC = "basic"  # username/password
    NONE = "none"


class AuthorizationHeader(AuthBase):
    """Sets a fixed Authorization header value."""

    def __init__(self, value: str) -> None:
        self.value = value

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        request.headers["Authorization"] = self.value
        return request

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AuthorizationHeader) and other.value == self.value


def select_auth_mode(config: ControllerConfig) -> AuthMode:
    """Precedence: prefixed token > JWT token > opaque token > username/password > none."""
    token = config.token.strip()
    if token:
        if token.startswith(("Bearer ", "Basic ")):
            return AuthMode.PASSTHROUGH
        if token.count(".") >= 2:
            return AuthMode.BEARER
        return AuthMode.TOKEN_BASIC
    if config.username or config.password:
        return AuthMode.BASIC
    return AuthMode.NONE


def build_auth(config: ControllerConfig) -> AuthBase | None:
    """Return the requests auth object for the selected mode."""
    mode = select_auth_mode(config)
    token = config.token.strip()
    match mode:
        case AuthMode.PASSTHROUGH:
            return AuthorizationHeader(token)
        case AuthMode.BEARER:
            return AuthorizationHeader(f"Bearer {token}")
        case AuthMode.TOKEN_BASIC:
            return AuthorizationHeader(f"Basic {token}")
        case AuthMode.BASIC:
            return HTTPBasicAuth(config.username, config.password)
        case _:
            return None


# ---------- client ----------


def _path_segment(value: str) -> str:
    return quote(str(value), safe="")


def _component_params(component: str) -> dict[str, str]:
    # Both names are sent; older controllers read componentType.
    upper = str(component).strip().upper()
    return {"component": upper, "componentType": upper}


class ControllerClient:
    """Thin wrapper over the controller REST API (schemas, tables, segments, users)."""

    def __init__(self, config: ControllerConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session or requests.Session()
        self._auth = build_auth(config)

    # ----- plumbing -----

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.config.database.strip():
            headers["Database"] = self.config.database.strip()
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> str:
        """Send one request and return the raw body text."""
        url = self._url(path)
        try:
            response = self.session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=body,
                headers=self._headers(),
                auth=self._auth,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} request failed: {e}") from e

        if response.status_code >= 400:
            raise TransportError.from_response(method, url, response.status_code, response.text)
        return response.text

    def _request_json(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
    ) -> JsonDocument:
        """GET-style call whose body must be a JSON object; a blank body reads as {}."""
        text = self._request(method, path, params=params)
        if not text.strip():
            return {}
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as e:
            raise TransportError(
                f"failed to decode response from {path}: {e}", body=text
            ) from e
        if not isinstance(decoded, dict):
            raise TransportError(
                f"expected a JSON object from {path}, got {type(decoded).__name__}", body=text
            )
        return decoded

    # ----- schemas -----

    def create_schema(self, schema: JsonDocument) -> None:
        self._request("POST", "/schemas", body=schema)

    def get_schema(self, schema_name: str) -> JsonDocument:
        return self._request_json("GET", f"/schemas/{_path_segment(schema_name)}")

    def update_schema(self, schema: JsonDocument) -> None:
        """PUT the full document; the path name comes from the body's schemaName."""
        name = schema_name_of(schema)
        self._request("PUT", f"/schemas/{_path_segment(name)}", body=schema)

    def delete_schema(self, schema_name: str) -> None:
        self._request("DELETE", f"/schemas/{_path_segment(schema_name)}")

    # ----- tables -----

    def create_table(self, table_config: JsonDocument) -> None:
        self._request("POST", "/tables", body=table_config)

    def get_table(self, table_id: str) -> JsonDocument:
        """Raw GET /tables/{id}; the config is usually wrapped under OFFLINE/REALTIME."""
        return self._request_json("GET", f"/tables/{_path_segment(table_id)}")

    def update_table(self, table_config: JsonDocument) -> None:
        """PUT the full config; the path name comes from the body's tableName."""
        name = table_name_of(table_config)
        self._request("PUT", f"/tables/{_path_segment(name)}", body=table_config)

    def delete_table(self, logical_name: str, table_type: str) -> None:
        """DELETE /tables/{logical}?type=TYPE."""
        normalized_type = normalize_table_type(table_type)
        self._request(
            "DELETE",
            f"/tables/{_path_segment(logical_name)}",
            params={"type": normalized_type.value},
        )

    def delete_table_by_id(self, table_id: str) -> None:
        """Legacy DELETE /tables/{logical_TYPE}."""
        self._request("DELETE", f"/tables/{_path_segment(table_id)}")

    def reload_table_segments(self, logical_name: str, table_type: str) -> None:
        missing = []
        if not logical_name:
            missing.append("logicalName")
        if not table_type:
            missing.append("tableType")
        if missing:
            raise ValidationError(f"{' and '.join(missing)} is required")
        self._request(
            "POST",
            f"/segments/{_path_segment(logical_name)}/reload",
            params={"type": str(table_type).upper()},
        )

    # ----- users -----

    def create_user(self, user: JsonDocument) -> None:
        self._request("POST", "/users", body=user)

    def get_user(self, username: str, component: str) -> JsonDocument:
        """Raw lookup; see users.resolve_user_response for the possible shapes."""
        return self._request_json(
            "GET", f"/users/{_path_segment(username)}", params=_component_params(component)
        )

    def update_user(self, user: JsonDocument) -> None:
        username = user.get("username") or ""
        component = user.get("component") or ""
        if not username:
            raise ValidationError("username not found")
        if not component:
            raise ValidationError("component not found")
        self._request(
            "PUT",
            f"/users/{_path_segment(username)}",
            params=_component_params(component),
            body=user,
        )

    def delete_user(self, username: str, component: str) -> None:
        if not username:
            raise ValidationError("username is required")
        if not component:
            raise ValidationError("component is required")
        self._request(
            "DELETE", f"/users/{_path_segment(username)}", params=_component_params(component)
        )
