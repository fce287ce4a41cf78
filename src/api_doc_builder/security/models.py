"""Payloads of the OAuth2 authorization server endpoints."""

from typing import Any

from pydantic import BaseModel


class OAuth2AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    id_token: str | None = None


class OAuth2Error(BaseModel):
    error: str
    error_description: str | None = None
    error_uri: str | None = None


class OAuth2TokenIntrospection(BaseModel):
    active: bool
    scope: str | None = None
    client_id: str | None = None
    username: str | None = None
    token_type: str | None = None
    exp: int | None = None
    iat: int | None = None
    nbf: int | None = None
    sub: str | None = None
    aud: list[str] | None = None
    iss: str | None = None
    jti: str | None = None


class OAuth2AuthorizationServerMetadata(BaseModel):
    issuer: str
    authorization_endpoint: str | None = None
    token_endpoint: str | None = None
    token_endpoint_auth_methods_supported: list[str] | None = None
    jwks_uri: str | None = None
    response_types_supported: list[str] | None = None
    grant_types_supported: list[str] | None = None
    revocation_endpoint: str | None = None
    introspection_endpoint: str | None = None
    code_challenge_methods_supported: list[str] | None = None


class JwkSet(BaseModel):
    keys: list[dict[str, Any]] = []


class OAuth2AuthorizationConsent(BaseModel):
    client_id: str
    principal_name: str | None = None
    scopes: list[str] = []
    state: str | None = None
