"""Request envelope accepted by the proxy endpoint.

The envelope carries everything a call needs: the caller's session
credentials, a header seed, opaque feature flags, an optional transaction-id
seed and exactly one dispatch target (a packaged method name or a raw endpoint
path). Field names follow the camelCase wire format; the names used by older
callers (``ct0Token``, ``flag``, ``pairData``, ``apiMethod``, ``apiParams``,
``endpoint``, ``body``) are accepted as aliases.
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from twitter_proxy.exceptions import InvalidEnvelopeError, MissingDispatchTargetError


class TransactionSeed(BaseModel):
    """Seed values for x-client-transaction-id generation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    verification: Optional[str] = Field(default=None)
    animation_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("animationKey", "animation_key"))

    @property
    def is_complete(self) -> bool:
        return bool(self.verification) and bool(self.animation_key)


class Envelope(BaseModel):
    """A single proxy call as supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auth_token: Optional[str] = Field(default=None, validation_alias=AliasChoices("authToken", "auth_token"))
    csrf_token: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("csrfToken", "ct0Token", "csrf_token")
    )
    headers: Optional[Dict[str, Any]] = Field(default=None)
    feature_flags: Any = Field(default=None, validation_alias=AliasChoices("featureFlags", "flag", "feature_flags"))
    transaction_seed: Optional[TransactionSeed] = Field(
        default=None, validation_alias=AliasChoices("transactionSeed", "pairData", "transaction_seed")
    )

    # Packaged-method path
    method_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("methodName", "apiMethod"))
    method_params: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("methodParams", "apiParams")
    )

    # Raw-passthrough path
    endpoint_path: Optional[str] = Field(default=None, validation_alias=AliasChoices("endpointPath", "endpoint"))
    http_method: str = Field(default="GET", validation_alias=AliasChoices("httpMethod", "method"))
    query_params: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("queryParams"))
    request_body: Any = Field(default=None, validation_alias=AliasChoices("requestBody", "body"))
    extra_headers: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("extraHeaders"))

    @property
    def header_seed(self) -> Dict[str, str]:
        """The caller's baseline outgoing headers (``headers.api``), keys lower-cased."""
        seed = (self.headers or {}).get("api") or {}
        if not isinstance(seed, dict):
            return {}
        return {str(k).lower(): str(v) for k, v in seed.items() if v is not None}

    @property
    def target(self) -> str:
        """Identifier of the dispatch target, used to label errors and logs."""
        return self.method_name or self.endpoint_path or "unknown"


def parse_envelope(payload: Any) -> Envelope:
    """Validate a decoded JSON body and return the envelope.

    Raises:
        InvalidEnvelopeError: If the body is not an object, has fields of the
            wrong shape, lacks credentials, headers or feature flags, or names
            both dispatch targets.
        MissingDispatchTargetError: If neither dispatch target is present.
    """
    if not isinstance(payload, dict):
        raise InvalidEnvelopeError("Request body must be a JSON object")

    try:
        envelope = Envelope.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise InvalidEnvelopeError(f"Invalid request fields: {fields}") from e

    if not envelope.auth_token or not envelope.csrf_token:
        raise InvalidEnvelopeError("Missing: authToken, csrfToken")
    if envelope.headers is None or envelope.feature_flags is None:
        raise InvalidEnvelopeError("Missing: headers, featureFlags")
    if envelope.method_name and envelope.endpoint_path:
        raise InvalidEnvelopeError("Provide only one of methodName or endpointPath")
    if not envelope.method_name and not envelope.endpoint_path:
        raise MissingDispatchTargetError("Provide methodName or endpointPath")

    return envelope
