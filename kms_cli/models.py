from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, constr, field_validator, model_validator

from kms_cli.constants import DEFAULT_SERVER

# Primitive types
server_address = constr(strip_whitespace=True, min_length=1)
# Tokens are opaque and sent exactly as written; null means absent
bearer_token = Optional[str]


class KmsModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TokenTree(KmsModel):
    """Bearer tokens grouped by the scope they authorize"""

    root: bearer_token = None
    namespaces: Dict[str, bearer_token] = Field(default_factory=dict)
    keys: Dict[str, Optional[Dict[str, bearer_token]]] = Field(default_factory=dict)
    secrets: Dict[str, Optional[Dict[str, bearer_token]]] = Field(default_factory=dict)

    @field_validator("namespaces", "keys", "secrets", mode="before")
    @classmethod
    def absent_level(cls, value):
        return {} if value is None else value


class Configuration(KmsModel):
    server: Optional[server_address] = None
    timeout: Optional[confloat(gt=0)] = None
    tokens: TokenTree = Field(default_factory=TokenTree)

    @field_validator("tokens", mode="before")
    @classmethod
    def absent_tokens(cls, value):
        return {} if value is None else value

    def resolve_server(self, override: Optional[str] = None) -> str:
        return override or self.server or DEFAULT_SERVER


class Response(KmsModel):
    """Envelope returned by every remote procedure: either `data` or `error`"""

    data: Any = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "Response":
        if self.error is not None and self.data is not None:
            raise ValueError("a response carries either data or an error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Response":
        error = payload.get("error")
        if error:
            return cls(error=error)

        # An unset oneof still means success with an empty payload
        data = payload.get("data")
        return cls(data={} if data is None else data)
