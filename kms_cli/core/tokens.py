from dataclasses import dataclass
from typing import Optional, Union

from kms_cli.exceptions import MissingTokenException
from kms_cli.models import TokenTree


@dataclass(frozen=True)
class RootScope:
    kind = "root"

    def describe(self) -> str:
        return "root token"


@dataclass(frozen=True)
class NamespaceScope:
    ns: str
    kind = "namespace"

    def describe(self) -> str:
        return f"namespace token of {self.ns}"


@dataclass(frozen=True)
class KeyScope:
    ns: str
    key: str
    kind = "key"

    def describe(self) -> str:
        return f"key token of {self.ns}.{self.key}"


@dataclass(frozen=True)
class SecretScope:
    ns: str
    key: str
    kind = "secret"

    def describe(self) -> str:
        return f"secret token of {self.ns}.{self.key}"


TokenScope = Union[RootScope, NamespaceScope, KeyScope, SecretScope]


def resolve_token(tokens: TokenTree, scope: TokenScope) -> Optional[str]:
    """Find the token authorizing `scope`; a missing level or an empty value both count as absent"""
    if isinstance(scope, RootScope):
        token = tokens.root
    elif isinstance(scope, NamespaceScope):
        token = tokens.namespaces.get(scope.ns)
    elif isinstance(scope, KeyScope):
        token = (tokens.keys.get(scope.ns) or {}).get(scope.key)
    elif isinstance(scope, SecretScope):
        token = (tokens.secrets.get(scope.ns) or {}).get(scope.key)
    else:
        raise TypeError(f"Unknown token scope: {scope!r}")

    return token or None


def missing_token_message(scope: TokenScope) -> str:
    return f"Missing {scope.describe()} in config"


def require_token(tokens: TokenTree, scope: TokenScope) -> str:
    token = resolve_token(tokens, scope)
    if not token:
        raise MissingTokenException(missing_token_message(scope), scope=scope.kind)
    return token
