from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping

from kms_cli import render
from kms_cli.core.tokens import KeyScope, NamespaceScope, RootScope, SecretScope, TokenScope
from kms_cli.crypto import random_token
from kms_cli.exceptions import InputFileException, InvalidArgumentException

Args = Mapping[str, Any]
Request = Dict[str, Any]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    procedure: str
    scope: Callable[[Args], TokenScope]
    build: Callable[[Args, str], Request]
    render: render.Renderer


def read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as input_file:
            return input_file.read()
    except OSError as exc:
        raise InputFileException(f"Read file {path} failed: {exc.strerror or exc}", path=path)


def read_text(path: str) -> str:
    payload = read_bytes(path)
    try:
        return payload.decode()
    except UnicodeDecodeError as exc:
        raise InputFileException(f"Read file {path} failed: {exc.reason}", path=path)


def decode_hash(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise InvalidArgumentException(f"Invalid hex hash: {value}")


def rotation_token(args: Args) -> str:
    # Disabling submits an empty token instead of minting a new one
    return "" if args.get("disable") else random_token()


# Token scopes


def _root(args: Args) -> TokenScope:
    return RootScope()


def _namespace(args: Args) -> TokenScope:
    return NamespaceScope(args["ns"])


def _key(args: Args) -> TokenScope:
    return KeyScope(args["ns"], args["key"])


def _secret(args: Args) -> TokenScope:
    return SecretScope(args["ns"], args["key"])


# Request builders


def _crypto_request(args: Args, sender: str, **payload) -> Request:
    return {"sender": sender, "ns": args["ns"], "key": args["key"], **payload}


_COMMANDS = (
    # Namespaces
    CommandSpec(
        name="ns list",
        procedure="ListNS",
        scope=_root,
        build=lambda args, sender: {"sender": sender},
        render=render.table({"name": "Name", "active": "Active"}),
    ),
    CommandSpec(
        name="ns create",
        procedure="NewNS",
        scope=_root,
        build=lambda args, sender: {"sender": sender, "ns": args["name"], "token": random_token()},
        render=render.transaction("Namespace disabled"),
    ),
    CommandSpec(
        name="ns reset",
        procedure="ResetNS",
        scope=_root,
        build=lambda args, sender: {"sender": sender, "ns": args["name"], "token": rotation_token(args)},
        render=render.transaction("Namespace disabled"),
    ),
    # Keys
    CommandSpec(
        name="key list",
        procedure="ListKey",
        scope=_namespace,
        build=lambda args, sender: {"sender": sender, "ns": args["ns"]},
        render=render.table({"name": "Name", "type": "Type", "active": "Active"}),
    ),
    CommandSpec(
        name="key create",
        procedure="NewKey",
        scope=_namespace,
        build=lambda args, sender: {
            "sender": sender,
            "ns": args["ns"],
            "key": args["name"],
            "type": args["type"],
            "token": random_token(),
        },
        render=render.transaction("Key disabled"),
    ),
    CommandSpec(
        name="key import",
        procedure="ImportKey",
        scope=_namespace,
        build=lambda args, sender: {
            "sender": sender,
            "ns": args["ns"],
            "key": args["name"],
            "type": args["type"],
            "keyval": read_text(args["keyfile"]),
            "token": random_token(),
        },
        render=render.transaction("Key disabled"),
    ),
    CommandSpec(
        name="key reset",
        procedure="ResetKey",
        scope=_namespace,
        build=lambda args, sender: {
            "sender": sender,
            "ns": args["ns"],
            "key": args["name"],
            "token": rotation_token(args),
        },
        render=render.transaction("Key disabled"),
    ),
    # Secrets
    CommandSpec(
        name="secret list",
        procedure="ListSecret",
        scope=_namespace,
        build=lambda args, sender: {"sender": sender, "ns": args["ns"]},
        render=render.table({"name": "Name", "active": "Active"}),
    ),
    CommandSpec(
        name="secret create",
        procedure="NewSecret",
        scope=_namespace,
        build=lambda args, sender: {
            "sender": sender,
            "ns": args["ns"],
            "key": args["name"],
            "token": random_token(),
            "secret": read_text(args["secretfile"]),
        },
        render=render.transaction("Secret disabled"),
    ),
    CommandSpec(
        name="secret reset",
        procedure="ResetSecret",
        scope=_namespace,
        build=lambda args, sender: {
            "sender": sender,
            "ns": args["ns"],
            "key": args["name"],
            "token": rotation_token(args),
        },
        render=render.transaction("Secret disabled"),
    ),
    # Cryptographic operations
    CommandSpec(
        name="encrypt",
        procedure="Encrypt",
        scope=_key,
        build=lambda args, sender: _crypto_request(args, sender, text=read_bytes(args["file"])),
        render=render.raw,
    ),
    CommandSpec(
        name="decrypt",
        procedure="Decrypt",
        scope=_key,
        build=lambda args, sender: _crypto_request(args, sender, cipher=read_bytes(args["file"])),
        render=render.raw,
    ),
    CommandSpec(
        name="hmac",
        procedure="Hmac",
        scope=_key,
        build=lambda args, sender: _crypto_request(args, sender, text=read_bytes(args["file"])),
        render=render.hexadecimal,
    ),
    CommandSpec(
        name="sign",
        procedure="Sign",
        scope=_key,
        build=lambda args, sender: _crypto_request(args, sender, hash=decode_hash(args["hexhash"])),
        render=render.raw,
    ),
    CommandSpec(
        name="verify",
        procedure="Verify",
        scope=_key,
        build=lambda args, sender: _crypto_request(
            args, sender, hash=decode_hash(args["hexhash"]), signature=read_bytes(args["sigfile"])
        ),
        render=render.boolean,
    ),
    # Secret read
    CommandSpec(
        name="get-secret",
        procedure="GetSecret",
        scope=_secret,
        build=lambda args, sender: {"sender": sender, "ns": args["ns"], "key": args["key"]},
        render=render.text,
    ),
)

COMMANDS: Dict[str, CommandSpec] = {command.name: command for command in _COMMANDS}
