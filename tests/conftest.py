import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple

import grpc
import pytest

from kms_cli.core import load_service
from kms_cli.models import Response

ROOT_TOKEN = "R"
NAMESPACE_TOKEN = "N"
KEY_TOKEN = "K"
SECRET_TOKEN = "S"


class FakeStub:
    """Stands in for `KmsStub`, recording every call and replying with canned envelopes"""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses: Dict[str, Any] = responses or {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    def __getitem__(self, procedure: str):
        async def operation(request):
            self.calls.append((procedure, dict(request)))
            result = self.responses.get(procedure, Response(data={}))
            if isinstance(result, Exception):
                raise result
            return result

        return operation

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


@pytest.fixture()
def fake_stub():
    return FakeStub()


@pytest.fixture()
def write_config(tmp_path):
    def _write_config(content, name: str = "kms-cli.json") -> str:
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    return _write_config


class ToyKms:
    """
    Minimal in-process server speaking the shipped interface

    Encryption is a byte-wise XOR, signatures are `sig:` + hash; good enough to
    exercise request encoding and reply decoding end to end.
    """

    def __init__(self, interface):
        self.procedures = interface.procedures
        self.namespaces = [("alpha", True), ("beta", False)]

    def _answer(self, procedure: str, request, token: str, **payload):
        reply_class = self.procedures[procedure].response
        if request.sender != token:
            return reply_class(error="Permission denied")
        return reply_class(**payload)

    async def ListNS(self, request, context):
        if request.sender != ROOT_TOKEN:
            return self.procedures["ListNS"].response(error="Permission denied")

        reply = self.procedures["ListNS"].response()
        for name, active in self.namespaces:
            reply.data.add(name=name, active=active)
        return reply

    async def NewNS(self, request, context):
        if request.sender != ROOT_TOKEN:
            return self.procedures["NewNS"].response(error="Permission denied")

        self.namespaces.append((request.ns, True))
        reply = self.procedures["NewNS"].response()
        reply.data.SetInParent()
        return reply

    async def Encrypt(self, request, context):
        return self._answer("Encrypt", request, KEY_TOKEN, data=bytes(byte ^ 0x5A for byte in request.text))

    async def Decrypt(self, request, context):
        return self._answer("Decrypt", request, KEY_TOKEN, data=bytes(byte ^ 0x5A for byte in request.cipher))

    async def Hmac(self, request, context):
        return self._answer("Hmac", request, KEY_TOKEN, data=hashlib.sha256(request.text).digest())

    async def Sign(self, request, context):
        return self._answer("Sign", request, KEY_TOKEN, data=b"sig:" + request.hash)

    async def Verify(self, request, context):
        return self._answer("Verify", request, KEY_TOKEN, data=request.signature == b"sig:" + request.hash)

    async def GetSecret(self, request, context):
        return self._answer("GetSecret", request, SECRET_TOKEN, data="hunter2")


@pytest.fixture()
async def kms_server():
    interface = load_service()
    toy = ToyKms(interface)

    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(toy, name),
            request_deserializer=procedure.request.FromString,
            response_serializer=procedure.response.SerializeToString,
        )
        for name, procedure in interface.procedures.items()
        if hasattr(toy, name)
    }

    server = grpc.aio.server()
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(interface.name, handlers),))
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()

    yield f"127.0.0.1:{port}"

    await server.stop(None)
