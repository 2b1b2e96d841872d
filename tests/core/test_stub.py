import hashlib

import pytest

from kms_cli.core import KmsStub, load_service, message_to_dict
from kms_cli.exceptions import (
    InterfaceDefinitionException,
    TransportException,
    UnknownProcedureException,
    UnknownServiceException,
)
from kms_cli.models import Response
from conftest import KEY_TOKEN, ROOT_TOKEN, SECRET_TOKEN

PROCEDURES = {
    "ListNS",
    "NewNS",
    "ResetNS",
    "ListKey",
    "NewKey",
    "ImportKey",
    "ResetKey",
    "ListSecret",
    "NewSecret",
    "ResetSecret",
    "Encrypt",
    "Decrypt",
    "Hmac",
    "Sign",
    "Verify",
    "GetSecret",
}


def test_every_procedure_is_synthesized():
    interface = load_service()

    assert interface.name == "kms.Kms"
    assert set(interface.procedures) == PROCEDURES
    assert interface.procedures["Encrypt"].path == "/kms.Kms/Encrypt"


def test_interface_is_parsed_once():
    assert load_service() is load_service()


def test_unknown_service_is_fatal():
    with pytest.raises(UnknownServiceException) as exception:
        load_service(service="kms.Nope")

    assert exception.value.fatal


def test_malformed_definition_is_fatal(tmp_path):
    definition = tmp_path / "broken.proto"
    definition.write_text('syntax = "proto3";\nservice Kms { rpc ListNS(Missing) returns (Missing) }\n')

    with pytest.raises(InterfaceDefinitionException) as exception:
        load_service(str(definition), "Kms")

    assert exception.value.fatal


def test_missing_definition_is_fatal(tmp_path):
    with pytest.raises(InterfaceDefinitionException):
        load_service(str(tmp_path / "absent.proto"), "kms.Kms")


def test_message_to_dict_keeps_defaults_and_skips_unset_oneof():
    procedures = load_service().procedures

    listing = procedures["ListKey"].response()
    listing.data.add(name="k1", type="aes", active=False)
    assert message_to_dict(listing) == {"data": [{"name": "k1", "type": "aes", "active": False}], "error": ""}

    assert message_to_dict(procedures["Encrypt"].response()) == {}
    assert message_to_dict(procedures["Encrypt"].response(data=b"\x00\x01")) == {"data": b"\x00\x01"}
    assert message_to_dict(procedures["Verify"].response(error="nope")) == {"error": "nope"}

    transaction = procedures["NewNS"].response()
    transaction.data.SetInParent()
    assert message_to_dict(transaction) == {"data": {}}


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"data": b"abc"}, Response(data=b"abc")),
        ({"error": "denied"}, Response(error="denied")),
        ({"data": [], "error": "denied"}, Response(error="denied")),
        ({"data": [], "error": ""}, Response(data=[])),
        ({}, Response(data={})),
    ],
)
def test_response_envelope(payload, expected):
    assert Response.from_mapping(payload) == expected


def test_response_rejects_both_fields():
    with pytest.raises(ValueError):
        Response(data=b"abc", error="denied")


def test_unknown_procedure():
    stub = KmsStub("127.0.0.1:5000")

    with pytest.raises(UnknownProcedureException):
        stub["Launch"]


@pytest.mark.asyncio
async def test_stub_lists_procedures():
    async with KmsStub("127.0.0.1:5000") as stub:
        assert set(stub.procedures) == PROCEDURES
        assert stub["Encrypt"] is stub.Encrypt


@pytest.mark.asyncio
async def test_encrypt_decrypt_round_trip(kms_server):
    plaintext = bytes(range(256)) * 4

    async with KmsStub(kms_server) as stub:
        encrypted = await stub.Encrypt({"sender": KEY_TOKEN, "ns": "ns1", "key": "key1", "text": plaintext})
        assert encrypted.ok
        assert encrypted.data != plaintext

        decrypted = await stub.Decrypt({"sender": KEY_TOKEN, "ns": "ns1", "key": "key1", "cipher": encrypted.data})
        assert decrypted.data == plaintext


@pytest.mark.asyncio
async def test_remote_calls_decode_each_envelope_shape(kms_server):
    async with KmsStub(kms_server) as stub:
        listing = await stub.ListNS({"sender": ROOT_TOKEN})
        assert listing.data == [{"name": "alpha", "active": True}, {"name": "beta", "active": False}]

        created = await stub.NewNS({"sender": ROOT_TOKEN, "ns": "gamma", "token": "t"})
        assert created == Response(data={})

        digest = await stub.Hmac({"sender": KEY_TOKEN, "ns": "ns1", "key": "key1", "text": b"payload"})
        assert digest.data == hashlib.sha256(b"payload").digest()

        signature = await stub.Sign({"sender": KEY_TOKEN, "ns": "ns1", "key": "key1", "hash": b"\xab"})
        verified = await stub.Verify(
            {"sender": KEY_TOKEN, "ns": "ns1", "key": "key1", "hash": b"\xab", "signature": signature.data}
        )
        assert verified.data is True

        secret = await stub.GetSecret({"sender": SECRET_TOKEN, "ns": "ns1", "key": "key1"})
        assert secret.data == "hunter2"


@pytest.mark.asyncio
async def test_server_errors_are_envelopes(kms_server):
    async with KmsStub(kms_server) as stub:
        response = await stub.Encrypt({"sender": "wrong", "ns": "ns1", "key": "key1", "text": b"x"})

    assert not response.ok
    assert response.error == "Permission denied"


@pytest.mark.asyncio
async def test_unimplemented_procedure_is_a_transport_failure(kms_server):
    async with KmsStub(kms_server) as stub:
        with pytest.raises(TransportException) as exception:
            await stub.ResetNS({"sender": ROOT_TOKEN, "ns": "alpha", "token": ""})

    assert exception.value.code == "UNIMPLEMENTED"


@pytest.mark.asyncio
async def test_unreachable_server_fails_per_call(unused_tcp_port):
    # Building the stub succeeds; only the call fails
    async with KmsStub(f"127.0.0.1:{unused_tcp_port}", timeout=5) as stub:
        with pytest.raises(TransportException) as exception:
            await stub.ListNS({"sender": ROOT_TOKEN})

    assert exception.value.code in {"UNAVAILABLE", "DEADLINE_EXCEEDED"}
    assert not exception.value.fatal


@pytest.mark.asyncio
async def test_malformed_request_never_reaches_the_wire(unused_tcp_port):
    async with KmsStub(f"127.0.0.1:{unused_tcp_port}") as stub:
        with pytest.raises(TransportException) as exception:
            await stub.ListNS({"sender": ROOT_TOKEN, "bogus": 1})

    assert exception.value.code == "MALFORMED_REQUEST"
