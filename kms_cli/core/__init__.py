import functools
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import grpc
import grpc_tools
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from grpc_tools import protoc

from kms_cli.constants import INTERFACE_DEFINITION, SERVICE_NAME
from kms_cli.exceptions import (
    InterfaceDefinitionException,
    TransportException,
    UnknownProcedureException,
    UnknownServiceException,
)
from kms_cli.models import Response

logger = logging.getLogger(__name__)

# Well-known types (google/protobuf/*.proto) bundled with grpcio-tools
_WELL_KNOWN_INCLUDE = os.path.join(os.path.dirname(grpc_tools.__file__), "_proto")


@dataclass(frozen=True)
class Procedure:
    name: str
    path: str
    request: type
    response: type


@dataclass(frozen=True)
class ServiceInterface:
    """Parsed service declaration: one procedure per remote method"""

    name: str
    procedures: Mapping[str, Procedure]

    def __contains__(self, procedure: str) -> bool:
        return procedure in self.procedures


def _compile_definition(definition: Path) -> descriptor_pool.DescriptorPool:
    if not definition.is_file():
        raise InterfaceDefinitionException(f"Interface definition {definition} not found")

    with tempfile.TemporaryDirectory() as workdir:
        output = Path(workdir) / "descriptor.pb"
        status = protoc.main(
            [
                "grpc_tools.protoc",
                f"-I{definition.parent}",
                f"-I{_WELL_KNOWN_INCLUDE}",
                "--include_imports",
                f"--descriptor_set_out={output}",
                str(definition),
            ]
        )
        if status != 0:
            raise InterfaceDefinitionException(f"Interface definition {definition} could not be parsed")

        file_set = descriptor_pb2.FileDescriptorSet.FromString(output.read_bytes())

    pool = descriptor_pool.DescriptorPool()
    for file_proto in file_set.file:
        pool.AddSerializedFile(file_proto.SerializeToString())
    return pool


@functools.lru_cache()
def load_service(definition: str = str(INTERFACE_DEFINITION), service: str = SERVICE_NAME) -> ServiceInterface:
    """Parse an interface definition once per process and describe one of its services"""
    pool = _compile_definition(Path(definition).resolve())

    try:
        service_descriptor = pool.FindServiceByName(service)
    except KeyError:
        raise UnknownServiceException(f"Service {service} is not declared in {definition}", service=service)

    procedures = {
        method.name: Procedure(
            name=method.name,
            path=f"/{service_descriptor.full_name}/{method.name}",
            request=message_factory.GetMessageClass(method.input_type),
            response=message_factory.GetMessageClass(method.output_type),
        )
        for method in service_descriptor.methods
    }
    logger.debug("Loaded %s with %d procedures from %s", service, len(procedures), definition)
    return ServiceInterface(name=service_descriptor.full_name, procedures=procedures)


def message_to_dict(message) -> Dict[str, Any]:
    """Decode a reply into plain Python values; scalar defaults are kept, unset oneof members are not"""
    result = {}
    for field in message.DESCRIPTOR.fields:
        oneof = field.containing_oneof
        if oneof is not None and message.WhichOneof(oneof.name) != field.name:
            continue

        value = getattr(message, field.name)
        repeated = field.is_repeated

        if field.message_type is not None:
            if repeated:
                value = [message_to_dict(item) for item in value]
            elif oneof is None and not message.HasField(field.name):
                continue
            else:
                value = message_to_dict(value)
        elif repeated:
            value = list(value)

        result[field.name] = value
    return result


class RemoteOperation:
    """A single remote procedure, invoked with a plain request mapping"""

    def __init__(self, channel: grpc.aio.Channel, procedure: Procedure, timeout: Optional[float] = None):
        self.procedure = procedure
        self.timeout = timeout
        self._call = channel.unary_unary(
            procedure.path,
            request_serializer=procedure.request.SerializeToString,
            response_deserializer=procedure.response.FromString,
        )

    async def __call__(self, request: Optional[Mapping[str, Any]] = None) -> Response:
        try:
            message = self.procedure.request(**(request or {}))
        except (TypeError, ValueError) as exc:
            raise TransportException(f"Malformed {self.procedure.name} request: {exc}", code="MALFORMED_REQUEST")

        try:
            reply = await self._call(message, timeout=self.timeout)
        except grpc.aio.AioRpcError as exc:
            logger.debug("%s failed with %s", self.procedure.path, exc.code().name)
            raise TransportException(exc.details() or exc.code().name, code=exc.code().name)

        try:
            return Response.from_mapping(message_to_dict(reply))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.debug("%s reply could not be decoded: %s", self.procedure.path, exc)
            raise TransportException(f"Malformed {self.procedure.name} reply: {exc}", code="MALFORMED_REPLY")


class KmsStub:
    """
    One awaitable operation per procedure of the service, sharing a single channel

    The channel is opened lazily, so building a stub never touches the network.
    Operations are reachable as `stub["Encrypt"]` or `stub.Encrypt`.
    """

    def __init__(
        self,
        server: str,
        definition: Path = INTERFACE_DEFINITION,
        service: str = SERVICE_NAME,
        timeout: Optional[float] = None,
    ):
        self.server: str = server
        self.timeout: Optional[float] = timeout
        self.interface: ServiceInterface = load_service(str(definition), service)

        self.__channel: Optional[grpc.aio.Channel] = None
        self.__operations: Dict[str, RemoteOperation] = {}

    def __init_channel(self):
        if not self.__channel:
            logger.debug("Opening channel to %s", self.server)
            self.__channel = grpc.aio.insecure_channel(self.server)

    @property
    def channel(self) -> grpc.aio.Channel:
        self.__init_channel()
        return self.__channel

    @property
    def procedures(self) -> Tuple[str, ...]:
        return tuple(self.interface.procedures)

    def __getitem__(self, name: str) -> RemoteOperation:
        if name not in self.interface:
            raise UnknownProcedureException(f"Unknown procedure {name}", procedure=name)

        if name not in self.__operations:
            self.__operations[name] = RemoteOperation(self.channel, self.interface.procedures[name], self.timeout)
        return self.__operations[name]

    def __getattr__(self, name: str) -> RemoteOperation:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def __aenter__(self):
        self.__init_channel()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.__channel:
            await self.__channel.close()

        self.__channel = None
        self.__operations = {}
