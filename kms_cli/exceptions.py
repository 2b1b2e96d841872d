from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class KmsException(Exception):
    message: str

    def __str__(self) -> str:
        return self.message

    @property
    @abstractmethod
    def fatal(self) -> bool:
        pass

    @property
    @abstractmethod
    def type(self) -> str:
        pass


# Startup errors; the process cannot continue


@dataclass
class ConfigurationException(KmsException):
    path: Optional[str] = None
    fatal: bool = True
    type: str = "invalid_configuration"


@dataclass
class InterfaceDefinitionException(KmsException):
    fatal: bool = True
    type: str = "invalid_interface_definition"


@dataclass
class UnknownServiceException(KmsException):
    service: Optional[str] = None
    fatal: bool = True
    type: str = "unknown_service"


# Command errors; only the current command ends


@dataclass
class UnknownProcedureException(KmsException):
    procedure: Optional[str] = None
    fatal: bool = False
    type: str = "unknown_procedure"


@dataclass
class MissingTokenException(KmsException):
    scope: Optional[str] = None
    fatal: bool = False
    type: str = "missing_token"


@dataclass
class InputFileException(KmsException):
    path: Optional[str] = None
    fatal: bool = False
    type: str = "unreadable_input"


@dataclass
class OutputFileException(KmsException):
    path: Optional[str] = None
    fatal: bool = False
    type: str = "unwritable_output"


@dataclass
class InvalidArgumentException(KmsException):
    fatal: bool = False
    type: str = "invalid_argument"


@dataclass
class TransportException(KmsException):
    code: Optional[str] = None
    fatal: bool = False
    type: str = "transport"
