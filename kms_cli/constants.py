import os
from pathlib import Path

PACKAGE_ROOT: Path = Path(__file__).parent

# RPC interface shipped with the client
INTERFACE_DEFINITION: Path = PACKAGE_ROOT / "kms.proto"
SERVICE_NAME = "kms.Kms"

DEFAULT_SERVER = "127.0.0.1:5000"
DEFAULT_CONFIG = os.environ.get("KMS_CLI_CONFIG", "kms-cli.json")

# Raw size of freshly minted access tokens
TOKEN_SIZE = 16
