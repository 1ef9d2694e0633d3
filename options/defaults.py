"""
Option Defaults
===============
Fallbacks for connection settings left unset after all four levels merge.

Defaults are a plain value handed to the resolver, never ambient state.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from options.errors import InvalidPortError
from options.option_catalog import parse_integer

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5888
DEFAULT_PROTOCOL = "http"

# Environment overrides read by OptionDefaults.from_env()
ENV_HOST = "PXF_HOST"
ENV_PORT = "PXF_PORT"
ENV_PROTOCOL = "PXF_PROTOCOL"


def parse_port(value: str) -> int:
    """Parse a port number; valid ports are 1..65534."""
    port = parse_integer(str(value))
    if port is None or port <= 0 or port >= 65535:
        raise InvalidPortError(value)
    return port


@dataclass(frozen=True)
class OptionDefaults:
    """Built-in host/port/sub-protocol of the PXF service."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    protocol: str = DEFAULT_PROTOCOL

    def __post_init__(self):
        if self.port <= 0 or self.port >= 65535:
            raise InvalidPortError(str(self.port))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OptionDefaults":
        """Build defaults, letting PXF_HOST / PXF_PORT / PXF_PROTOCOL override."""
        env = os.environ if environ is None else environ
        port = env.get(ENV_PORT)
        return cls(
            host=env.get(ENV_HOST) or DEFAULT_HOST,
            port=parse_port(port) if port else DEFAULT_PORT,
            protocol=env.get(ENV_PROTOCOL) or DEFAULT_PROTOCOL,
        )


DEFAULTS = OptionDefaults()
