"""Parsing of server addresses and user identities."""

import re

from ..errors import InvalidAddress
from .models import ConnectionParameters, DEFAULT_PORT

_ADDRESS_DELIMITERS = re.compile(r"[:,\\]")
_PORT = re.compile(r"[0-9]+")


def parse_address(address: str, user_identity: str, database_name: str = "") -> ConnectionParameters:
    """Parse a server address and user identity into connection parameters.

    ``address`` may be ``host``, ``host:port``, ``host,port`` or
    ``host\\instance``. In ``host:1234\\instance`` only the port survives; the
    instance name is dropped. An empty qualifier (``host:``) counts as no
    qualifier. ``user_identity`` may be ``DOMAIN\\user``.

    Raises:
        InvalidAddress: if either string is empty
    """
    if not address:
        raise InvalidAddress("Server address must not be empty", details={"address": address})
    if not user_identity:
        raise InvalidAddress("User name must not be empty", details={"user": user_identity})

    server_parts = _ADDRESS_DELIMITERS.split(address)
    user_parts = user_identity.split("\\")

    port = None
    instance_name = None
    qualifier = server_parts[1] if len(server_parts) > 1 else ""
    if _PORT.fullmatch(qualifier):
        port = int(qualifier)
    elif qualifier:
        instance_name = qualifier
    else:
        port = DEFAULT_PORT

    if len(user_parts) > 1:
        domain, user_name = user_parts[0], user_parts[1]
    else:
        domain, user_name = None, user_parts[0]

    return ConnectionParameters(
        host=server_parts[0],
        port=port,
        instance_name=instance_name,
        domain=domain,
        user_name=user_name,
        database_name=database_name,
    )
