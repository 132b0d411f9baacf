from .client import AlreadyConnectedError, ChaserClient, NotConnectedError, encode_name
from .mock import MockServer

__all__ = [
    "AlreadyConnectedError",
    "ChaserClient",
    "MockServer",
    "NotConnectedError",
    "encode_name",
]
