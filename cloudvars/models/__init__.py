from .messages import HandshakeMessage, Scalar, SetPush, SetRequest

__all__ = [
    "HandshakeMessage",
    "Scalar",
    "SetPush",
    "SetRequest",
]
