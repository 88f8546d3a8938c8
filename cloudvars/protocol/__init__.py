from .framing import FrameResult, build_handshake, build_set, decode_frame, decode_line
from .names import CLOUD_PREFIX, is_scalar, to_variable_name

__all__ = [
    "CLOUD_PREFIX",
    "FrameResult",
    "build_handshake",
    "build_set",
    "decode_frame",
    "decode_line",
    "is_scalar",
    "to_variable_name",
]
