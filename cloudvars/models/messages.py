"""Wire models for the cloud variable protocol."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr

# Order matters: bool must be tried before int.
Scalar = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class HandshakeMessage(BaseModel):
    """First frame sent after the socket opens."""

    model_config = ConfigDict(frozen=True)

    method: Literal["handshake"] = "handshake"
    project_id: str
    user: str


class SetRequest(BaseModel):
    """Variable update sent from the client to the server."""

    model_config = ConfigDict(frozen=True)

    method: Literal["set"] = "set"
    project_id: str
    user: str
    name: str
    value: Scalar


class SetPush(BaseModel):
    """Variable update pushed from the server to the client."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    method: Literal["set"] = "set"
    name: StrictStr
    value: Scalar
