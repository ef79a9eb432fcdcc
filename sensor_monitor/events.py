"""
Transport event shapes seen by the dispatcher.

The MQTT adapter turns connection activity into a flat, ordered stream:
    Incoming(ControlPacket("connack"))
    Outgoing("subscribe tele/stue/SENSOR")
    Incoming(Publish(topic="tele/stue/SENSOR", payload=b"{...}"))
"""
from typing import Union

from pydantic import BaseModel


class Publish(BaseModel):
    topic: str
    payload: bytes


class ControlPacket(BaseModel):
    """Any inbound packet that is not a publish (connack, suback, pingresp)."""
    kind: str
    detail: str = ""


class Incoming(BaseModel):
    packet: Union[Publish, ControlPacket]


class Outgoing(BaseModel):
    description: str


Event = Union[Incoming, Outgoing]
