"""
Transports deliver requests to the node. `Transport` is the base class with
the middleware pipeline; `MqttTransport` speaks JSON-RPC over MQTT v5.
"""
from ethapi.transport.base import Transport
from ethapi.transport.mqtt import MqttTransport

__all__ = ["Transport", "MqttTransport"]
