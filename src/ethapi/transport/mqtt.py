"""
JSON-RPC over MQTT v5 Transport.

This module provides:
- A persistent `aiomqtt` connection loop with a retained online/offline
  status topic and a last will.
- MQTT v5 Request/Response: requests carry a `ResponseTopic` and
  `CorrelationData`; responses are matched back to pending futures by
  correlation id.
- Native push notifications: `subscribe(topic, params, callback)` maps a
  pubsub topic onto an MQTT topic and dispatches every decoded message to
  the registered callbacks, each call in its own task.
"""
import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from aiomqtt import Client as MQTTClient, ProtocolVersion, Will
from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.properties import Properties

from ethapi.errors import ErrorType, TransportError
from ethapi.models import RpcRequest, RpcResponse
from ethapi.transport.base import Transport

logger = logging.getLogger(__name__)

ONLINE = b'online'
OFFLINE = b'offline'


@dataclass
class _PushSubscription:
    id: int
    topic: str
    mqtt_topic: str
    params: List[Any]
    callback: Callable[[Any], Any]


@dataclass
class _PendingRequest:
    method: str
    future: asyncio.Future = field(repr=False)


class MqttTransport(Transport):
    host: str
    port: int
    client_id: str
    username: Optional[str]
    password: Optional[str]
    request_topic: str
    response_topic: str
    pubsub_pattern: str
    status_topic: str
    request_timeout: float
    _client: Optional[MQTTClient]
    _main_task: Optional[asyncio.Task]

    def __init__(self, config: dict):
        super().__init__()
        self.config = config
        mqtt_conf = self.config.get('mqtt', {}) or {}
        self.host = mqtt_conf.get('host', 'localhost')
        self.port = int(mqtt_conf.get('port', 1883))

        # Identity & Auth
        self.client_id = mqtt_conf.get('client_id', 'ethapi-client')
        self.username = mqtt_conf.get('username', None)
        self.password = mqtt_conf.get('password', None)

        self.request_topic = mqtt_conf.get('request_topic', 'ethapi/rpc/request')
        self.response_topic = mqtt_conf.get('response_topic', f'ethapi/rpc/response/{self.client_id}')
        self.pubsub_pattern = mqtt_conf.get('pubsub_pattern', 'ethapi/pubsub/{topic}')
        self.status_topic = mqtt_conf.get('status_topic', f'ethapi/clients/{self.client_id}/status')
        self.request_timeout = float(mqtt_conf.get('request_timeout', 10.0))

        # Internal state
        self._client = None
        self._main_task = None
        self._connected = asyncio.Event()
        self._requests: Dict[str, _PendingRequest] = {}
        self._subscriptions: Dict[int, _PushSubscription] = {}
        self._callback_tasks: Set[asyncio.Task] = set()

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    async def start(self):
        """
        Launches the connection loop in the background.
        """
        logger.info(f"Starting MQTT transport, connecting to {self.host}:{self.port}...")
        self._main_task = asyncio.create_task(self._main_loop())

    async def stop(self):
        """
        Cancels the connection loop and fails every request still waiting for a response.
        """
        if self._main_task:
            logger.info("Stopping MQTT transport...")
            self._main_task.cancel()
            try:
                await self._main_task
            except asyncio.CancelledError:
                logger.info("MQTT transport stopped gracefully.")
            self._main_task = None

        for task in list(self._callback_tasks):
            task.cancel()
        if self._callback_tasks:
            await asyncio.gather(*self._callback_tasks, return_exceptions=True)

        for pending in list(self._requests.values()):
            if not pending.future.done():
                pending.future.set_exception(
                    TransportError(f"Transport stopped before {pending.method} completed")
                )
        self._requests.clear()

    async def _main_loop(self):
        """
        The persistent connection loop. Reconnects after a fixed delay when the
        connection drops and restores the push subscriptions on every connect.
        """
        last_will = Will(topic=self.status_topic, payload=OFFLINE, qos=1, retain=True)

        while True:
            try:
                async with MQTTClient(self.host,
                                      self.port,
                                      protocol=ProtocolVersion.V5,
                                      identifier=self.client_id,
                                      username=self.username,
                                      password=self.password,
                                      will=last_will) as client:
                    await client.publish(self.status_topic, payload=ONLINE, retain=True)
                    await client.subscribe(self.response_topic)
                    for mqtt_topic in {sub.mqtt_topic for sub in self._subscriptions.values()}:
                        await client.subscribe(mqtt_topic)

                    self._client = client
                    self._connected.set()
                    logger.info(f"Connected to broker as {self.client_id}! Status: online")

                    async for message in client.messages:
                        await self._handle_message(message)

            except asyncio.CancelledError:
                raise # Let the stop() method handle this
            except Exception as e:
                logger.error(f"MQTT Connection lost: {e}. Retrying in 5s...")
                await asyncio.sleep(5)
            finally:
                self._client = None
                self._connected.clear()

    async def _execute(self, method: str, params: List[Any]) -> Any:
        await self._wait_connected(method)

        request = RpcRequest(method=method, params=params, id=self.next_id())
        correlation = str(request.id)
        future = asyncio.get_running_loop().create_future()
        self._requests[correlation] = _PendingRequest(method=method, future=future)

        properties = Properties(PacketTypes.PUBLISH)
        properties.ResponseTopic = self.response_topic
        properties.CorrelationData = correlation.encode('utf-8')

        try:
            await self._client.publish(self.request_topic,
                                       payload=request.to_bytes(),
                                       qos=1,
                                       properties=properties)
            logger.debug(f"Sent {method} as request {correlation}")
            response: RpcResponse = await asyncio.wait_for(future, timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise TransportError(f"{method} timed out after {self.request_timeout}s",
                                 type=ErrorType.TIMEOUT) from None
        finally:
            self._requests.pop(correlation, None)

        return response.unwrap()

    async def _wait_connected(self, method: str):
        try:
            await asyncio.wait_for(self._connected.wait(), timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise TransportError(f"Not connected to {self.host}:{self.port}, cannot send {method}",
                                 type=ErrorType.TIMEOUT) from None

    async def _handle_message(self, message):
        topic = str(message.topic)

        if topic == self.response_topic:
            self._handle_response(message)
            return

        # Callbacks run in their own tasks: they may send requests whose
        # responses arrive through this same message loop
        for subscription in list(self._subscriptions.values()):
            if message.topic.matches(subscription.mqtt_topic):
                task = asyncio.create_task(self._dispatch(subscription, message.payload))
                self._callback_tasks.add(task)
                task.add_done_callback(self._callback_done)

    def _callback_done(self, task: asyncio.Task):
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Push dispatch failed: {error!r}")

    def _handle_response(self, message):
        try:
            data = json.loads(message.payload.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Dropping malformed response on {self.response_topic}: {e}")
            return

        correlation_data = getattr(message.properties, 'CorrelationData', None)
        correlation = correlation_data.decode('utf-8') if correlation_data else str(data.get('id'))

        pending = self._requests.get(correlation)
        if pending is None or pending.future.done():
            logger.debug(f"No pending request for response {correlation}")
            return
        pending.future.set_result(RpcResponse.from_dict(data))

    async def _dispatch(self, subscription: _PushSubscription, payload: bytes):
        try:
            value = json.loads(payload.decode('utf-8')) if payload else None
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Dropping malformed push for {subscription.topic}: {e}")
            return

        try:
            result = subscription.callback(value)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Push callback for {subscription.topic} (#{subscription.id}) failed: {e}")

    async def subscribe(self, topic: str, params: Optional[List[Any]], callback: Callable[[Any], Any]) -> int:
        """
        Starts native push delivery of `topic`. Returns the subscription id.
        """
        subscription = _PushSubscription(
            id=self.next_id(),
            topic=topic,
            mqtt_topic=self.pubsub_pattern.format(topic=topic),
            params=list(params or []),
            callback=callback,
        )
        self._subscriptions[subscription.id] = subscription

        if self._client is not None:
            await self._client.subscribe(subscription.mqtt_topic)
        logger.info(f"Subscribed to {topic} on {subscription.mqtt_topic} as #{subscription.id}")
        return subscription.id

    async def unsubscribe(self, subscription_id: int) -> bool:
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            return False

        still_used = any(sub.mqtt_topic == subscription.mqtt_topic for sub in self._subscriptions.values())
        if self._client is not None and not still_used:
            await self._client.unsubscribe(subscription.mqtt_topic)
        logger.info(f"Unsubscribed #{subscription_id} from {subscription.topic}")
        return True
