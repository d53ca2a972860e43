"""
Native push notifications.

Only built when the transport can `subscribe()` itself. Calls are passed
straight through; the transport owns the bookkeeping.
"""
from typing import Any, Callable, List, Optional


class Pubsub:

    def __init__(self, transport):
        self._transport = transport

    @property
    def transport(self):
        return self._transport

    async def subscribe(self, topic: str, params: Optional[List[Any]], callback: Callable[[Any], Any]) -> Any:
        return await self._transport.subscribe(topic, params, callback)

    async def unsubscribe(self, subscription_id: Any) -> bool:
        return await self._transport.unsubscribe(subscription_id)
