"""
Emulated Subscriptions.

This module is responsible for:
- Validating subscription names against the topics that can be emulated.
- Allocating subscription ids and keeping the live record table.
- Running one background watcher task per subscription that re-reads the
  underlying operation every `interval` seconds and calls back when the
  value differs from the last one delivered.
- Cancelling watchers on unsubscribe. Deliveries are checked against the
  live table right before the callback, so nothing is delivered for an id
  once `unsubscribe()` has returned.
"""
import asyncio
import inspect
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ethapi.errors import InvalidTopic, UnknownSubscription, is_request_rejected
from ethapi.models import Subscription, SubscriptionState
from ethapi.polling import ErrorSink, log_error
from ethapi.rpc.base import MethodGroupName

logger = logging.getLogger(__name__)

# Topic name -> (method group, operation) it is emulated with
TOPICS: Dict[str, Tuple[MethodGroupName, str]] = {
    'eth_accounts': (MethodGroupName.ETH, 'accounts'),
    'eth_blockNumber': (MethodGroupName.ETH, 'block_number'),
    'eth_syncing': (MethodGroupName.ETH, 'syncing'),
    'net_peerCount': (MethodGroupName.NET, 'peer_count'),
    'parity_accountsInfo': (MethodGroupName.PARITY, 'accounts_info'),
    'parity_allAccountsInfo': (MethodGroupName.PARITY, 'all_accounts_info'),
    'parity_defaultAccount': (MethodGroupName.PARITY, 'default_account'),
    'parity_netPeers': (MethodGroupName.PARITY, 'net_peers'),
    'parity_nodeHealth': (MethodGroupName.PARITY, 'node_health'),
    'personal_listAccounts': (MethodGroupName.PERSONAL, 'list_accounts'),
    'signer_requestsToConfirm': (MethodGroupName.SIGNER, 'requests_to_confirm'),
}


class SubscriptionManager:
    interval: float
    _subscriptions: Dict[int, Subscription]

    """
    Emulates push notifications on top of one-shot requests.
    Bound to the Api so watchers go through its method groups.
    """
    def __init__(self, api, interval: float = 1.0, error_sink: Optional[ErrorSink] = None):
        self._api = api
        self.interval = interval
        self._error_sink = error_sink or log_error
        self._ids = itertools.count(1)
        self._subscriptions = {}

    @property
    def topics(self) -> List[str]:
        return sorted(TOPICS)

    @property
    def active(self) -> List[int]:
        return list(self._subscriptions)

    def get(self, subscription_id: int) -> Optional[Subscription]:
        return self._subscriptions.get(subscription_id)

    async def subscribe(self, name: str, callback: Callable[[Any], Any]) -> int:
        if name not in TOPICS:
            raise InvalidTopic(name)

        group, operation = TOPICS[name]
        subscription = Subscription(id=next(self._ids), name=name, callback=callback)
        self._subscriptions[subscription.id] = subscription

        watcher = self._watch(subscription, self._api.group(group).operation(operation))
        subscription.task = asyncio.get_running_loop().create_task(watcher)
        subscription.state = SubscriptionState.ACTIVE

        logger.info(f"Subscribed to {name} as #{subscription.id}")
        return subscription.id

    async def unsubscribe(self, subscription_id: int) -> bool:
        """
        Stops the subscription. Unknown (or already removed) ids raise
        UnknownSubscription rather than succeeding silently.
        """
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            raise UnknownSubscription(subscription_id)

        subscription.state = SubscriptionState.UNSUBSCRIBED
        if subscription.task is not None:
            subscription.task.cancel()

        logger.info(f"Unsubscribed #{subscription_id} from {subscription.name}")
        return True

    async def close(self) -> None:
        """Unsubscribes everything still active."""
        for subscription_id in list(self._subscriptions):
            await self.unsubscribe(subscription_id)

    def _is_live(self, subscription: Subscription) -> bool:
        return self._subscriptions.get(subscription.id) is subscription

    async def _watch(self, subscription: Subscription, operation: Callable[[], Any]):
        """The background worker that re-reads a topic until cancelled."""
        while self._is_live(subscription):
            try:
                value = await operation()
            except Exception as error:
                if is_request_rejected(error):
                    logger.debug(f"{subscription.name} (#{subscription.id}) rejected: {error}")
                else:
                    self._report(subscription, error)
            else:
                if not subscription.delivered or value != subscription.last_value:
                    await self._deliver(subscription, value)

            await asyncio.sleep(self.interval)

    def _report(self, subscription: Subscription, error: Exception):
        try:
            self._error_sink(f"subscription {subscription.name} (#{subscription.id})", error)
        except Exception as e:
            # A broken sink must not end the watcher
            logger.error(f"Error sink failed for {subscription.name} (#{subscription.id}): {e!r} (reporting {error!r})")

    async def _deliver(self, subscription: Subscription, value: Any):
        # Check the table as it is now, the watcher may have been suspended across an unsubscribe
        if not self._is_live(subscription):
            return

        subscription.last_value = value
        subscription.delivered = True
        try:
            result = subscription.callback(value)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Callback for {subscription.name} (#{subscription.id}) failed: {e}")
