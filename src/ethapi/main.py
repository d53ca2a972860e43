"""
Entry point for watching a node from the command line.

This module is responsible for:
- Loading configuration (config.yaml next to the working directory).
- Starting the MQTT transport and building the Api on top of it.
- Subscribing to every topic listed under `watch.topics` and logging updates.
- Shutting everything down in order on SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal

from typing import List

from ethapi.api import Api
from ethapi.config_loader import configured_topics, load_api_config
from ethapi.logging_setup import setup_logging
from ethapi.transport.mqtt import MqttTransport

logger = logging.getLogger(__name__)

def log_update(topic: str):
    def callback(value):
        logger.info(f"{topic}: {value}")
    return callback


async def watch_topics(api: Api, topics: List[str]) -> List[int]:
    """Subscribes to each topic, returning the subscription ids."""
    subscription_ids = []
    for topic in topics:
        subscription_ids.append(await api.subscribe(topic, log_update(topic)))
    logger.info(f"Watching {', '.join(topics)}")
    return subscription_ids


async def shutdown(signal_name: str, api: Api, transport: MqttTransport):
    """Graceful shutdown handler."""
    logger.info(f"Received exit signal {signal_name}...")

    # Subscriptions first, they still use the transport
    await api.close()
    await transport.stop()

    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    for task in tasks:
        task.cancel()
    # Cancelling the runner task ends asyncio.run()
    await asyncio.gather(*tasks, return_exceptions=True)


async def main_application_runner():
    setup_logging()
    logger.info("Starting ethapi watcher...")

    api_config, config = load_api_config("config.yaml")

    loop = asyncio.get_running_loop()

    transport = MqttTransport(config=config)
    await transport.start()

    api = Api(transport, config=api_config)
    await watch_topics(api, configured_topics(config))

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(
            sig,
            lambda s=sig: asyncio.create_task(shutdown(s.name, api, transport))
        )

    logger.info("Watcher is running. Press Ctrl+C to exit.")

    try:
        await asyncio.Future()
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    try:
        asyncio.run(main_application_runner())
    except KeyboardInterrupt:
        pass
