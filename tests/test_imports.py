"""
Verify package structure and module imports.
"""


def test_core_imports():
    """Assert that the core modules can be imported without syntax errors."""
    import ethapi
    import ethapi.api
    import ethapi.polling
    import ethapi.pubsub
    import ethapi.subscriptions
    import ethapi.contract

    assert ethapi.__version__ == "0.1.0"
    assert ethapi.Api is ethapi.api.Api


def test_transport_and_middleware_imports():
    import ethapi.transport.base
    import ethapi.transport.mqtt
    import ethapi.middleware.injector
    import ethapi.middleware.local
    import ethapi.main

    assert ethapi.transport.MqttTransport is ethapi.transport.mqtt.MqttTransport
