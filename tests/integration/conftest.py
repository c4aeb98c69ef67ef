"""
Shared fixtures for integration tests.

Integration tests validate multi-component workflows with minimal mocking.
They run the real plugin against the in-memory NATS client, with a real
config file on disk.
"""

import json

import pytest
import pytest_asyncio

from plugins.pokenews import PokeNewsPlugin
from plugins.pokenews.settings import ConfigStore, CountdownConfig
from tests.fixtures.mock_nats import create_mock_nats


@pytest.fixture
def countdown_config():
    """Short countdown: 10 seconds with the early warning at 5 seconds left."""
    return CountdownConfig(
        cycle_length=200,
        pre_event_offset=100,
        final_countdown_offset=20,
        pending_threshold=60,
        terminal_action="pokekill",
        message_prefix="&#ffffff&l[PN] &r",
        message_pre_event="&cTeam Rocket is plotting!",
        message_stolen="&4Team Rocket has stolen all wild Pokémon!",
        message_grace_period="Next wipe in {time}",
        message_pending="Time left: {time}",
    )


@pytest.fixture
def countdown_config_file(tmp_path, countdown_config):
    """Countdown config written to a temporary JSON file."""
    path = tmp_path / "pokenews_config.json"
    ConfigStore(path).save(countdown_config)
    return path


@pytest_asyncio.fixture(scope="function")
async def nats_bus():
    """Connected in-memory NATS client, closed after the test."""
    nats = create_mock_nats()
    yield nats
    await nats.close()


@pytest_asyncio.fixture(scope="function")
async def running_plugin(nats_bus, countdown_config_file):
    """PokeNews plugin initialized on the in-memory bus."""
    plugin = PokeNewsPlugin(nats_bus, {"config_path": str(countdown_config_file)})
    await plugin.initialize()
    yield plugin
    await plugin.shutdown()


@pytest.fixture
def host_bridge(nats_bus):
    """Helpers that play the game server side of the bus."""

    class HostBridge:
        tick_subject = "pokenews.platform.server.tick"

        async def tick(self, count: int = 1):
            for _ in range(count):
                await nats_bus.publish(self.tick_subject, b"")
            await nats_bus.flush()

        async def command(self, action: str, payload: dict):
            response = await nats_bus.request(
                f"pokenews.commands.pokenews.{action}",
                json.dumps(payload).encode()
            )
            return json.loads(response.data.decode())

    return HostBridge()
