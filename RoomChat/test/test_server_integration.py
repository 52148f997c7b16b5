"""
Integration tests against a live server over real websocket connections.
"""

import asyncio
import json

import pytest
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def recv_json(websocket, timeout: float = 2.0):
    return json.loads(await asyncio.wait_for(websocket.recv(), timeout))


async def send_json(websocket, **packet):
    await websocket.send(json.dumps(packet))


def _url(server) -> str:
    return f"ws://127.0.0.1:{server.port}"


async def _wait_for(predicate, timeout: float = 2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestLiveServer:
    """End-to-end protocol tests."""

    async def test_server_running(self, live_server):
        assert live_server.is_running
        assert live_server.port

    async def test_two_client_exchange(self, live_server):
        async with connect(_url(live_server)) as alice, connect(_url(live_server)) as bob:
            await send_json(alice, type="hello", username="alice")
            assert await recv_json(alice) == {"type": "rooms", "rooms": []}
            assert await recv_json(alice) == {"type": "system", "text": "Hello alice"}

            await send_json(alice, type="create", room="lobby")
            assert await recv_json(alice) == {"type": "joined", "room": "lobby"}

            await send_json(bob, type="hello", username="bob")
            assert await recv_json(bob) == {"type": "rooms", "rooms": ["lobby"]}
            assert await recv_json(bob) == {"type": "system", "text": "Hello bob"}

            await send_json(bob, type="join", room="lobby")
            assert await recv_json(alice) == {"type": "system", "text": 'bob joined "lobby"'}
            assert await recv_json(bob) == {"type": "joined", "room": "lobby"}
            assert await recv_json(bob) == {"type": "rooms", "rooms": ["lobby"]}

            await send_json(bob, type="chat", text="hi")
            for client in (alice, bob):
                message = await recv_json(client)
                assert message["type"] == "chat"
                assert message["username"] == "bob"
                assert message["text"] == "hi"
                assert message["room"] == "lobby"
                assert isinstance(message["ts"], int)

    async def test_wrong_password(self, live_server):
        async with connect(_url(live_server)) as owner, connect(_url(live_server)) as guest:
            await send_json(owner, type="create", room="vip", password="secret")
            assert await recv_json(owner) == {"type": "joined", "room": "vip"}

            await send_json(guest, type="join", room="vip", password="wrong")
            assert await recv_json(guest) == {"type": "error", "text": "Wrong password"}

            assert live_server.state.directory.members("vip") == {
                r.conn_id for r in live_server.state.registry.connections() if r.room == "vip"
            }
            assert len(live_server.state.directory.members("vip")) == 1

    async def test_malformed_frame_ignored(self, live_server):
        async with connect(_url(live_server)) as client:
            await client.send("this is not json")
            await client.send(b'{"type": 1}')
            await send_json(client, type="list")

            assert await recv_json(client) == {"type": "rooms", "rooms": []}

    async def test_chat_outside_room(self, live_server):
        async with connect(_url(live_server)) as client:
            await send_json(client, type="chat", text="anyone?")
            assert await recv_json(client) == {"type": "error", "text": "Join or create a room first"}

    async def test_disconnect_notifies_room(self, live_server):
        async with connect(_url(live_server)) as alice:
            await send_json(alice, type="hello", username="alice")
            await recv_json(alice)
            await recv_json(alice)
            await send_json(alice, type="create", room="lobby")
            await recv_json(alice)

            async with connect(_url(live_server)) as bob:
                await send_json(bob, type="hello", username="bob")
                await send_json(bob, type="join", room="lobby")
                assert await recv_json(alice) == {"type": "system", "text": 'bob joined "lobby"'}

            assert await recv_json(alice) == {"type": "system", "text": 'bob left "lobby"'}
            assert len(live_server.state.registry) == 1

        await _wait_for(lambda: len(live_server.state.registry) == 0)
        assert len(live_server.state.directory) == 0

    async def test_client_answers_probes(self, live_server):
        """Test a responsive client is never evicted."""
        async with connect(_url(live_server)) as client:
            await send_json(client, type="list")
            await recv_json(client)
            record = live_server.state.registry.connections()[0]

            for _ in range(3):
                assert live_server.monitor.check_connections() == []
                await _wait_for(lambda: record.is_alive)

            assert len(live_server.state.registry) == 1

    async def test_unresponsive_client_evicted(self, live_server):
        """Test a connection flagged silent is aborted and removed on the next tick."""
        async with connect(_url(live_server)) as alice, connect(_url(live_server)) as bob:
            await send_json(alice, type="create", room="lobby")
            await recv_json(alice)
            await send_json(bob, type="hello", username="bob")
            await recv_json(bob)
            await recv_json(bob)
            await send_json(bob, type="join", room="lobby")
            await recv_json(alice)
            await recv_json(bob)
            await recv_json(bob)

            bob_record = next(r for r in live_server.state.registry.connections() if r.username == "bob")
            bob_record.is_alive = False

            assert live_server.monitor.check_connections() == [bob_record.conn_id]

            assert await recv_json(alice) == {"type": "system", "text": 'bob left "lobby"'}
            with pytest.raises(ConnectionClosed):
                await asyncio.wait_for(bob.recv(), 2.0)
            assert bob_record.conn_id not in live_server.state.registry
