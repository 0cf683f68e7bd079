# =============================================================================
# REALTIME GATEWAY TESTS
# =============================================================================

import pytest

from helpdesk.realtime.application import RealtimeGateway
from helpdesk.realtime.domain import ServerEvents
from helpdesk.realtime.interfaces.controllers import dispatch_event

from tests.fakes import FakeConnection


def joined(gateway, ticket_id, *ids):
    conns = [FakeConnection(i) for i in ids]
    for conn in conns:
        gateway.connect(conn)
        gateway.join_room(conn, ticket_id)
    return conns


async def send(gateway, conn, ticket_id="T1", sender="u-cust", name="Casey",
               role="customer", content="My printer is on fire"):
    return await gateway.send_message(conn, ticket_id, sender, name, role, content)


class TestJoin:

    async def test_double_join_receives_message_once(self, gateway):
        (conn,) = joined(gateway, "T1", "c1")
        gateway.join_room(conn, "T1")

        await send(gateway, conn)

        assert len(conn.named(ServerEvents.RECEIVE_MESSAGE)) == 1

    @pytest.mark.parametrize("ticket_id", ["", "   ", None, 42, "x" * 500])
    def test_malformed_ticket_id_is_rejected(self, gateway, registry, ticket_id):
        conn = FakeConnection("c1")

        assert gateway.join_room(conn, ticket_id) is False
        assert registry.room_count == 0
        assert conn.named(ServerEvents.MESSAGE_ERROR)[0].data["code"] == "invalid_message"

    @pytest.mark.parametrize("limit,accepted", [(3, ["T12"]), (0, [])])
    def test_ticket_id_length_limit_is_honored(self, registry, ticket_store, user_directory, limit, accepted):
        gateway = RealtimeGateway(registry, ticket_store, user_directory, max_ticket_id_length=limit)
        conn = FakeConnection("c1")

        results = {tid: gateway.join_room(conn, tid) for tid in ("T12", "T123")}

        assert [tid for tid, ok in results.items() if ok] == accepted

    def test_disconnect_leaves_all_rooms(self, gateway, registry):
        (conn,) = joined(gateway, "T1", "c1")
        gateway.join_room(conn, "T2")

        gateway.disconnect(conn)

        assert registry.room_count == 0
        assert registry.connection_count == 0


class TestSendMessage:

    async def test_fan_out_to_room_only(self, gateway):
        """Three T1 members get the message; the T2 member does not."""
        t1 = joined(gateway, "T1", "a", "b", "c")
        (t2,) = joined(gateway, "T2", "d")

        await send(gateway, t1[0])

        for conn in t1:
            (event,) = conn.named(ServerEvents.RECEIVE_MESSAGE)
            assert event.data["message"] == "My printer is on fire"
            assert event.data["username"] == "Casey"
            assert event.data["role"] == "customer"
            assert event.data["timestamp"].startswith("2024-01-15T12:00:00")
        assert t2.events == []

    async def test_message_is_persisted(self, gateway, ticket_store, now):
        (conn,) = joined(gateway, "T1", "c1")

        await send(gateway, conn)

        (stored,) = ticket_store.messages["T1"]
        assert stored.sender_id == "u-cust"
        assert stored.role == "customer"
        assert stored.content == "My printer is on fire"
        assert stored.created_at == now

    async def test_message_persisted_without_room_members(self, gateway, ticket_store):
        conn = FakeConnection("c1")

        await send(gateway, conn)

        assert len(ticket_store.messages["T1"]) == 1
        assert conn.events == []

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_content_is_rejected(self, gateway, ticket_store, content):
        sender, other = joined(gateway, "T1", "sender", "other")

        result = await send(gateway, sender, content=content)

        assert result is None
        assert ticket_store.append_calls == 0
        assert sender.named(ServerEvents.RECEIVE_MESSAGE) == []
        assert other.events == []
        (error,) = sender.named(ServerEvents.MESSAGE_ERROR)
        assert error.data["code"] == "invalid_message"

    @pytest.mark.parametrize("field", ["ticket_id", "sender", "name", "role"])
    async def test_missing_field_is_rejected(self, gateway, ticket_store, field):
        (conn,) = joined(gateway, "T1", "c1")

        await send(gateway, conn, **{field: None})

        assert ticket_store.append_calls == 0
        assert conn.named(ServerEvents.MESSAGE_ERROR)[0].data["code"] == "invalid_message"

    async def test_unknown_role_is_rejected(self, gateway, ticket_store):
        (conn,) = joined(gateway, "T1", "c1")

        await send(gateway, conn, role="superuser")

        assert ticket_store.append_calls == 0
        assert conn.named(ServerEvents.MESSAGE_ERROR)

    async def test_persistence_failure_only_reaches_sender(self, gateway, ticket_store):
        sender, other = joined(gateway, "T1", "sender", "other")
        ticket_store.fail_append = True

        await send(gateway, sender)

        assert len(sender.named(ServerEvents.RECEIVE_MESSAGE)) == 1
        assert len(other.named(ServerEvents.RECEIVE_MESSAGE)) == 1
        (error,) = sender.named(ServerEvents.MESSAGE_ERROR)
        assert error.data["code"] == "persistence_failed"
        assert other.named(ServerEvents.MESSAGE_ERROR) == []

    async def test_unknown_ticket_reports_persistence_failure(self, gateway):
        (conn,) = joined(gateway, "T404", "c1")

        await send(gateway, conn, ticket_id="T404")

        assert conn.named(ServerEvents.MESSAGE_ERROR)[0].data["code"] == "persistence_failed"


class TestReward:

    async def test_customer_earns_nothing(self, gateway, user_directory, customer_user):
        (conn,) = joined(gateway, "T1", "c1")

        await send(gateway, conn, sender="u-cust", role="customer")

        assert user_directory.increment_calls == []
        assert customer_user.points == 0

    @pytest.mark.parametrize("sender,role", [("u-staff", "staff"), ("u-admin", "admin"), ("u-staff", "Staff")])
    async def test_staff_and_admin_earn_five(self, gateway, user_directory, sender, role):
        (conn,) = joined(gateway, "T1", "c1")

        await send(gateway, conn, sender=sender, role=role)

        assert user_directory.increment_calls == [(sender, 5)]
        assert user_directory.users[sender].points == 5

    async def test_reward_failure_is_not_surfaced(self, gateway, user_directory, ticket_store):
        (conn,) = joined(gateway, "T1", "c1")
        user_directory.fail_increment = True

        result = await send(gateway, conn, sender="u-staff", role="staff")

        assert result is not None
        assert len(ticket_store.messages["T1"]) == 1
        assert conn.named(ServerEvents.MESSAGE_ERROR) == []

    async def test_no_reward_when_persistence_fails(self, gateway, user_directory, ticket_store):
        (conn,) = joined(gateway, "T1", "c1")
        ticket_store.fail_append = True

        await send(gateway, conn, sender="u-staff", role="staff")

        assert user_directory.increment_calls == []


class TestTicketUpdates:

    def test_update_reaches_every_connection(self, gateway):
        in_room = joined(gateway, "T1", "a")
        elsewhere = joined(gateway, "T2", "b")
        roomless = FakeConnection("c")
        gateway.connect(roomless)

        assert gateway.emit_ticket_update("T1", {"status": "closed"}) == 3

        for conn in in_room + elsewhere + [roomless]:
            (event,) = conn.named("ticket-update-T1")
            assert event.data == {"status": "closed"}

    def test_disconnected_connection_gets_no_updates(self, gateway):
        (conn,) = joined(gateway, "T1", "a")
        gateway.disconnect(conn)

        assert gateway.emit_ticket_update("T1", {"status": "closed"}) == 0


class TestDispatch:

    async def test_non_string_message_field_is_invalid_message(self, gateway, ticket_store):
        (conn,) = joined(gateway, "T1", "c1")
        frame = (
            '{"event": "sendMessage", "data": {"ticketId": "T1", "message": 42,'
            ' "userId": "u-cust", "username": "Casey", "role": "customer"}}'
        )

        await dispatch_event(gateway, conn, frame)

        assert [e.data["code"] for e in conn.named(ServerEvents.MESSAGE_ERROR)] == ["invalid_message"]
        assert ticket_store.append_calls == 0

    async def test_garbage_frame_is_invalid_event(self, gateway):
        conn = FakeConnection("c1")

        await dispatch_event(gateway, conn, "not json")

        assert conn.named(ServerEvents.MESSAGE_ERROR)[0].data["code"] == "invalid_event"
