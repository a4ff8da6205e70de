"""Tests for the client WebSocket protocol."""


def _authenticate(ws, user_id="alice") -> dict:
    ws.send_json({"type": "authenticate", "user_id": user_id})
    return ws.receive_json()


def test_requires_authentication(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "join_room", "room_id": "cafe"})
        message = ws.receive_json()
        assert message == {
            "type": "error",
            "code": "unauthenticated",
            "message": "Authenticate first",
        }


def test_authenticate(client):
    with client.websocket_connect("/ws") as ws:
        message = _authenticate(ws)
        assert message["type"] == "authenticated"
        assert message["user_id"] == "alice"
        assert message["level"] == 1
        assert message["online_users"] == ["alice"]


def test_invalid_user_id(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "authenticate", "user_id": "../root"})
        message = ws.receive_json()
        assert message["type"] == "error"
        assert message["code"] == "validation_error"


def test_session_update_pushes_progress(client):
    with client.websocket_connect("/ws") as ws:
        _authenticate(ws)
        ws.send_json(
            {
                "type": "session_update",
                "report": {"session_type": "vocabulary", "accuracy_rate": 100},
            }
        )
        message = ws.receive_json()
        assert message["type"] == "learning_progress_updated"
        assert message["outcome"]["progress"]["xp_earned"] == 10
        assert message["adaptation"]["motivation_message"]


def test_invalid_session_update(client):
    with client.websocket_connect("/ws") as ws:
        _authenticate(ws)
        report = {"session_type": "grammar", "accuracy_rate": -1}
        ws.send_json({"type": "session_update", "report": report})
        message = ws.receive_json()
        assert message["code"] == "validation_error"


def test_conversation_in_room(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        _authenticate(alice, "alice")
        _authenticate(bob, "bob")
        assert alice.receive_json() == {
            "type": "presence_update",
            "user_id": "bob",
            "status": "online",
        }

        alice.send_json({"type": "join_room", "room_id": "cafe"})
        assert alice.receive_json() == {"type": "room_joined", "room_id": "cafe"}
        bob.send_json({"type": "join_room", "room_id": "cafe"})
        assert bob.receive_json() == {"type": "room_joined", "room_id": "cafe"}
        assert alice.receive_json()["type"] == "participant_joined"

        bob.send_json({"type": "conversation_message", "text": "Hello all.", "room_id": "cafe"})
        reply = bob.receive_json()
        assert reply["type"] == "conversation_reply"
        assert reply["reply"]["source"] == "mock"

        relayed = alice.receive_json()
        assert relayed == {
            "type": "room_message",
            "room_id": "cafe",
            "user_id": "bob",
            "text": "Hello all.",
        }


def test_unknown_message_type(client):
    with client.websocket_connect("/ws") as ws:
        _authenticate(ws)
        ws.send_json({"type": "dance"})
        message = ws.receive_json()
        assert message["code"] == "unknown_message_type"


def test_malformed_frames_keep_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("[1, 2, 3]")
        assert ws.receive_json()["code"] == "validation_error"

        ws.send_text("not json")
        assert ws.receive_json() == {
            "type": "error",
            "code": "validation_error",
            "message": "Messages must be valid JSON",
        }

        assert _authenticate(ws)["type"] == "authenticated"


def test_invalid_conversation_history(client):
    with client.websocket_connect("/ws") as ws:
        _authenticate(ws)
        ws.send_json({"type": "conversation_message", "text": "Hi there.", "history": "nope"})
        assert ws.receive_json()["code"] == "validation_error"

        ws.send_json({"type": "conversation_message", "text": "Hi there."})
        assert ws.receive_json()["type"] == "conversation_reply"
