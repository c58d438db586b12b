from datetime import datetime

from yuthukama.models.message import Message


def _conversation(client, headers, other_id):
    resp = client.get(f"/api/chat/user/{other_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def _send(client, headers, conversation_id, text=None, file=None):
    data = {"conversation_id": str(conversation_id)}
    if text is not None:
        data["text"] = text
    files = {"file": file} if file else None
    return client.post("/api/chat/messages", data=data, files=files, headers=headers)


def test_chat_requires_token(client):
    resp = client.get("/api/chat")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Not authorized, no token provided"}

    resp = client.get("/api/chat", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_get_or_create_is_idempotent(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")

    first = _conversation(client, alice, bob_id)
    second = _conversation(client, alice, bob_id)
    from_bob = _conversation(client, bob, alice_id)

    assert first["id"] == second["id"] == from_bob["id"]
    assert {p["id"] for p in first["participants"]} == {alice_id, bob_id}


def test_cannot_chat_with_self_or_unknown_user(client, register):
    alice_id, alice = register("alice")

    resp = client.get(f"/api/chat/user/{alice_id}", headers=alice)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot start conversation with self"

    resp = client.get("/api/chat/user/9999", headers=alice)
    assert resp.status_code == 404


def test_messages_are_chronological_and_delivered(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)

    for text in ("one", "two", "three"):
        resp = _send(client, alice, conv["id"], text)
        assert resp.status_code == 201, resp.text
        assert resp.json()["status"] == "delivered"

    resp = client.get(f"/api/chat/{conv['id']}/messages", headers=alice)
    assert resp.status_code == 200
    assert [m["text"] for m in resp.json()] == ["one", "two", "three"]
    # the sender reading its own messages does not mark them read
    assert all(m["read_at"] is None for m in resp.json())


def test_fetching_as_recipient_marks_read_once(client, register, db):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    _send(client, alice, conv["id"], "hi bob")

    assert client.get(f"/api/chat/{conv['id']}/unread-count", headers=bob).json() == {"count": 1}

    messages = client.get(f"/api/chat/{conv['id']}/messages", headers=bob).json()
    assert messages[0]["status"] == "read"
    assert messages[0]["read_by"] == "bob"
    first_read_at = messages[0]["read_at"]
    assert first_read_at is not None

    again = client.get(f"/api/chat/{conv['id']}/messages", headers=bob).json()
    assert again[0]["read_at"] == first_read_at
    assert client.get(f"/api/chat/{conv['id']}/unread-count", headers=bob).json() == {"count": 0}


def test_mark_read_endpoint(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    _send(client, alice, conv["id"], "a")
    _send(client, alice, conv["id"], "b")
    _send(client, bob, conv["id"], "c")

    resp = client.put(f"/api/chat/{conv['id']}/read", headers=bob)
    assert resp.json() == {"updated": 2}
    resp = client.put(f"/api/chat/{conv['id']}/read", headers=bob)
    assert resp.json() == {"updated": 0}


def test_outsider_cannot_read_conversation(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    _, carol = register("carol")
    conv = _conversation(client, alice, bob_id)

    resp = client.get(f"/api/chat/{conv['id']}/messages", headers=carol)
    assert resp.status_code == 403
    assert resp.json() == {"message": "Access denied"}

    resp = _send(client, carol, conv["id"], "let me in")
    assert resp.status_code == 403

    assert client.get("/api/chat/12345/messages", headers=carol).status_code == 404


def test_conversations_sorted_by_latest_activity(client, register):
    alice_id, alice = register("alice")
    bob_id, _ = register("bob")
    carol_id, _ = register("carol")

    with_bob = _conversation(client, alice, bob_id)
    with_carol = _conversation(client, alice, carol_id)
    _send(client, alice, with_bob["id"], "ping")

    convs = client.get("/api/chat", headers=alice).json()
    assert [c["id"] for c in convs] == [with_bob["id"], with_carol["id"]]
    assert convs[0]["last_message"] == "ping"


def test_message_needs_text_or_attachment(client, register):
    alice_id, alice = register("alice")
    bob_id, _ = register("bob")
    conv = _conversation(client, alice, bob_id)

    resp = _send(client, alice, conv["id"], "   ")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Message text or attachment is required"


def test_attachment_upload(client, register, upload_dir):
    alice_id, alice = register("alice")
    bob_id, _ = register("bob")
    conv = _conversation(client, alice, bob_id)

    resp = _send(client, alice, conv["id"], file=("cat pic.png", b"\x89PNG....", "image/png"))
    assert resp.status_code == 201, resp.text
    msg = resp.json()
    assert msg["text"] is None
    assert msg["attachment"]["kind"] == "image"
    assert msg["attachment"]["filename"] == "cat pic.png"
    assert msg["attachment"]["size_bytes"] == 8
    stored = msg["attachment"]["url"].rsplit("/", 1)[-1]
    assert (upload_dir / stored).read_bytes() == b"\x89PNG...."

    convs = client.get("/api/chat", headers=alice).json()
    assert convs[0]["last_message"] == "[image] cat pic.png"


def test_attachment_too_large(client, register):
    alice_id, alice = register("alice")
    bob_id, _ = register("bob")
    conv = _conversation(client, alice, bob_id)

    resp = _send(client, alice, conv["id"], file=("big.bin", b"x" * 2048, "application/octet-stream"))
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("File too large")


def test_edit_rules(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    msg = _send(client, alice, conv["id"], "hello").json()

    resp = client.put(f"/api/chat/messages/{msg['id']}", json={"text": "hello again"}, headers=alice)
    assert resp.status_code == 200
    assert resp.json()["text"] == "hello again"
    assert resp.json()["edited_at"] is not None

    resp = client.put(f"/api/chat/messages/{msg['id']}", json={"text": "hijack"}, headers=bob)
    assert resp.status_code == 403

    resp = client.put(f"/api/chat/messages/{msg['id']}", json={"text": "   "}, headers=alice)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"

    assert client.put("/api/chat/messages/999", json={"text": "x"}, headers=alice).status_code == 404


def test_soft_delete_keeps_row_and_hides_content(client, register, db):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    msg = _send(client, alice, conv["id"], "secret").json()

    assert client.delete(f"/api/chat/messages/{msg['id']}", headers=bob).status_code == 403

    resp = client.delete(f"/api/chat/messages/{msg['id']}", headers=alice)
    assert resp.status_code == 200
    assert resp.json()["deleted"] is True
    assert resp.json()["text"] is None

    listed = client.get(f"/api/chat/{conv['id']}/messages", headers=bob).json()
    assert len(listed) == 1
    assert listed[0]["deleted"] is True
    assert listed[0]["text"] is None

    row = db.get(Message, msg["id"])
    assert row.text == "secret"
    assert row.deleted_at is not None

    # deleted messages are frozen
    resp = client.put(f"/api/chat/messages/{msg['id']}", json={"text": "revive"}, headers=alice)
    assert resp.status_code == 400
    assert client.delete(f"/api/chat/messages/{msg['id']}", headers=alice).status_code == 400


def test_preview_follows_edits_and_deletes(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    first = _send(client, alice, conv["id"], "first").json()
    latest = _send(client, alice, conv["id"], "secret").json()

    client.put(f"/api/chat/messages/{latest['id']}", json={"text": "edited"}, headers=alice)
    assert client.get("/api/chat", headers=bob).json()[0]["last_message"] == "edited"

    client.delete(f"/api/chat/messages/{latest['id']}", headers=alice)
    assert client.get("/api/chat", headers=bob).json()[0]["last_message"] == "first"

    client.delete(f"/api/chat/messages/{first['id']}", headers=alice)
    assert client.get("/api/chat", headers=bob).json()[0]["last_message"] == ""


def test_markup_in_message_text_is_kept(client, register):
    alice_id, alice = register("alice")
    bob_id, _ = register("bob")
    conv = _conversation(client, alice, bob_id)

    resp = _send(client, alice, conv["id"], "onclick= handlers are bad, so is <script>")
    assert resp.status_code == 201
    assert resp.json()["text"] == "onclick= handlers are bad, so is <script>"


def test_status_variant_from_response(client, register):
    alice_id, alice = register("alice")
    bob_id, bob = register("bob")
    conv = _conversation(client, alice, bob_id)
    _send(client, alice, conv["id"], "hi")

    from yuthukama.domain.status import Delivered, Read
    from yuthukama.schemas.chat import MessageOut

    sent = MessageOut.model_validate(client.get(f"/api/chat/{conv['id']}/messages", headers=alice).json()[0])
    assert isinstance(sent.status_variant(), Delivered)

    seen = MessageOut.model_validate(client.get(f"/api/chat/{conv['id']}/messages", headers=bob).json()[0])
    variant = seen.status_variant()
    assert isinstance(variant, Read)
    assert variant.by == "bob"
    assert isinstance(variant.at, datetime)
