import asyncio

from salesbot.services.chat_session import (
    EMPTY_FIELD,
    GREETING,
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_LOADING,
    STATUS_READY,
    ChatSession,
)


def _loaded_session(engine):
    session = ChatSession(engine_factory=lambda settings: engine)
    assert asyncio.run(session.load()) is True
    return session


def test_new_session_greets_and_waits_for_the_model():
    session = ChatSession()
    assert [m.text for m in session.messages] == [GREETING]
    assert session.status == STATUS_LOADING
    assert session.can_send("hello") is False
    assert session.selected_items_text == EMPTY_FIELD
    assert session.contact_text == EMPTY_FIELD


def test_load_failure_is_shown_in_status():
    def broken_factory(settings):
        raise RuntimeError("missing weights")

    session = ChatSession(engine_factory=broken_factory)

    assert asyncio.run(session.load()) is False
    assert session.status == "Error loading model: missing weights"
    assert session.busy is False
    assert session.can_send("hello") is False
    assert asyncio.run(session.send("hello")) is None


def test_send_appends_both_sides_of_the_turn(scripted_engine, kayak_json):
    session = _loaded_session(scripted_engine(kayak_json))
    assert session.status == STATUS_READY

    result = asyncio.run(session.send("  I want a small motor for my kayak  "))

    assert result.changed is True
    assert [(m.sender, m.kind) for m in session.messages[1:]] == [("You", "user"), ("Assistant", "assistant")]
    assert session.messages[1].text == "I want a small motor for my kayak"
    assert session.messages[2].text == result.reply
    assert session.selected_items_text == "RiverLite 2–6hp (portable)"
    assert session.contact_text == EMPTY_FIELD
    assert session.status == STATUS_READY


def test_blank_input_is_ignored(scripted_engine):
    engine = scripted_engine()
    session = _loaded_session(engine)

    assert session.can_send("   ") is False
    assert asyncio.run(session.send("   ")) is None
    assert len(session.messages) == 1
    assert engine.calls == []


def test_busy_session_rejects_a_second_turn(scripted_engine):
    engine = scripted_engine()
    session = _loaded_session(engine)
    session.busy = True

    assert session.can_send("hello") is False
    assert asyncio.run(session.send("hello")) is None
    assert engine.calls == []


def test_complete_state_switches_status_to_done(scripted_engine, kayak_json, email_json):
    session = _loaded_session(scripted_engine(kayak_json, email_json))
    asyncio.run(session.send("kayak motor please"))
    asyncio.run(session.send("jane@example.com"))

    assert session.status == STATUS_DONE
    assert session.contact_text == "jane@example.com"


def test_unexpected_turn_error_becomes_an_error_message(scripted_engine):
    session = _loaded_session(scripted_engine())

    async def exploding_turn(text):
        raise RuntimeError("kaboom")

    session.orchestrator.handle_user_turn = exploding_turn

    assert asyncio.run(session.send("hello")) is None
    assert session.messages[-1].text == "Error: kaboom"
    assert session.messages[-1].kind == "error"
    assert session.status == STATUS_ERROR
    assert session.busy is False
