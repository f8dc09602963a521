#!/usr/bin/env python3
"""
Console demo: chat with the sales assistant against the configured backend
"""

import asyncio

from salesbot.config import load_settings
from salesbot.logging.console import setup_logging
from salesbot.services.chat_session import ChatSession


async def run_demo():
    """Load the backend and run turns until the user quits"""
    setup_logging()
    settings = load_settings()
    session = ChatSession(settings)

    print(f"🚀 Backend: {settings.backend} ({settings.model})")
    print(f"⏳ {session.status}")
    loaded = await session.load()
    print(f"📟 {session.status}")
    if not loaded:
        return
    print(f"💬 {session.messages[0].text}")
    print("-" * 50)

    while True:
        try:
            user_text = await asyncio.to_thread(input, "You: ")
        except (EOFError, KeyboardInterrupt):
            break
        if user_text.strip().lower() in {"q", "quit", "exit"}:
            break
        if not session.can_send(user_text):
            continue

        await session.send(user_text)
        print(f"Assistant: {session.messages[-1].text}")
        print(f"   Lines: {session.selected_items_text} | Email: {session.contact_text} | {session.status}")

    print("\n🛑 Demo stopped")


if __name__ == "__main__":
    asyncio.run(run_demo())
