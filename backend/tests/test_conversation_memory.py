"""
Tests for per-user conversation memory.
"""

import asyncio

import pytest

from services.conversation_memory import ConversationMemory, Turn


class TestTurn:

    def test_roles(self):
        assert Turn("user", "hi").to_dict() == {"role": "user", "content": "hi"}
        with pytest.raises(ValueError):
            Turn("bot", "hi")


class TestConversationMemory:

    def test_unknown_user_is_empty(self):
        memory = ConversationMemory()
        assert asyncio.run(memory.history("nobody")) == []

    def test_append_creates_log(self):
        memory = ConversationMemory()

        async def scenario():
            await memory.append("u-1", Turn("user", "hello"))
            return await memory.history("u-1")

        assert asyncio.run(scenario()) == [Turn("user", "hello")]
        assert memory.user_count() == 1

    def test_alternating_exchanges(self):
        """N exchanges leave 2N turns alternating user/assistant in order."""
        memory = ConversationMemory()

        async def scenario():
            for i in range(5):
                async with memory.session("u-1") as t:
                    t.append("user", f"q{i}")
                    t.append("assistant", f"a{i}")
            return await memory.history("u-1")

        turns = asyncio.run(scenario())
        assert len(turns) == 10
        assert [t.role for t in turns] == ["user", "assistant"] * 5
        assert turns[0].content == "q0"
        assert turns[-1].content == "a4"

    def test_users_are_isolated(self):
        memory = ConversationMemory()

        async def scenario():
            await memory.append("a", Turn("user", "from a"))
            await memory.append("b", Turn("user", "from b"))
            return await memory.history("a"), await memory.history("b")

        a, b = asyncio.run(scenario())
        assert [t.content for t in a] == ["from a"]
        assert [t.content for t in b] == ["from b"]

    def test_concurrent_sessions_do_not_interleave(self):
        """Overlapping exchanges for one user land as whole pairs."""
        memory = ConversationMemory()

        async def exchange(i):
            async with memory.session("u-1") as t:
                t.append("user", f"q{i}")
                # Yield mid-exchange; another task must not get in here
                await asyncio.sleep(0)
                t.append("assistant", f"a{i}")

        async def scenario():
            await asyncio.gather(*(exchange(i) for i in range(4)))
            return await memory.history("u-1")

        turns = asyncio.run(scenario())
        assert len(turns) == 8
        for user_turn, reply_turn in zip(turns[::2], turns[1::2]):
            assert user_turn.role == "user"
            assert reply_turn.role == "assistant"
            assert user_turn.content[1:] == reply_turn.content[1:]

    def test_history_is_a_copy(self):
        memory = ConversationMemory()

        async def scenario():
            await memory.append("u", Turn("user", "x"))
            snapshot = await memory.history("u")
            snapshot.append(Turn("user", "injected"))
            return await memory.history("u")

        assert len(asyncio.run(scenario())) == 1

    def test_bound_drops_oldest(self):
        memory = ConversationMemory(max_turns=4)

        async def scenario():
            for i in range(6):
                await memory.append("u", Turn("user", f"m{i}"))
            return await memory.history("u")

        turns = asyncio.run(scenario())
        assert [t.content for t in turns] == ["m2", "m3", "m4", "m5"]
