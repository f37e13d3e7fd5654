"""
Conversation Memory - Per-user ordered transcripts.

Holds one append-only log of turns per opaque user id for the lifetime of
the process. Operations for the same user are serialized through a per-user
asyncio.Lock; different users never wait on each other.

Usage:
    memory = ConversationMemory(max_turns=200)

    # Single operations
    await memory.append("u-1", Turn("user", "hello"))
    turns = await memory.history("u-1")

    # Multi-step exchange held atomically for one user
    async with memory.session("u-1") as transcript:
        transcript.append("user", "hello")
        reply = await llm.complete(transcript.turns())
        transcript.append("assistant", reply)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List

logger = logging.getLogger(__name__)

ROLES = ("user", "assistant", "system")


@dataclass(frozen=True)
class Turn:
    """One message in a user's transcript."""

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid turn role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class Transcript:
    """Handle on one user's log, valid while the user's lock is held."""

    def __init__(self, user_id: str, turns: List[Turn], max_turns: int):
        self.user_id = user_id
        self._turns = turns
        self._max_turns = max_turns

    def append(self, role: str, content: str) -> Turn:
        turn = Turn(role, content)
        self._turns.append(turn)
        if self._max_turns and len(self._turns) > self._max_turns:
            # Drop oldest turns in place so the stored list stays the same object
            del self._turns[: len(self._turns) - self._max_turns]
        return turn

    def turns(self) -> List[Turn]:
        """Ordered copy of the transcript."""
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)


class ConversationMemory:
    """Process-wide store of per-user transcripts."""

    def __init__(self, max_turns: int = 0):
        """
        Args:
            max_turns: Keep at most this many turns per user (0 = unbounded)
        """
        self.max_turns = max_turns
        self._logs: Dict[str, List[Turn]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        # No await between lookup and insert, so this cannot race on one event loop
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def session(self, user_id: str) -> AsyncIterator[Transcript]:
        """Hold the user's lock for a multi-step read/append sequence."""
        async with self._lock_for(user_id):
            log = self._logs.setdefault(user_id, [])
            yield Transcript(user_id, log, self.max_turns)

    async def append(self, user_id: str, turn: Turn) -> None:
        """Add a turn to the user's log, creating it on first use."""
        async with self.session(user_id) as transcript:
            transcript.append(turn.role, turn.content)

    async def history(self, user_id: str) -> List[Turn]:
        """All turns recorded for the user so far (possibly empty)."""
        async with self.session(user_id) as transcript:
            return transcript.turns()

    def user_count(self) -> int:
        return len(self._logs)
