"""
Assistant auto-responder.

Decides whether the bot should answer a message and, if so, posts a reply
into the same channel after a randomized delay.

Flow:
    1. plan_reply() inspects a freshly posted message (pure decision)
    2. schedule() starts a fire-and-forget task on the server event loop,
       or on a background loop when called from plain sync code
    3. After the delay the task picks a response and calls the delivery
       callback through sync_to_async, i.e. through the same thread
       boundary and lock as client writes

Rules:
    - Messages authored by the bot never trigger a reply, so the bot's
      own replies cannot loop
    - Any trigger word found as a substring of the lower-cased content
      triggers a reply
    - Mentioning coffee adds the coffee recommendations to the pool

The deferred task is not awaited by any client request and is not
persisted: if the process stops first, the reply is lost. Delivery
failures are logged and swallowed since no client initiated that write.
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
from collections.abc import Awaitable, Callable, Iterable
from concurrent import futures
from dataclasses import dataclass

from asgiref.sync import async_to_sync, sync_to_async

from chat.constants import RESPONDER_CONFIG
from chat.models import Message, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplyPlan:
    """Immutable snapshot of everything a deferred reply needs."""

    channel_id: str
    bot_user_id: int
    trigger_message_id: int
    responses: tuple[str, ...]
    delay: float


class AutoResponder:
    """
    Trigger check plus deferred reply scheduling.

    Args:
        trigger_words: Lower-case substrings that trigger a reply
        base_responses: Response pool used for every reply
        coffee_responses: Extra pool when the content mentions coffee
        min_delay: Lower bound of the reply delay in seconds (inclusive)
        max_delay: Upper bound of the reply delay in seconds (exclusive)
        rng: Random source for delays and response choice
        sleep: Coroutine used to wait out the delay
    """

    def __init__(
        self,
        trigger_words: Iterable[str] = RESPONDER_CONFIG.TRIGGER_WORDS,
        base_responses: Iterable[str] = RESPONDER_CONFIG.BASE_RESPONSES,
        coffee_responses: Iterable[str] = RESPONDER_CONFIG.COFFEE_RESPONSES,
        min_delay: float = RESPONDER_CONFIG.MIN_DELAY_SECONDS,
        max_delay: float = RESPONDER_CONFIG.MAX_DELAY_SECONDS,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError(f"Invalid reply delay range [{min_delay}, {max_delay})")
        self.trigger_words = tuple(w.lower() for w in trigger_words)
        self.base_responses = tuple(base_responses)
        self.coffee_responses = tuple(coffee_responses)
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()
        self._futures: set[futures.Future] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Decision
    # -------------------------------------------------------------------------

    def should_respond(self, message: Message, bot_user: User | None) -> bool:
        if bot_user is None or message.author_id == bot_user.id:
            return False
        content = message.content.lower()
        return any(word in content for word in self.trigger_words)

    def pick_delay(self) -> float:
        """Uniform delay in [min_delay, max_delay)."""
        if self.max_delay == self.min_delay:
            return self.min_delay
        delay = self._rng.uniform(self.min_delay, self.max_delay)
        # uniform() may return the upper bound through rounding
        return delay if delay < self.max_delay else self.min_delay

    def plan_reply(self, message: Message, bot_user: User | None) -> ReplyPlan | None:
        """
        Decide whether to reply and snapshot what the reply needs.

        Returns:
            ReplyPlan, or None when the message does not trigger the bot
        """
        if not self.should_respond(message, bot_user):
            return None

        responses = self.base_responses
        if RESPONDER_CONFIG.COFFEE_KEYWORD in message.content.lower():
            responses = responses + self.coffee_responses

        return ReplyPlan(
            channel_id=message.channel_id,
            bot_user_id=bot_user.id,
            trigger_message_id=message.id,
            responses=responses,
            delay=self.pick_delay(),
        )

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def schedule(self, plan: ReplyPlan, deliver: Callable[[ReplyPlan, str], object]) -> None:
        """
        Start the deferred reply from synchronous code without waiting for it.

        Under ASGI the reply task runs on the server event loop. Plain sync
        callers (the WSGI entry point, shell sessions, scripts) have no loop
        that outlives the call, so their replies run on the responder's own
        background loop instead.

        Args:
            plan: Snapshot from plan_reply()
            deliver: Synchronous callable posting (plan, content) as the bot
        """
        if async_to_sync(_current_loop)().is_running():
            async_to_sync(self._start)(plan, deliver)
            return

        future = asyncio.run_coroutine_threadsafe(
            self._run(plan, deliver), self._background_loop()
        )
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._forget_future)
        logger.info(
            f"Scheduled bot reply to message {plan.trigger_message_id} "
            f"in channel {plan.channel_id} after {plan.delay:.2f}s (background loop)"
        )

    async def _start(self, plan: ReplyPlan, deliver: Callable[[ReplyPlan, str], object]) -> None:
        task = asyncio.get_running_loop().create_task(self._run(plan, deliver))
        self._tasks.add(task)
        task.add_done_callback(self._forget)
        logger.info(
            f"Scheduled bot reply to message {plan.trigger_message_id} "
            f"in channel {plan.channel_id} after {plan.delay:.2f}s"
        )

    async def _run(self, plan: ReplyPlan, deliver: Callable[[ReplyPlan, str], object]) -> None:
        await self._sleep(plan.delay)
        content = self._rng.choice(plan.responses)
        try:
            await sync_to_async(deliver)(plan, content)
        except Exception:
            logger.exception(
                f"Bot reply to message {plan.trigger_message_id} failed; dropping it"
            )

    def _background_loop(self) -> asyncio.AbstractEventLoop:
        """Event loop on a daemon thread, started on first use."""
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                threading.Thread(
                    target=loop.run_forever,
                    name="chat-bot-replies",
                    daemon=True,
                ).start()
                self._loop = loop
            return self._loop

    def _forget(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Bot reply cancelled before delivery (event loop stopped)")

    def _forget_future(self, future: futures.Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def _background_futures(self) -> list[futures.Future]:
        with self._lock:
            return [f for f in self._futures if not f.done()]

    @property
    def pending(self) -> int:
        """Number of replies scheduled but not yet delivered."""
        with self._lock:
            return len(self._tasks) + len(self._futures)

    async def join(self) -> None:
        """Wait until every reply scheduled on this loop or the background loop has finished."""
        loop = asyncio.get_running_loop()
        while True:
            waiting = [t for t in self._tasks if t.get_loop() is loop and not t.done()]
            waiting += [asyncio.wrap_future(f) for f in self._background_futures()]
            if not waiting:
                return
            await asyncio.gather(*waiting, return_exceptions=True)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """
        Block until replies on the background loop have finished.

        Returns:
            False if some reply was still pending when the timeout expired
        """
        _, not_done = futures.wait(self._background_futures(), timeout=timeout)
        return not not_done


async def _current_loop() -> asyncio.AbstractEventLoop:
    return asyncio.get_running_loop()
