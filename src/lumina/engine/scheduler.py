"""Playback scheduler for interactive preview."""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Protocol

from ..editor.store import OWNER_PLAYBACK, SceneStore
from ..models import PlaybackState, Scene
from .timing import playback_interval

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    """Anything that can run a callback later, like an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


SceneListener = Callable[[int, Scene], None]
StopListener = Callable[[PlaybackState], None]


class PlaybackScheduler:
    """Advances through the store's scenes in wall-clock time.

    Two states: stopped and playing. Each (re)start bumps the session id, and
    a timer callback only acts if the session it was armed under is still the
    live one, so a late callback from an earlier session does nothing. At most
    one timer is armed at any moment.
    """

    def __init__(self, store: SceneStore, clock: Optional[Clock] = None) -> None:
        """Initialize the scheduler.

        Args:
            store: Scene store whose active-scene pointer playback drives.
            clock: Timer source. Defaults to the running asyncio event loop.
        """
        self._store = store
        self._clock = clock
        self._state = PlaybackState()
        self._handle: Optional[TimerHandle] = None
        self._scene_listeners: List[SceneListener] = []
        self._stop_listeners: List[StopListener] = []
        self._stopped_event: Optional[asyncio.Event] = None
        self._claim: Optional[int] = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def has_pending_timer(self) -> bool:
        return self._handle is not None

    def on_scene(self, listener: SceneListener) -> None:
        """Register a callback invoked with (index, scene) whenever a scene starts."""
        self._scene_listeners.append(listener)

    def on_stop(self, listener: StopListener) -> None:
        """Register a callback invoked when playback stops."""
        self._stop_listeners.append(listener)

    def start(self) -> PlaybackState:
        """Start playback from the first scene, restarting if already playing.

        Raises:
            BusyError: If an export job or another player owns the active scene.
        """
        if self._claim is None:
            self._claim = self._store.claim(OWNER_PLAYBACK)
        self._cancel_timer()
        self._state = self._state.restarted()
        logger.info(f"Playback started (session {self._state.session_id}, {len(self._store)} scenes)")
        self._enter_scene()
        return self._state

    def stop(self) -> PlaybackState:
        """Stop playback and cancel the pending timer."""
        self._cancel_timer()
        if self._state.is_playing:
            self._state = self._state.stopped()
            logger.info(f"Playback stopped (session {self._state.session_id})")
            for listener in self._stop_listeners:
                listener(self._state)
        self._store.release(self._claim)
        self._claim = None
        if self._stopped_event is not None:
            self._stopped_event.set()
        return self._state

    def toggle(self) -> PlaybackState:
        return self.stop() if self._state.is_playing else self.start()

    async def wait_stopped(self) -> PlaybackState:
        """Wait until playback stops, either at the end or by an explicit stop."""
        if not self._state.is_playing:
            return self._state
        if self._stopped_event is None or self._stopped_event.is_set():
            self._stopped_event = asyncio.Event()
        await self._stopped_event.wait()
        return self._state

    def _enter_scene(self) -> None:
        index = self._state.current_index
        scene = self._store.scenes[index]
        self._store.select(scene.id, owner=OWNER_PLAYBACK)
        for listener in self._scene_listeners:
            listener(index, scene)
        self._arm(scene)

    def _arm(self, scene: Scene) -> None:
        delay = playback_interval(scene, self._store.project)
        clock = self._clock or asyncio.get_running_loop()
        self._handle = clock.call_later(delay, self._fire, self._state.session_id)
        logger.debug(
            f"Armed advance in {delay:.2f}s "
            f"(session {self._state.session_id}, scene {self._state.current_index})"
        )

    def _fire(self, session_id: int) -> None:
        if session_id != self._state.session_id or not self._state.is_playing:
            logger.debug(f"Ignoring stale timer from session {session_id}")
            return

        self._handle = None
        if self._state.current_index + 1 < len(self._store):
            self._state = self._state.advanced()
            self._enter_scene()
        else:
            self.stop()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
