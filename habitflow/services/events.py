"""
Canal publish/subscribe pour les notifications entre vues (célébrations).

Les événements sont typés ; les abonnés s'inscrivent explicitement et se
désinscrivent avec le callable retourné par `subscribe`.
"""

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemCompleted:
    item_type: str  # "habit" | "task"
    id: int
    source: Optional[str] = None
    kind: str = "item-completed"


@dataclass(frozen=True)
class ProgressUpdated:
    percentage: int
    kind: str = "progress-updated"


@dataclass(frozen=True)
class FullCompletion:
    percentage: int = 100
    kind: str = "full-completion"


class EventBus:
    def __init__(self):
        self._handlers: Dict[Type, List[Callable]] = defaultdict(list)
        self._pending: List = []
        self._dispatching = False
        # les endpoints sync tournent dans le threadpool : un seul dispatch à la fois
        self.lock = threading.RLock()

    def subscribe(self, event_type: Type, handler: Callable) -> Callable[[], None]:
        with self.lock:
            self._handlers[event_type].append(handler)

        def unsubscribe():
            with self.lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, event) -> None:
        with self.lock:
            # un publish depuis un handler est mis en file jusqu'à la fin du dispatch courant
            self._pending.append(event)
            if self._dispatching:
                return

            self._dispatching = True
            try:
                while self._pending:
                    current = self._pending.pop(0)
                    for handler in list(self._handlers.get(type(current), [])):
                        try:
                            handler(current)
                        except Exception:
                            logger.exception(f"Event handler failed for {current.kind}")
            finally:
                self._dispatching = False

    def subscriber_count(self, event_type: Type) -> int:
        return len(self._handlers.get(event_type, []))


class CelebrationGate:
    """
    Émet FullCompletion une seule fois par passage à 100%.

    Après un `dismiss()`, aucun FullCompletion n'est émis pendant
    `cooldown_seconds` (évite la réouverture immédiate au re-rendu).
    """

    def __init__(self, bus: EventBus, cooldown_seconds: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.bus = bus
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self.last_dismissed_at: Optional[float] = None
        self.at_full = False
        self._unsubscribe = bus.subscribe(ProgressUpdated, self.on_progress)

    def in_cooldown(self) -> bool:
        if self.last_dismissed_at is None:
            return False
        return self.clock() - self.last_dismissed_at < self.cooldown_seconds

    def on_progress(self, event: ProgressUpdated) -> None:
        if event.percentage != 100:
            self.at_full = False
            return

        if self.at_full:
            return
        self.at_full = True

        if self.in_cooldown():
            logger.debug("Full completion suppressed (cooldown)")
            return

        self.bus.publish(FullCompletion())

    def dismiss(self) -> None:
        with self.bus.lock:
            self.last_dismissed_at = self.clock()

    def close(self) -> None:
        self._unsubscribe()


class UserChannels:
    """Un bus et une porte de célébration par utilisateur, créés à la demande."""

    def __init__(self, cooldown_seconds: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._buses: Dict[int, EventBus] = {}
        self._gates: Dict[int, CelebrationGate] = {}
        self._lock = threading.Lock()

    def bus_for(self, user_id: int) -> EventBus:
        with self._lock:
            if user_id not in self._buses:
                bus = EventBus()
                self._buses[user_id] = bus
                self._gates[user_id] = CelebrationGate(bus, self.cooldown_seconds, self.clock)
            return self._buses[user_id]

    def gate_for(self, user_id: int) -> CelebrationGate:
        self.bus_for(user_id)
        return self._gates[user_id]


class EventRecorder:
    """
    Collecte les événements publiés sur un bus le temps d'un bloc `with`.

    Le verrou du bus est tenu pendant tout le bloc : une autre requête du même
    utilisateur attend la fin du bloc, ses événements ne s'y mélangent pas.
    """

    def __init__(self, bus: EventBus, *event_types: Type):
        self.bus = bus
        self.event_types = event_types or (ItemCompleted, ProgressUpdated, FullCompletion)
        self.events: List = []
        self._unsubscribers: List[Callable] = []

    def __enter__(self):
        self.bus.lock.acquire()
        for event_type in self.event_types:
            self._unsubscribers.append(self.bus.subscribe(event_type, self.events.append))
        return self

    def __exit__(self, exc_type, exc, tb):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.bus.lock.release()
        return False
