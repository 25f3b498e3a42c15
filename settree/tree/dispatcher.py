"""
SettingsTree Notification Dispatcher

Delivers toggle notifications after a cascade has finished.

- Per-node subscriptions receive the node's new enabled value, once per
  real transition
- Wildcard subscriptions receive the ToggleEvent describing the whole call
- A failing callback is logged and recorded; the pass continues

Subscriptions are keyed by node id and survive a tree rebuild.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING
import logging
import uuid

if TYPE_CHECKING:
    from .node import SettingNode
    from .tracker import StateSnapshot

logger = logging.getLogger(__name__)


ToggleCallback = Callable[[bool], None]


# =============================================================================
# TOGGLE EVENT
# =============================================================================

@dataclass
class ToggleEvent:
    """Record of one resolved set_enabled call."""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: datetime = field(default_factory=datetime.utcnow)

    node_id: str = ""
    requested: bool = True

    # Affected ids in notification order, and the ones that transitioned
    affected: List[str] = field(default_factory=list)
    changed: Dict[str, bool] = field(default_factory=dict)

    failed_callbacks: List[str] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.changed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "node_id": self.node_id,
            "requested": self.requested,
            "affected": list(self.affected),
            "changed": dict(self.changed),
            "failed_callbacks": list(self.failed_callbacks),
        }


EventCallback = Callable[[ToggleEvent], None]


# =============================================================================
# DISPATCHER
# =============================================================================

class NotificationDispatcher:
    """Observer registry and notification pass for toggle changes."""

    DEFAULT_MAX_HISTORY = 100

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        self._max_history = max_history
        self._listeners: Dict[str, List[ToggleCallback]] = {}
        self._wildcard_listeners: List[EventCallback] = []
        self._history: List[ToggleEvent] = []

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, node_id: str, callback: ToggleCallback) -> bool:
        """Register a callback for one node. Returns False if already registered."""
        callbacks = self._listeners.setdefault(node_id, [])
        if callback in callbacks:
            return False
        callbacks.append(callback)
        logger.debug(f"Subscribed callback to node {node_id}")
        return True

    def unsubscribe(self, node_id: str, callback: ToggleCallback) -> bool:
        callbacks = self._listeners.get(node_id)
        if not callbacks:
            return False
        try:
            callbacks.remove(callback)
        except ValueError:
            return False
        if not callbacks:
            del self._listeners[node_id]
        return True

    def subscribe_all(self, callback: EventCallback) -> bool:
        """Register a callback that receives every ToggleEvent."""
        if callback in self._wildcard_listeners:
            return False
        self._wildcard_listeners.append(callback)
        logger.debug("Subscribed wildcard callback")
        return True

    def unsubscribe_all(self, callback: EventCallback) -> bool:
        try:
            self._wildcard_listeners.remove(callback)
            return True
        except ValueError:
            return False

    def clear_listeners(self, node_id: Optional[str] = None) -> None:
        """Drop subscriptions for one node, or every subscription."""
        if node_id is None:
            self._listeners.clear()
            self._wildcard_listeners.clear()
        else:
            self._listeners.pop(node_id, None)

    def get_listeners(self, node_id: str) -> List[ToggleCallback]:
        return list(self._listeners.get(node_id, []))

    @property
    def listener_count(self) -> int:
        return sum(len(c) for c in self._listeners.values()) + len(self._wildcard_listeners)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        node_id: str,
        requested: bool,
        affected: List["SettingNode"],
        snapshot: "StateSnapshot",
    ) -> ToggleEvent:
        """
        Notify listeners of every affected node that really transitioned.

        Args:
            node_id: Node the change was requested on
            requested: Requested enabled value
            affected: Affected nodes in notification order
            snapshot: States captured before the cascade

        Returns:
            ToggleEvent for the call, also appended to history
        """
        event = ToggleEvent(
            node_id=node_id,
            requested=requested,
            affected=[n.id for n in affected],
        )

        for node in affected:
            if not snapshot.has_changed(node):
                continue

            event.changed[node.id] = node.enabled
            logger.debug(
                f"State changed for {node.id}: {not node.enabled} -> {node.enabled}"
            )

            for callback in list(self._listeners.get(node.id, [])):
                try:
                    callback(node.enabled)
                except Exception as e:
                    logger.error(f"Toggle callback failed for {node.id}: {e}")
                    if node.id not in event.failed_callbacks:
                        event.failed_callbacks.append(node.id)

        self._record_event(event)

        for callback in list(self._wildcard_listeners):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Wildcard toggle callback failed: {e}")

        return event

    def _record_event(self, event: ToggleEvent) -> None:
        self._history.append(event)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def get_events(self, limit: int = 100) -> List[ToggleEvent]:
        if limit <= 0:
            return []
        return self._history[-limit:]

    @property
    def last_event(self) -> Optional[ToggleEvent]:
        return self._history[-1] if self._history else None

    def clear_history(self) -> None:
        self._history.clear()
