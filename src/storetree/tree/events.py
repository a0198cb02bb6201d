import typing as t

import zrlog
from autoinject import injector


SELECT_ENTRY = "assist.selectStorageEntry"
GO_HOME = "assist.storage.go.home"
OPEN_LINK = "open.link"
OPEN_LINK_NEW_TAB = "open.link.new_tab"
OPEN_IN_IMPORTER = "open.in.importer"


def dbl_click_topic(kind) -> str:
    """Topic published when an entry of the given storage kind is double-clicked."""
    return f"assist.dblClick{kind.display_name}Item"


@injector.injectable_global
class EventBus:
    """Named-topic publish/subscribe used to tell collaborators about tree events.

        The tree never depends on a subscriber for its own state.
    """

    def __init__(self):
        self._subscribers: dict[str, list[t.Callable]] = {}
        self._log = zrlog.get_logger("storetree.events")

    def subscribe(self, topic: str, callback: t.Callable[[t.Any], None]) -> t.Callable[[], None]:
        """Subscribe to a topic. Returns a callable that removes the subscription."""
        self._subscribers.setdefault(topic, []).append(callback)
        return lambda: self.unsubscribe(topic, callback)

    def subscribe_once(self, topic: str, callback: t.Callable[[t.Any], None]) -> t.Callable[[], None]:
        def _once(payload):
            self.unsubscribe(topic, _once)
            callback(payload)
        return self.subscribe(topic, _once)

    def unsubscribe(self, topic: str, callback: t.Callable):
        if topic in self._subscribers and callback in self._subscribers[topic]:
            self._subscribers[topic].remove(callback)

    def publish(self, topic: str, payload: t.Any = None):
        self._log.debug(f"Publishing [{topic}]")
        for callback in list(self._subscribers.get(topic, [])):
            try:
                callback(payload)
            except Exception:
                self._log.exception(f"Exception in subscriber to [{topic}]")
