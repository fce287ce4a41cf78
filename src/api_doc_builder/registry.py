"""Process-wide registration of extra and hidden controller types."""

import logging
import re
import threading

from api_doc_builder.models.route import Bean

logger = logging.getLogger(__name__)

_QUALIFIED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


def type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class ControllerRegistry:
    """Append-only sets of controller type names.

    Writers replace the sets under a lock; readers iterate an immutable
    snapshot, so registration may happen while documents are being built.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._additional: frozenset[str] = frozenset()
        self._hidden: frozenset[str] = frozenset()

    def add_rest_controllers(self, *classes: type | str) -> None:
        """Document these types as controllers even without the controller marker."""
        names = {c if isinstance(c, str) else type_name(c) for c in classes}
        with self._lock:
            self._additional = self._additional | names

    def add_hidden_rest_controllers(self, *classes: type | str) -> None:
        """Never document these types; names that are not qualified identifiers are ignored."""
        names = set()
        for c in classes:
            if not isinstance(c, str):
                names.add(type_name(c))
            elif _QUALIFIED_NAME.match(c):
                names.add(c)
            else:
                logger.warning("The following class doesn't exist and cannot be hidden: %s", c)
        with self._lock:
            self._hidden = self._hidden | names

    def is_additional_rest_controller(self, bean: Bean) -> bool:
        additional = self._additional
        return any(name in additional for name in bean.type_hierarchy)

    def is_hidden_rest_controller(self, bean: Bean) -> bool:
        hidden = self._hidden
        return any(name in hidden for name in bean.type_hierarchy)

    @property
    def additional(self) -> frozenset[str]:
        return self._additional

    @property
    def hidden(self) -> frozenset[str]:
        return self._hidden


default_registry = ControllerRegistry()
