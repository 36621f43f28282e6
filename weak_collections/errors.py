from typing import Any


class KeyNotFoundError(KeyError):
    """
    Raised by `WeakMap.fetch` when a key is not present and neither a default
    value nor a default factory was supplied.

    Attributes:
        key: The key that was looked up.
        receiver: The collection on which the lookup was performed.
    """

    def __init__(self, key: Any, receiver: Any = None):
        super().__init__(key)
        self.key = key
        self.receiver = receiver

    def __str__(self):
        return f"key not found: {self.key!r}"


class ConfigurationError(RuntimeError):
    """
    Raised when the configured storage strategy or auto-prune parameters cannot
    be honoured in the running interpreter.
    """
