"""
Read-only shared state handed to every map task of a run
"""


class Broadcast:
    """
    Handle to a value built once and shared by reference with all tasks.

    The wrapped value must be immutable; the handle itself exposes no way
    to replace it.
    """

    __slots__ = ('_value',)

    def __init__(self, value):
        object.__setattr__(self, '_value', value)

    @property
    def value(self):
        return self._value

    def __setattr__(self, name, value):
        raise AttributeError("Broadcast values are read-only")

    def __repr__(self):
        return f"Broadcast({self._value!r})"
