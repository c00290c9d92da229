"""Per-model ordered list of update callbacks.

Controllers attach `fn(model, user_data) -> status` pairs. They run after the
model's own update logic, in registration order. A truthy status (a non-zero
int, True, ...) removes that callback; others are left in place.
"""
import logging

log = logging.getLogger(__name__)


class UpdateCallback:
    __slots__ = ('fn', 'user_data')

    def __init__(self, fn, user_data=None):
        self.fn = fn
        self.user_data = user_data

    def __repr__(self):
        name = getattr(self.fn, '__qualname__', repr(self.fn))
        return f"UpdateCallback({name})"


class UpdateCallbackRegistry:
    """Ordered (function, user data) pairs owned by one model.

    Mutate only from the thread that drives the model's lifecycle, never
    while that model's update is running on another thread.
    """

    def __init__(self):
        self._callbacks = []

    def __len__(self):
        return len(self._callbacks)

    def __iter__(self):
        return iter(list(self._callbacks))

    def add(self, fn, user_data=None):
        if fn is None or not callable(fn):
            raise ValueError("update callback must be callable: fn(model, user_data)")
        cb = UpdateCallback(fn, user_data)
        self._callbacks.append(cb)
        return cb

    def remove(self, fn, user_data=None):
        """Remove the first callback registered with `fn`.

        When `user_data` is given it must match too. Returns True if one was removed.
        """
        for i, cb in enumerate(self._callbacks):
            if cb.fn is fn and (user_data is None or cb.user_data is user_data):
                del self._callbacks[i]
                return True
        return False

    def call_all(self, model):
        """Run every callback once; drop the ones that return a truthy status."""
        if not self._callbacks:
            return
        finished = []
        for cb in list(self._callbacks):
            status = cb.fn(model, cb.user_data)
            if status:
                log.debug("%s: callback %r returned %r, unregistering", model, cb, status)
                finished.append(cb)
        for cb in finished:
            if cb in self._callbacks:
                self._callbacks.remove(cb)
