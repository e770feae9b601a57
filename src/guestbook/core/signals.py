import functools
import urllib.parse


class SignalDescriptor:
    """Return `$Model.field` on the class, real value on an instance."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name

    def __get__(self, instance, owner):
        #  class access  →  owner is the model class, instance is None
        if instance is None:
            ns = owner.class_namespace()
            return f"${ns}.{self.field_name}" if ns else f"${self.field_name}"

        #  instance access  →  the signal path of this instance
        return f"${instance.namespace}.{self.field_name}"


class EventMethodDescriptor:
    """Generate Datastar action strings for @event methods, but allow direct execution."""

    def __init__(self, method_name: str, route_prefix: str, original_method):
        self.method_name = method_name
        self.route_prefix = route_prefix
        self.original_method = original_method
        self._event_info = getattr(original_method, '_event_info', None)

    @property
    def path(self) -> str:
        if self._event_info and self._event_info.path:
            return self._event_info.path
        return f"/{self.route_prefix}/{self.method_name}"

    def __get__(self, instance, owner):
        """Return bound method for instances, self for class access."""
        if instance is None:
            return self
        return functools.partial(self.original_method, instance)

    def __call__(self, **params):
        """Generate the Datastar action expression, e.g. ``@post('/guestbook/submit?id=1')``."""
        http_method = self._event_info.method.lower() if self._event_info else "post"
        params = {k: v for k, v in params.items() if v is not None}
        if params:
            query_string = urllib.parse.urlencode(params, doseq=True)
            return f"@{http_method}('{self.path}?{query_string}')"
        return f"@{http_method}('{self.path}')"
