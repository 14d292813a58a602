"""
Default instantiation of message types.

When a handler or a test asks for a message by type (``context.send(Outgoing,
mutator)`` or ``on_message(Incoming)``), the harness has to build an instance
whose members all hold their type default: empty string, zero, False, empty
collection, or None for anything else. The mutator then fills in what the
caller cares about.

Supported message types:
- pydantic models (required fields get type defaults, others keep their defaults)
- dataclasses
- interface types (Protocol classes or abstract classes), which are
  instantiated through a generated proxy subclass
- any other class with a no-argument constructor
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import threading
import types
import typing
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Sequence
from collections.abc import Set as AbstractSet
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from handlertest.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCALAR_DEFAULTS: dict[Any, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
    bytes: b"",
    complex: 0j,
    Decimal: Decimal(0),
}

# Annotations left as strings (e.g. local classes under postponed evaluation)
_NAMED_DEFAULTS: dict[str, Any] = {
    "str": "",
    "int": 0,
    "float": 0.0,
    "bool": False,
    "bytes": b"",
    "Decimal": Decimal(0),
}

_COLLECTION_FACTORIES: dict[Any, Any] = {
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    Sequence: list,
    MutableSequence: list,
    Mapping: dict,
    MutableMapping: dict,
    AbstractSet: set,
    MutableSet: set,
}


def type_default(annotation: Any) -> Any:
    """
    Get the type default for an annotation.

    Args:
        annotation: A type, a typing construct, or a string annotation

    Returns:
        "" for str, 0 for numbers, False for bool, an empty collection for
        collection types, the first member of an Enum, and None otherwise
        (including optional types).

    Example:
        >>> type_default(int)
        0
        >>> type_default(list[str])
        []
        >>> type_default(str | None)
    """
    if isinstance(annotation, str):
        return _NAMED_DEFAULTS.get(annotation.strip())

    origin = get_origin(annotation)
    if origin is not None:
        args = get_args(annotation)
        if origin is Union or origin is types.UnionType:
            if type(None) in args:
                return None
            return type_default(args[0])
        if origin is typing.Annotated:
            return type_default(args[0])
        if origin is typing.Literal:
            return args[0] if args else None
        factory = _COLLECTION_FACTORIES.get(origin)
        return factory() if factory is not None else None

    if annotation in _SCALAR_DEFAULTS:
        return _SCALAR_DEFAULTS[annotation]
    if annotation in _COLLECTION_FACTORIES:
        return _COLLECTION_FACTORIES[annotation]()
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return next(iter(annotation), None)
    return None


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _resolve_hints(cls: type) -> dict[str, Any]:
    """Resolve annotations across the MRO, falling back to raw strings."""
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def is_interface(message_type: type) -> bool:
    """Check whether a message type can only be instantiated through a proxy."""
    return bool(getattr(message_type, "_is_protocol", False)) or inspect.isabstract(message_type)


class MessageFactory:
    """
    Creates default instances of message types.

    Implements the MessageInstantiator capability. Proxy classes generated
    for interface types are cached per type; the cache is thread-safe so one
    factory can serve handlers that fan out across threads.

    Example:
        >>> factory = MessageFactory()
        >>> message = factory.instantiate(Outgoing)
        >>> message.number
        0
    """

    def __init__(self) -> None:
        self._proxies: dict[type, type] = {}
        self._lock = threading.Lock()

    def instantiate(self, message_type: type[T]) -> T:
        """
        Create an instance of message_type with every member at its type default.

        Args:
            message_type: The message class or interface to instantiate

        Returns:
            A new instance (for interfaces, an instance of a proxy subclass)

        Raises:
            TypeError: If message_type is not a class
            ConfigurationError: If the type requires constructor arguments
                the factory cannot supply
        """
        if not isinstance(message_type, type):
            raise TypeError(f"message_type must be a class, got {message_type!r}")

        if issubclass(message_type, BaseModel):
            return self._instantiate_model(message_type)  # type: ignore[return-value]
        if dataclasses.is_dataclass(message_type):
            return self._instantiate_dataclass(message_type)
        if is_interface(message_type):
            return self.proxy_for(message_type)()  # type: ignore[no-any-return]

        try:
            return message_type()
        except TypeError as e:
            raise ConfigurationError(
                f"Cannot default-construct message type {message_type.__name__}: {e}. "
                "Pass a message instance instead, or give the type a no-argument constructor."
            ) from e

    def proxy_for(self, interface: type) -> type:
        """
        Get (or build) the proxy class implementing an interface message type.

        Args:
            interface: A Protocol class or an abstract class

        Returns:
            A concrete subclass of interface whose instances hold type
            defaults for every annotated member
        """
        with self._lock:
            proxy = self._proxies.get(interface)
            if proxy is None:
                proxy = self._build_proxy(interface)
                self._proxies[interface] = proxy
                logger.debug(
                    f"Built proxy for interface message type {interface.__name__}",
                    extra={"message_type": interface.__name__},
                )
            return proxy

    def _instantiate_model(self, message_type: type[BaseModel]) -> BaseModel:
        values = {
            name: type_default(field.annotation)
            for name, field in message_type.model_fields.items()
            if field.is_required()
        }
        return message_type.model_construct(**values)

    def _instantiate_dataclass(self, message_type: type[T]) -> T:
        hints = _resolve_hints(message_type)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(message_type):  # type: ignore[arg-type]
            if not field.init:
                continue
            if field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
                values[field.name] = type_default(hints.get(field.name, field.type))
        return message_type(**values)

    def _build_proxy(self, interface: type) -> type:
        hints = {
            name: hint for name, hint in _resolve_hints(interface).items() if not _is_class_var(hint)
        }
        namespace: dict[str, Any] = {
            "__module__": interface.__module__,
            "__qualname__": f"{interface.__qualname__}Proxy",
            "__doc__": f"Generated implementation of {interface.__name__}.",
        }

        for name in getattr(interface, "__abstractmethods__", frozenset()):
            member = inspect.getattr_static(interface, name)
            if isinstance(member, property):
                # Abstract properties become plain instance attributes
                namespace[name] = None
                if name not in hints:
                    fget = member.fget
                    hints[name] = getattr(fget, "__annotations__", {}).get("return", Any)
            else:
                namespace[name] = _make_stub(interface, name)

        def __init__(self: Any, **values: Any) -> None:
            for field_name, hint in hints.items():
                setattr(self, field_name, type_default(hint))
            for field_name, value in values.items():
                setattr(self, field_name, value)

        def __repr__(self: Any) -> str:
            fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
            return f"{interface.__name__}({fields})"

        namespace["__init__"] = __init__
        namespace["__repr__"] = __repr__

        metaclass = type(interface)
        return metaclass(f"{interface.__name__}Proxy", (interface,), namespace)  # type: ignore[no-any-return]


def _make_stub(interface: type, name: str) -> Any:
    def stub(self: Any, *args: Any, **kwargs: Any) -> None:
        return None

    stub.__name__ = name
    stub.__qualname__ = f"{interface.__name__}Proxy.{name}"
    return stub


__all__ = [
    "MessageFactory",
    "is_interface",
    "type_default",
]
