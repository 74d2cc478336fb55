"""Class resolution and member reflection.

Provides the reflection facility used by the type checker and the property
accessor:

- Resolving class names (registered aliases, dotted import paths, builtins)
- Instance checks against a named class, including its ancestors
- Looking up methods and raw attribute storage by walking a class's MRO
- Temporarily granting access to non-public attributes with ``accessible``

Non-public attributes are those whose storage name starts with an underscore:
``_name`` (protected) and the name-mangled ``_Class__name`` (private). A
ReflectionProperty for such an attribute refuses reads and writes until it is
made accessible.

Example:
    ```python
    from utilknobs_utils import reflection_utils as refl

    prop = refl.reflect_object(person).get_property("age", instance=person)
    with refl.accessible(prop):
        prop.set_value(person, 40)
    ```
"""

import builtins
import importlib
import inspect
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, List, Tuple

from utilknobs_common.exceptions import (
    ClassNotFoundError,
    ConfigurationError,
    NotFoundError,
    OperationError,
)
from utilknobs_common.registry import MemoRegistry, Registry

from utilknobs_utils.string_utils import is_null_or_whitespace

logger = logging.getLogger(__name__)

_class_aliases: Registry[type] = Registry("class_aliases")
_reflection_cache: MemoRegistry["ReflectionClass"] | None = None


def register_class(cls: type, alias: str | None = None) -> None:
    """Make a class resolvable by a short (case-insensitive) name.

    Registering lets camel-case validator identifiers such as "NullOrPerson"
    refer to classes that are not builtins.

    Args:
        cls: The class to register
        alias: Name to register it under (defaults to cls.__name__)

    Raises:
        OperationError: If the alias is already taken by a different class
    """
    if not isinstance(cls, type):
        raise ConfigurationError(
            f"Only classes can be registered, got {type(cls).__name__}",
            context={"value": cls},
        )
    key = (alias or cls.__name__).lower()
    if _class_aliases.get_optional(key) is cls:
        return
    _class_aliases.register(key, cls)


def unregister_class(alias: str) -> type:
    """Remove a registered class alias and return its class."""
    return _class_aliases.unregister(alias.lower())


def _import_dotted(name: str) -> Any:
    parts = name.split(".")
    for split_at in range(len(parts) - 1, 0, -1):
        try:
            result: Any = importlib.import_module(".".join(parts[:split_at]))
        except ImportError:
            continue
        try:
            for attr in parts[split_at:]:
                result = getattr(result, attr)
        except AttributeError:
            return None
        return result
    return None


def resolve_class(name_or_cls: str | type) -> type:
    """Resolve a class name to the class it names.

    Resolution order: the class itself when a class is given, registered
    aliases, dotted import paths ("datetime.datetime"), then builtins
    ("ValueError").

    Raises:
        ConfigurationError: If name_or_cls is neither a class nor a non-blank string
        ClassNotFoundError: If the name does not resolve to a class
    """
    if isinstance(name_or_cls, type):
        return name_or_cls
    if not isinstance(name_or_cls, str) or is_null_or_whitespace(name_or_cls):
        raise ConfigurationError(
            "A class or a non-blank class name is required",
            context={"value": name_or_cls},
        )
    name = name_or_cls.strip()
    result = _class_aliases.get_optional(name.lower())
    if result is None and "." in name:
        result = _import_dotted(name)
    if result is None:
        result = getattr(builtins, name, None)
    if not isinstance(result, type):
        raise ClassNotFoundError(
            f"'{name}' is not a valid class name",
            context={"class_name": name},
        )
    return result


def class_exists(name: str | type) -> bool:
    try:
        resolve_class(name)
    except ClassNotFoundError:
        return False
    return True


def is_instance_of(value: Any, name_or_cls: str | type) -> bool:
    """Determine whether value is an instance of the class or one of its subclasses."""
    return isinstance(value, resolve_class(name_or_cls))


def qualified_name(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass
class ReflectionMethod:
    """A method found on a class, with the class that declares it."""

    name: str
    declaring_class: type
    function: Any

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    def invoke(self, obj: Any, *args: Any) -> Any:
        """Call the method bound to obj with the given arguments."""
        binder = getattr(self.function, "__get__", None)
        bound = binder(obj, type(obj)) if binder is not None else self.function
        return bound(*args)


@dataclass
class ReflectionProperty:
    """Raw attribute storage found on a class or instance.

    Attributes:
        name: The name that was looked up ("age")
        declaring_class: The class in the MRO that declares the storage
        storage_name: The attribute actually holding the value ("_Person__age")
        is_public: False when the storage name starts with an underscore
        accessible: Whether non-public storage may currently be read or written
    """

    name: str
    declaring_class: type
    storage_name: str
    is_public: bool
    accessible: bool = False

    def _check_access(self) -> None:
        if not self.is_public and not self.accessible:
            raise OperationError(
                f"Property '{self.name}' of class '{self.declaring_class.__name__}' is not public",
                context={"property": self.name, "storage_name": self.storage_name},
            )

    def get_value(self, obj: Any) -> Any:
        self._check_access()
        return getattr(obj, self.storage_name)

    def set_value(self, obj: Any, value: Any) -> None:
        """Write the raw storage, bypassing __setattr__ overrides and frozen dataclasses."""
        self._check_access()
        object.__setattr__(obj, self.storage_name, value)


@contextmanager
def accessible(prop: ReflectionProperty) -> Iterator[ReflectionProperty]:
    """Make a property accessible for the duration of the block.

    The previous accessibility is restored on exit, including when the block
    raises.
    """
    previous = prop.accessible
    prop.accessible = True
    try:
        yield prop
    finally:
        prop.accessible = previous


def _declared_names(klass: type) -> Tuple[str, ...]:
    namespace = vars(klass)
    slots = namespace.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    try:
        annotations = inspect.get_annotations(klass)
    except NameError:
        # unresolvable forward reference; fall back to the raw mapping
        annotations = namespace.get("__annotations__", {})
    plain = tuple(
        key
        for key, value in namespace.items()
        if not callable(value) and not hasattr(value, "__get__") and not key.startswith("__")
    )
    return tuple(slots) + tuple(annotations) + plain


class ReflectionClass:
    """Reflection handle for a class.

    Member lookups walk the class's MRO, most derived class first, and stop at
    the first class that declares the member.
    """

    def __init__(self, cls: type):
        self._cls = cls

    @property
    def cls(self) -> type:
        return self._cls

    @property
    def name(self) -> str:
        return qualified_name(self._cls)

    @property
    def parent(self) -> type | None:
        """The next class in the MRO, or None for object."""
        mro = self._cls.__mro__
        return mro[1] if len(mro) > 1 else None

    def ancestors(self) -> List[type]:
        """The class followed by its ancestors, excluding object."""
        return [klass for klass in self._cls.__mro__ if klass is not object]

    def get_method(self, name: str, none_if_missing: bool = False) -> ReflectionMethod | None:
        """Find a method by name.

        Raises:
            NotFoundError: If no class in the MRO declares a method of that
                name and none_if_missing is False
        """
        for klass in self._cls.__mro__:
            member = vars(klass).get(name)
            if member is None:
                continue
            if isinstance(member, (staticmethod, classmethod)) or (
                callable(member) and not isinstance(member, type)
            ):
                return ReflectionMethod(name, klass, member)
            break
        if none_if_missing:
            return None
        raise NotFoundError(
            f"Retrieving method '{name}' of class '{self.name}' was not successful",
            context={"class_name": self.name, "method": name},
        )

    def has_method(self, name: str) -> bool:
        return self.get_method(name, none_if_missing=True) is not None

    def _storage_candidates(self, klass: type, name: str) -> List[Tuple[str, bool]]:
        if name.startswith("_"):
            return [(name, False)]
        return [
            (f"_{klass.__name__.lstrip('_')}__{name}", False),
            (f"_{name}", False),
            (name, True),
        ]

    def get_property(
        self,
        name: str,
        instance: Any = None,
        none_if_missing: bool = False,
    ) -> ReflectionProperty | None:
        """Find the raw storage for a property by name.

        Declared storage (slots, annotations, plain class attributes) is
        searched first, then the instance dictionary when an instance is
        given. Private (name-mangled) storage is matched against the class
        that mangled it.

        Args:
            name: Property name, e.g. "age"
            instance: Optional instance whose __dict__ is also searched
            none_if_missing: Return None instead of raising when not found

        Raises:
            NotFoundError: If the property is not found and none_if_missing is False
        """
        ancestors = self.ancestors()
        for klass in ancestors:
            declared = _declared_names(klass)
            for storage, is_public in self._storage_candidates(klass, name):
                if storage in declared:
                    return ReflectionProperty(name, klass, storage, is_public)

        instance_dict = getattr(instance, "__dict__", None)
        if instance is not None and isinstance(instance_dict, dict):
            for klass in ancestors:
                for storage, is_public in self._storage_candidates(klass, name):
                    if storage in instance_dict:
                        declaring = klass if storage.startswith(f"_{klass.__name__.lstrip('_')}__") else type(instance)
                        return ReflectionProperty(name, declaring, storage, is_public)

        if none_if_missing:
            return None
        raise NotFoundError(
            f"Retrieving property '{name}' of class '{self.name}' was not successful",
            context={"class_name": self.name, "property": name},
        )

    def has_property(self, name: str, instance: Any = None) -> bool:
        return self.get_property(name, instance=instance, none_if_missing=True) is not None

    def __repr__(self) -> str:
        return f"ReflectionClass({self.name})"


def get_reflection_cache() -> MemoRegistry[ReflectionClass]:
    """Get the process-wide cache of ReflectionClass instances, building it on first use."""
    global _reflection_cache
    if _reflection_cache is None:
        logger.debug("Creating reflection class cache")
        _reflection_cache = MemoRegistry("reflection_classes")
    return _reflection_cache


def get_reflection_class(name_or_cls: str | type) -> ReflectionClass:
    """Get the (cached) ReflectionClass for a class or class name.

    Raises:
        ClassNotFoundError: If a class name does not resolve
    """
    cls = resolve_class(name_or_cls)
    cache = get_reflection_cache()
    # cached entries keep their class alive, so the id stays unique
    key = f"{qualified_name(cls)}@{id(cls)}"
    return cache.get_or_create(key, lambda: ReflectionClass(cls))


def reflect_object(obj: Any) -> ReflectionClass:
    return get_reflection_class(type(obj))


def get_property(
    name_or_cls: str | type, prop: str, none_if_missing: bool = False
) -> ReflectionProperty | None:
    """Find a declared property of a class, walking its ancestors."""
    return get_reflection_class(name_or_cls).get_property(prop, none_if_missing=none_if_missing)


def get_method(
    name_or_cls: str | type, method: str, none_if_missing: bool = False
) -> ReflectionMethod | None:
    """Find a method of a class, walking its ancestors."""
    return get_reflection_class(name_or_cls).get_method(method, none_if_missing=none_if_missing)
