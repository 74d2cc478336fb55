"""Generic reading and writing of values by property path.

A property path names a member of a container, which may be an object, a
mapping or a sequence:

    name                 property "name" of an object, or key "name" of a mapping
    [name]               key "name" of a mapping (or an object supporting [])
    [a][b]               key "b" of the mapping stored under key "a"
    items[0].first_name  property "first_name" of item 0 of property "items"

Values are resolved with up to three strategies, tried in this order and
stopping at the first one that applies:

1. Override: when the path is a callable it is called directly, with
   (container) to read or (container, value) to write.
2. Accessor: the PropertyAccessor walks the path segments. Objects are read
   through get_/is_/has_ methods or public attributes and written through
   set_ methods or public writable attributes; mappings and sequences are
   read and written by key or index.
3. Reflection (opt-in): for objects and plain string paths, the raw storage
   of the property (including "_name" and name-mangled "__name" storage) is
   located along the class's MRO and accessed directly.

When every applicable strategy fails, get_value and set_value raise
PropertyAccessError (chained to the innermost failure) unless
throw_on_failure is False, in which case get_value returns the default and
set_value does nothing.

Example:
    ```python
    from utilknobs_utils import property_access as pa

    pa.get_value({"a": {"b": 5}}, "[a][b]")
    # 5
    pa.get_value(person, "forename")
    # calls person.get_forename()
    pa.get_value(person, "age", try_reflection=True)
    # reads person.__age
    pa.get_value(person, "missing", throw_on_failure=False, default="X")
    # 'X'
    ```
"""

import inspect
import logging
import re
from collections.abc import Iterator, Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Tuple, Union

from utilknobs_common.exceptions import (
    ConfigurationError,
    NoSuchPropertyError,
    PropertyAccessError,
)

from utilknobs_utils import reflection_utils
from utilknobs_utils.scalar_utils import is_scalar
from utilknobs_utils.string_utils import camel_to_snake, first_to_upper

logger = logging.getLogger(__name__)

SEGMENT_RE = re.compile(r"\[(?P<index>[^\[\]]*)\]|(?P<dot>\.)?(?P<name>[^.\[\]]+)")
INDEX_RE = re.compile(r"^-?[0-9]+$")

GETTER_PREFIXES = ("get", "is", "has")
SETTER_PREFIXES = ("set",)

_MISSING = object()
_property_accessor: Union["PropertyAccessor", None] = None


@dataclass(frozen=True)
class PathSegment:
    """One step of a property path; is_index is True for bracketed segments."""

    name: str
    is_index: bool = False

    def __str__(self) -> str:
        return f"[{self.name}]" if self.is_index else self.name


class PropertyPath:
    """A parsed property path.

    Args:
        path: Path string such as "name", "[a][b]" or "items[0].first_name"

    Raises:
        ConfigurationError: If the path is empty or malformed
    """

    def __init__(self, path: str):
        if not isinstance(path, str) or path.strip() == "":
            raise ConfigurationError(
                "A property path must be a non-empty string",
                context={"path": path},
            )
        self._path = path
        self._segments = self._parse(path)

    @staticmethod
    def _parse(path: str) -> Tuple[PathSegment, ...]:
        segments: List[PathSegment] = []
        pos = 0
        while pos < len(path):
            match = SEGMENT_RE.match(path, pos)
            if match is None or match.group("index") == "" or (
                match.group("name") is not None and (match.group("dot") is None) != (pos == 0)
            ):
                raise ConfigurationError(
                    f"Could not parse property path '{path}' at position {pos}",
                    context={"path": path, "position": pos},
                )
            if match.group("index") is not None:
                segments.append(PathSegment(match.group("index"), is_index=True))
            else:
                segments.append(PathSegment(match.group("name")))
            pos = match.end()
        return tuple(segments)

    @classmethod
    def from_segments(cls, segments: Iterable[PathSegment]) -> "PropertyPath":
        text = ""
        for segment in segments:
            if segment.is_index:
                text += str(segment)
            else:
                text += f".{segment.name}" if text else segment.name
        return cls(text)

    @property
    def segments(self) -> Tuple[PathSegment, ...]:
        return self._segments

    def as_index_path(self) -> "PropertyPath":
        """The same path with every segment treated as a container key."""
        return PropertyPath.from_segments(PathSegment(seg.name, is_index=True) for seg in self._segments)

    def __iter__(self) -> Iterator[PathSegment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PropertyPath) and other._segments == self._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"PropertyPath({self._path!r})"


class ContainerKind(Enum):
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    OBJECT = "object"


def container_kind(value: Any) -> ContainerKind:
    """Classify a container as a mapping, a sequence or a plain object.

    Strings and bytes are not sequences for this purpose.
    """
    if isinstance(value, Mapping):
        return ContainerKind.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return ContainerKind.SEQUENCE
    return ContainerKind.OBJECT


def _is_container(value: Any) -> bool:
    return value is not None and not is_scalar(value) and not isinstance(value, (bytes, bytearray))


def _member_names(name: str, prefixes: Tuple[str, ...]) -> List[str]:
    if name.startswith("_"):
        return []
    snake = camel_to_snake(name)
    names = [f"{prefix}_{snake}" for prefix in prefixes]
    names += [f"{prefix}{first_to_upper(name)}" for prefix in prefixes]
    return list(dict.fromkeys(names))


def _attribute_names(name: str) -> List[str]:
    return [attr for attr in dict.fromkeys((name, camel_to_snake(name))) if not attr.startswith("_")]


class PropertyAccessor:
    """Reads and writes property paths through public accessors.

    The accessor holds no state, so a single shared instance (see
    get_property_accessor) serves every caller.
    """

    def get_value(self, container: Any, path: str | PropertyPath) -> Any:
        """Read the value at path.

        Raises:
            NoSuchPropertyError: If a segment cannot be read
            ConfigurationError: If path is malformed
        """
        current = container
        for segment in self._to_path(path):
            current = self._read(current, segment)
        return current

    def set_value(self, container: Any, path: str | PropertyPath, value: Any) -> None:
        """Write value at path.

        Missing intermediate keys of mutable mappings are created as dicts.

        Raises:
            NoSuchPropertyError: If a segment cannot be read or written
            ConfigurationError: If path is malformed
        """
        segments = self._to_path(path).segments
        current = container
        for segment in segments[:-1]:
            try:
                child = self._read(current, segment)
            except NoSuchPropertyError:
                if not isinstance(current, MutableMapping):
                    raise
                child = {}
                self._write(current, segment, child)
            current = child
        self._write(current, segments[-1], value)

    def is_readable(self, container: Any, path: str | PropertyPath) -> bool:
        try:
            self.get_value(container, path)
        except NoSuchPropertyError:
            return False
        return True

    def is_writable(self, container: Any, path: str | PropertyPath) -> bool:
        """Determine whether the final segment can be written under its existing parent.

        Unlike set_value, missing intermediate mapping keys count as not writable.
        """
        segments = self._to_path(path).segments
        try:
            parent = self.get_value(container, PropertyPath.from_segments(segments[:-1])) if len(segments) > 1 else container
        except NoSuchPropertyError:
            return False
        return self._can_write(parent, segments[-1])

    def _to_path(self, path: str | PropertyPath) -> PropertyPath:
        return path if isinstance(path, PropertyPath) else PropertyPath(path)

    def _unreadable(self, current: Any, segment: PathSegment) -> NoSuchPropertyError:
        return NoSuchPropertyError(
            f"Cannot read '{segment}' from a value of type '{type(current).__name__}'",
            context={"segment": str(segment), "type": type(current).__name__},
        )

    def _read(self, current: Any, segment: PathSegment) -> Any:
        if not _is_container(current):
            raise self._unreadable(current, segment)
        kind = container_kind(current)
        if kind is ContainerKind.MAPPING:
            key = self._mapping_key(current, segment.name)
            if key is _MISSING:
                raise NoSuchPropertyError(
                    f"Key '{segment.name}' does not exist",
                    context={"segment": str(segment), "keys": list(current.keys())[:20]},
                )
            return current[key]
        if kind is ContainerKind.SEQUENCE:
            index = self._sequence_index(current, segment)
            if not 0 <= index < len(current):
                raise NoSuchPropertyError(
                    f"Index {index} is out of range",
                    context={"segment": str(segment), "length": len(current)},
                )
            return current[index]
        if segment.is_index:
            if not hasattr(type(current), "__getitem__"):
                raise self._unreadable(current, segment)
            try:
                return current[segment.name]
            except (KeyError, IndexError) as e:
                raise self._unreadable(current, segment) from e
        return self._read_property(current, segment.name)

    def _mapping_key(self, mapping: Mapping, name: str) -> Any:
        if name in mapping:
            return name
        if INDEX_RE.match(name) and int(name) in mapping:
            return int(name)
        return _MISSING

    def _sequence_index(self, sequence: Sequence, segment: PathSegment) -> int:
        if not INDEX_RE.match(segment.name):
            raise NoSuchPropertyError(
                f"'{segment.name}' is not a valid index of a '{type(sequence).__name__}'",
                context={"segment": str(segment)},
            )
        return int(segment.name)

    def _read_property(self, obj: Any, name: str) -> Any:
        reflected = reflection_utils.reflect_object(obj)
        for method_name in _member_names(name, GETTER_PREFIXES):
            method = reflected.get_method(method_name, none_if_missing=True)
            if method is not None and method.is_public:
                return method.invoke(obj)
        for attr in _attribute_names(name):
            value = getattr(obj, attr, _MISSING)
            if value is not _MISSING:
                return value
        raise NoSuchPropertyError(
            f"Can't get a way to read the property '{name}' in class '{reflected.name}'",
            context={"property": name, "class_name": reflected.name},
        )

    def _find_setter(self, obj: Any, name: str) -> reflection_utils.ReflectionMethod | None:
        reflected = reflection_utils.reflect_object(obj)
        for method_name in _member_names(name, SETTER_PREFIXES):
            method = reflected.get_method(method_name, none_if_missing=True)
            if method is not None and method.is_public:
                return method
        return None

    def _writable_attribute(self, obj: Any, name: str) -> str | None:
        for attr in _attribute_names(name):
            descriptor = inspect.getattr_static(type(obj), attr, _MISSING)
            if isinstance(descriptor, property):
                if descriptor.fset is not None:
                    return attr
                continue
            if descriptor is not _MISSING and hasattr(descriptor, "__set__"):
                return attr
            if attr in getattr(obj, "__dict__", {}):
                return attr
        return None

    def _can_write(self, current: Any, segment: PathSegment) -> bool:
        if not _is_container(current):
            return False
        kind = container_kind(current)
        if kind is ContainerKind.MAPPING:
            return isinstance(current, MutableMapping)
        if kind is ContainerKind.SEQUENCE:
            return (
                isinstance(current, MutableSequence)
                and INDEX_RE.match(segment.name) is not None
                and 0 <= int(segment.name) <= len(current)
            )
        if segment.is_index:
            return hasattr(type(current), "__setitem__")
        return self._find_setter(current, segment.name) is not None or (
            self._writable_attribute(current, segment.name) is not None
        )

    def _write(self, current: Any, segment: PathSegment, value: Any) -> None:
        if not self._can_write(current, segment):
            raise NoSuchPropertyError(
                f"Could not determine access type for '{segment}' in a value of type '{type(current).__name__}'",
                context={"segment": str(segment), "type": type(current).__name__},
            )
        kind = container_kind(current)
        if kind is ContainerKind.MAPPING:
            key = self._mapping_key(current, segment.name)
            current[segment.name if key is _MISSING else key] = value
        elif kind is ContainerKind.SEQUENCE:
            index = int(segment.name)
            if index == len(current):
                current.append(value)
            else:
                current[index] = value
        elif segment.is_index:
            current[segment.name] = value
        else:
            setter = self._find_setter(current, segment.name)
            if setter is not None:
                setter.invoke(current, value)
            else:
                setattr(current, self._writable_attribute(current, segment.name), value)


def get_property_accessor() -> PropertyAccessor:
    """Get the process-wide PropertyAccessor, building it on first use."""
    global _property_accessor
    if _property_accessor is None:
        logger.debug("Creating property accessor")
        _property_accessor = PropertyAccessor()
    return _property_accessor


class AccessStrategy(Enum):
    OVERRIDE = "override"
    ACCESSOR = "accessor"
    REFLECTION = "reflection"


@dataclass(frozen=True)
class AccessResolution:
    """Outcome of resolving a path: the strategy that decided it and its result.

    Attributes:
        strategy: The last strategy that was attempted
        value: The value read (None for writes and failures)
        error: The innermost failure when no strategy succeeded
    """

    strategy: AccessStrategy
    value: Any = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


PathLike = Union[str, PropertyPath, Callable[..., Any]]


def _validate_arguments(container: Any, path: Any) -> None:
    if not _is_container(container):
        raise ConfigurationError(
            f"Container has to be an object, a mapping or a sequence, got '{type(container).__name__}'",
            context={"container_type": type(container).__name__},
        )
    if not (callable(path) or isinstance(path, (str, PropertyPath))):
        raise ConfigurationError(
            f"Property path has to be a callable, a string or a PropertyPath, got '{type(path).__name__}'",
            context={"path_type": type(path).__name__},
        )


def _normalize_path(container: Any, path: str | PropertyPath) -> PropertyPath:
    property_path = path if isinstance(path, PropertyPath) else PropertyPath(path)
    if (
        container_kind(container) is not ContainerKind.OBJECT
        and len(property_path) == 1
        and not property_path.segments[0].is_index
    ):
        return property_path.as_index_path()
    return property_path


def _reflected_property(obj: Any, name: str) -> reflection_utils.ReflectionProperty:
    return reflection_utils.reflect_object(obj).get_property(name, instance=obj)


def resolve_get(container: Any, path: PathLike, try_reflection: bool = False) -> AccessResolution:
    """Read a path, reporting which strategy succeeded instead of raising.

    Raises:
        ConfigurationError: If container or path are of unsupported kinds or
            the path is malformed
    """
    _validate_arguments(container, path)
    if callable(path):
        try:
            return AccessResolution(AccessStrategy.OVERRIDE, value=path(container))
        except Exception as e:
            return AccessResolution(AccessStrategy.OVERRIDE, error=e)

    property_path = _normalize_path(container, path)
    try:
        value = get_property_accessor().get_value(container, property_path)
        return AccessResolution(AccessStrategy.ACCESSOR, value=value)
    except Exception as e:
        accessor_error = e
        logger.debug("Accessor could not read '%s': %s", path, e)

    if try_reflection and container_kind(container) is ContainerKind.OBJECT and isinstance(path, str):
        try:
            prop = _reflected_property(container, path)
            with reflection_utils.accessible(prop):
                value = prop.get_value(container)
            return AccessResolution(AccessStrategy.REFLECTION, value=value)
        except Exception as e:
            logger.debug("Reflection could not read '%s': %s", path, e)
            return AccessResolution(AccessStrategy.REFLECTION, error=e)

    return AccessResolution(AccessStrategy.ACCESSOR, error=accessor_error)


def resolve_set(
    container: Any, path: PathLike, value: Any, try_reflection: bool = False
) -> AccessResolution:
    """Write a path, reporting which strategy succeeded instead of raising.

    Raises:
        ConfigurationError: If container or path are of unsupported kinds or
            the path is malformed
    """
    _validate_arguments(container, path)
    if callable(path):
        try:
            path(container, value)
            return AccessResolution(AccessStrategy.OVERRIDE)
        except Exception as e:
            return AccessResolution(AccessStrategy.OVERRIDE, error=e)

    property_path = _normalize_path(container, path)
    try:
        get_property_accessor().set_value(container, property_path, value)
        return AccessResolution(AccessStrategy.ACCESSOR)
    except Exception as e:
        accessor_error = e
        logger.debug("Accessor could not write '%s': %s", path, e)

    if try_reflection and container_kind(container) is ContainerKind.OBJECT and isinstance(path, str):
        try:
            prop = _reflected_property(container, path)
            with reflection_utils.accessible(prop):
                prop.set_value(container, value)
            return AccessResolution(AccessStrategy.REFLECTION)
        except Exception as e:
            logger.debug("Reflection could not write '%s': %s", path, e)
            return AccessResolution(AccessStrategy.REFLECTION, error=e)

    return AccessResolution(AccessStrategy.ACCESSOR, error=accessor_error)


def _path_label(path: PathLike) -> str:
    if callable(path):
        return getattr(path, "__qualname__", repr(path))
    return str(path)


def _access_error(action: str, container: Any, path: PathLike, resolution: AccessResolution) -> PropertyAccessError:
    return PropertyAccessError(
        f"Could not {action} '{_path_label(path)}' of a value of type '{type(container).__name__}': {resolution.error}",
        context={
            "path": _path_label(path),
            "container_type": type(container).__name__,
            "strategy": resolution.strategy.value,
        },
    )


def get_value(
    container: Any,
    path: PathLike,
    throw_on_failure: bool = True,
    default: Any = None,
    try_reflection: bool = False,
) -> Any:
    """Read the value at path from an object, mapping or sequence.

    Args:
        container: The object, mapping or sequence to read from
        path: Callable(container), path string, or PropertyPath
        throw_on_failure: Raise when the path cannot be read; otherwise
            return default
        default: Value returned on failure when throw_on_failure is False
        try_reflection: Fall back to raw (non-public) attribute storage for
            objects and plain string paths

    Returns:
        The value at path, or default

    Raises:
        PropertyAccessError: If the path cannot be read and throw_on_failure is True
        ConfigurationError: If container or path are unsupported or malformed
    """
    resolution = resolve_get(container, path, try_reflection=try_reflection)
    if resolution.succeeded:
        return resolution.value
    if throw_on_failure:
        raise _access_error("read", container, path, resolution) from resolution.error
    return default


def set_value(
    container: Any,
    path: PathLike,
    value: Any,
    throw_on_failure: bool = True,
    try_reflection: bool = False,
) -> None:
    """Write value at path in an object, mapping or sequence.

    Args:
        container: The object, mapping or sequence to write to
        path: Callable(container, value), path string, or PropertyPath
        value: The value to write
        throw_on_failure: Raise when the path cannot be written; otherwise
            do nothing
        try_reflection: Fall back to raw (non-public) attribute storage for
            objects and plain string paths

    Raises:
        PropertyAccessError: If the path cannot be written and throw_on_failure is True
        ConfigurationError: If container or path are unsupported or malformed
    """
    resolution = resolve_set(container, path, value, try_reflection=try_reflection)
    if not resolution.succeeded and throw_on_failure:
        raise _access_error("write", container, path, resolution) from resolution.error
