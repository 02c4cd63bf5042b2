"""Loading environment variables into dataclass based configuration.

Fields are bound to variables with :func:`env_field`. Boolean fields also
accept ``on``/``yes`` and ``off``/``no``.
"""

from __future__ import annotations

import dataclasses
import os
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

T = TypeVar("T")

_ENV_KEY = "env"

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class EnvConfigError(ValueError):
    """Raised when the environment cannot be parsed into a configuration."""


def env_field(name: str, default: Any = dataclasses.MISSING) -> Any:
    """Declare a dataclass field filled from the environment variable ``name``."""
    return dataclasses.field(default=default, metadata={_ENV_KEY: name})


def parse_bool(value: str) -> bool:
    """Parse a boolean, accepting on/yes/off/no besides the usual spellings."""
    if value in ("on", "yes"):
        return True
    if value in ("off", "no"):
        return False
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


_PARSERS: Dict[type, Callable[[str], Any]] = {
    str: str,
    bool: parse_bool,
    int: int,
    float: float,
}

_ZERO: Dict[type, Any] = {str: "", bool: False, int: 0, float: 0.0}

_TYPE_NAMES: Dict[str, type] = {t.__name__: t for t in _PARSERS}


def _field_type(fld: dataclasses.Field) -> Any:
    """Return the field's type, resolving plain string annotations by name."""
    declared = fld.type
    if isinstance(declared, str):
        return _TYPE_NAMES.get(declared.strip(), declared)
    return declared


def parse(config_cls: Type[T], environ: Optional[Mapping[str, str]] = None) -> T:
    """Build an instance of the dataclass ``config_cls`` from the environment.

    Fields bound with :func:`env_field` take the variable's value when it is
    set; otherwise they keep their default, or the zero value of their type.
    """
    if not (isinstance(config_cls, type) and dataclasses.is_dataclass(config_cls)):
        raise TypeError(f"{config_cls!r} is not a dataclass type")

    if environ is None:
        environ = os.environ

    kwargs: Dict[str, Any] = {}

    for fld in dataclasses.fields(config_cls):
        if not fld.init:
            continue

        field_type = _field_type(fld)
        var_name = fld.metadata.get(_ENV_KEY)

        if var_name is not None and var_name in environ:
            kwargs[fld.name] = _convert(var_name, environ[var_name], field_type)
            continue

        has_default = (
            fld.default is not dataclasses.MISSING
            or fld.default_factory is not dataclasses.MISSING
        )
        if has_default:
            continue

        if field_type not in _ZERO:
            raise EnvConfigError(
                f"parse env: no value for field {fld.name!r} of type {field_type!r}"
            )
        kwargs[fld.name] = _ZERO[field_type]

    return config_cls(**kwargs)


def _convert(var_name: str, raw: str, field_type: Any) -> Any:
    parser = _PARSERS.get(field_type) if isinstance(field_type, type) else None
    if parser is None:
        raise EnvConfigError(
            f"parse env: unsupported type {field_type!r} for variable {var_name!r}"
        )
    try:
        return parser(raw)
    except ValueError as err:
        raise EnvConfigError(
            f"parse env: variable {var_name!r}: {err}"
        ) from err