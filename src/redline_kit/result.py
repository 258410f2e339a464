# src/redline_kit/result.py

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success case of ``Result``.

    Usage::

        match validate_annotations_exist(filtered):
            case Ok(value=bundle): send(bundle)
            case Err(error=reason): show(reason.message)
    """

    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failure case of ``Result``. Carries the typed reason."""

    error: E


Result = Union[Ok[T], Err[E]]
