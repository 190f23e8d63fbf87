"""Lens path recording.

A lens function such as ``lambda b: b.author.publisher`` is run exactly once
against a probe that records every attribute (or item) access and hands itself
back, so the chain ``b.author.publisher`` yields the path ``("author",
"publisher")`` without touching any real entity. The walker later replays the
path against the object graph.

Paths can also be built explicitly::

    path().edge("author").edge("publisher")
    path("author", "publisher")
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Union

from ninja_orm.exceptions import MalformedPathError

_OPERATION = "record_path"


@dataclass(frozen=True)
class Path:
    """An ordered, immutable sequence of relation names."""

    hops: tuple[str, ...] = ()

    def edge(self, name: str) -> Path:
        """Return a new path extended by ``name``."""
        return Path((*self.hops, _check_hop(name)))

    def __iter__(self) -> Iterator[str]:
        return iter(self.hops)

    def __len__(self) -> int:
        return len(self.hops)

    def __str__(self) -> str:
        return ".".join(self.hops)


LensFn = Callable[[Any], Any]
PathLike = Union[Path, LensFn]


def _check_hop(name: object) -> str:
    if not isinstance(name, str) or not name:
        raise MalformedPathError(operation=_OPERATION, detail=f"hop must be a non-empty string, got {name!r}")
    return name


def path(*hops: str) -> Path:
    """Start a path, optionally seeded with ``hops``."""
    return Path(tuple(_check_hop(h) for h in hops))


def _misuse(what: str) -> MalformedPathError:
    return MalformedPathError(
        operation=_OPERATION,
        detail=f"lens functions may only chain attribute access; {what} is not supported",
    )


class _Probe:
    """Stand-in entity that records attribute gets and returns itself."""

    __slots__ = ("_hops",)

    def __init__(self) -> None:
        object.__setattr__(self, "_hops", [])

    def __getattribute__(self, name: str) -> _Probe:
        if name.startswith("__") and name.endswith("__"):
            raise _misuse(f"special attribute {name!r}")
        object.__getattribute__(self, "_hops").append(name)
        return self

    def __getitem__(self, key: object) -> _Probe:
        object.__getattribute__(self, "_hops").append(str(key))
        return self

    def __setattr__(self, name: str, value: object) -> None:
        raise _misuse("assignment")

    def __delattr__(self, name: str) -> None:
        raise _misuse("deletion")

    def __call__(self, *args: object, **kwargs: object) -> None:
        raise _misuse("calling a relation")

    def __bool__(self) -> bool:
        raise _misuse("truth-testing")

    def __iter__(self) -> Iterator[Any]:
        raise _misuse("iteration")

    def __len__(self) -> int:
        raise _misuse("len()")

    def __contains__(self, item: object) -> bool:
        raise _misuse("membership tests")

    def __eq__(self, other: object) -> bool:
        raise _misuse("comparison")

    def __ne__(self, other: object) -> bool:
        raise _misuse("comparison")

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"<lens probe {'.'.join(object.__getattribute__(self, '_hops')) or '(root)'}>"


def record_path(fn: PathLike, *, strict: bool = True) -> Path:
    """Run ``fn`` against a recording probe and return the hops it accessed.

    Args:
        fn: A lens function (``lambda a: a.publisher``) or an already-built Path,
            which is returned unchanged.
        strict: Require ``fn`` to return the chained probe. A lens that returns
            anything else almost always accessed several chains at once.

    Raises:
        MalformedPathError: If ``fn`` uses the probe as anything but a chain.
    """
    if isinstance(fn, Path):
        return fn

    probe = _Probe()
    try:
        result = fn(probe)
    except TypeError as exc:
        raise MalformedPathError(
            operation=_OPERATION,
            detail=f"lens function used a relation as a value ({exc})",
            cause=exc,
        ) from exc

    if strict and result is not probe:
        raise MalformedPathError(
            operation=_OPERATION,
            detail=f"lens function must return the chained relation, got {type(result).__name__}",
        )
    return Path(tuple(object.__getattribute__(probe, "_hops")))
