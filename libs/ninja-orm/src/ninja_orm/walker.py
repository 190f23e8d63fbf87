"""Replay a recorded path against the object graph."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from ninja_orm.exceptions import MalformedPathError
from ninja_orm.lens import Path
from ninja_orm.protocols import Edge, EdgeKind

logger = logging.getLogger(__name__)


def edge_of(node: Any, hop: str) -> Edge:
    """Return the edge handle named ``hop`` on ``node``."""
    handle = getattr(node, hop, None)
    if not isinstance(handle, Edge):
        raise MalformedPathError(
            entity_name=type(node).__name__,
            operation="walk",
            detail=f"{hop!r} is not a relation",
        )
    return handle


def unique(nodes: Iterable[Any]) -> list[Any]:
    """De-duplicate by identity, keeping first-seen order and dropping ``None``."""
    seen: set[int] = set()
    result: list[Any] = []
    for node in nodes:
        if node is None or id(node) in seen:
            continue
        seen.add(id(node))
        result.append(node)
    return result


async def fan_out(frontier: list[Any], hop: str) -> list[Any]:
    edges = [edge_of(node, hop) for node in frontier]
    loaded = await asyncio.gather(*(edge.load() for edge in edges))
    flat: list[Any] = []
    for edge, value in zip(edges, loaded):
        if edge.kind == EdgeKind.PLURAL:
            flat.extend(value)
        elif value is not None:
            flat.append(value)
    return unique(flat)


async def walk(root: Any, path: Path) -> Any:
    """Walk ``path`` from ``root``.

    Returns the reached node (or ``None``) while every hop has been singular,
    and a de-duplicated list as soon as any hop crossed a plural edge. An empty
    path returns ``root`` itself. The first failing load aborts the walk and its
    exception propagates unchanged.
    """
    frontier: Any = root
    plural = False
    for hop in path:
        if plural:
            frontier = await fan_out(frontier, hop)
        elif frontier is not None:
            edge = edge_of(frontier, hop)
            frontier = await edge.load()
            if edge.kind == EdgeKind.PLURAL:
                plural = True
                frontier = list(frontier)
        logger.debug(
            "walk hop=%s frontier=%s",
            hop,
            len(frontier) if plural else type(frontier).__name__,
        )
    return frontier
