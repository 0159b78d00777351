"""Document store boundary.

The engine reads actors and writes partial updates through a
:class:`DocumentStore`.  Real deployments back this with their own
persistence layer; :class:`InMemoryDocumentStore` is used by the CLI and
the tests.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from pydantic import TypeAdapter

from action_cards.engine.core.entities import Actor, GearItem, OwnedItem
from action_cards.engine.inventory import find_gear_by_name
from action_cards.errors import DocumentNotFoundError

logger = logging.getLogger(__name__)

_owned_item_adapter: TypeAdapter[Any] = TypeAdapter(OwnedItem)


class DocumentStore(Protocol):
    async def get(self, actor_id: str) -> Actor | None: ...

    async def update_actor(self, actor_id: str, patch: dict[str, Any]) -> Actor: ...

    async def update_item(
        self, actor_id: str, item_id: str, patch: dict[str, Any]
    ) -> Any: ...

    async def create_embedded_records(
        self, actor_id: str, records: list[dict[str, Any]]
    ) -> list[Any]: ...

    def find_gear_by_name(
        self, actor: Actor, name: str, min_quantity: int | None = None
    ) -> GearItem | None: ...


class InMemoryDocumentStore:
    """Dictionary-backed store.

    Updates replace the stored actor with a patched copy, so actors handed
    out earlier keep the values they had when they were read.
    """

    def __init__(self, actors: Iterable[Actor] = ()) -> None:
        self._actors: dict[str, Actor] = {a.id: a for a in actors}

    # -- direct access (not part of the protocol) ----------------------------

    def add(self, actor: Actor) -> None:
        self._actors[actor.id] = actor

    def remove(self, actor_id: str) -> None:
        self._actors.pop(actor_id, None)

    def snapshot(self, actor_id: str) -> Actor:
        return self._require(actor_id)

    def _require(self, actor_id: str) -> Actor:
        actor = self._actors.get(actor_id)
        if actor is None:
            raise DocumentNotFoundError(actor_id)
        return actor

    # -- DocumentStore -------------------------------------------------------

    async def get(self, actor_id: str) -> Actor | None:
        return self._actors.get(actor_id)

    async def update_actor(self, actor_id: str, patch: dict[str, Any]) -> Actor:
        actor = self._require(actor_id)
        updated = actor.model_copy(update=patch)
        self._actors[actor_id] = updated
        logger.debug("Updated actor %s: %s", actor.name, patch)
        return updated

    async def update_item(
        self, actor_id: str, item_id: str, patch: dict[str, Any]
    ) -> Any:
        actor = self._require(actor_id)
        item = actor.get_item(item_id)
        if item is None:
            raise DocumentNotFoundError(f"{actor_id}/{item_id}")

        updated = item.model_copy(update=patch)
        items = [updated if i.id == item_id else i for i in actor.items]
        self._actors[actor_id] = actor.model_copy(update={"items": items})
        logger.debug("Updated item %s on %s: %s", item.name, actor.name, patch)
        return updated

    async def create_embedded_records(
        self, actor_id: str, records: list[dict[str, Any]]
    ) -> list[Any]:
        actor = self._require(actor_id)
        created = [_owned_item_adapter.validate_python(r) for r in records]
        self._actors[actor_id] = actor.model_copy(
            update={"items": [*actor.items, *created]}
        )
        logger.debug(
            "Created %d item(s) on %s: %s",
            len(created), actor.name, [c.name for c in created],
        )
        return created

    def find_gear_by_name(
        self, actor: Actor, name: str, min_quantity: int | None = None
    ) -> GearItem | None:
        return find_gear_by_name(actor, name, min_quantity)
