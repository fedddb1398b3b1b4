import asyncio
from typing import Any, Dict, List, Optional, Set
import httpx
from storefront.cart.store import CartLine, CartStore, ProductSnapshot
from storefront.cart.constants import logger


def line_from_api_item(item: Dict[str, Any]) -> CartLine:
    product = item.get("product") or {}
    snapshot = ProductSnapshot(
        id=int(item.get("productId") or product.get("id")),
        name=product.get("name") or "",
        price=product.get("price") or 0,
        image=product.get("image"),
        colors=product.get("colors") or [],
        sizes=product.get("sizes") or [],
        stock_by_variant=product.get("stockByVariant"),
    )
    return CartLine(
        product=snapshot,
        quantity=int(item.get("quantity") or 1),
        selected_size=item.get("selectedSize") or "",
        selected_color=item.get("selectedColor") or "",
    )


class CartSync:
    """
    Keeps a CartStore and the customer's server cart in step.

    hydrate() pulls the server cart once per logged-in user while the local cart is empty.
    Every later store change pushes the full line list to POST /cart/create. A push that
    fires while another one is still in flight is dropped , not queued.
    Network errors are logged and never raised , the local store stays authoritative.
    """

    def __init__(self, store: CartStore, client: httpx.AsyncClient, api_prefix: str = "/api",
                 auto_persist: bool = True):
        self.store = store
        self.client = client
        self.api_prefix = api_prefix.rstrip("/")
        self.auto_persist = auto_persist

        self.user_id: Optional[str] = None
        self.hydrated_for: Optional[str] = None
        self._generation = 0            # bumped on every user change , stale calls compare against it
        self._hydrating = False
        self._skip_next_sync = False
        self._saving = False
        self._tasks: Set[asyncio.Task] = set()

        self._unsubscribe = store.subscribe(self._on_store_change)

    # -- session ---------------------------------------------------------------------------

    def set_user(self, user_id: Optional[str]):
        if user_id == self.user_id:
            return

        self._cancel_pending()
        self._generation += 1
        self.user_id = user_id
        self.hydrated_for = None
        self._hydrating = False
        self._skip_next_sync = False
        self._saving = False

        if user_id is None:
            # logout , user_id is already None so clearing pushes nothing
            self.store.clear()
            logger.info("cart.sync.logout")
        else:
            logger.info("cart.sync.user_set", extra={"usuario_id": user_id})

    def close(self):
        self._cancel_pending()
        self._unsubscribe()

    def _cancel_pending(self):
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # -- hydrate ---------------------------------------------------------------------------

    async def hydrate(self) -> bool:
        user_id = self.user_id
        if user_id is None or self._hydrating:
            return False
        if self.hydrated_for == user_id:
            return False
        if not self.store.is_empty():
            # local lines win , nothing to pull
            self.hydrated_for = user_id
            return False

        generation = self._generation
        self._hydrating = True
        try:
            resp = await self.client.get(f"{self.api_prefix}/cart/list", params={"usuarioId": user_id})
            if generation != self._generation:
                return False
            if resp.status_code != 200:
                logger.warning("cart.sync.hydrate_failed",
                               extra={"usuario_id": user_id, "status_code": resp.status_code, "body": resp.text[:500]})
                return False

            items = resp.json().get("items")
            if isinstance(items, list):
                lines: List[CartLine] = [line_from_api_item(it) for it in items]
                self._skip_next_sync = True
                self.store.replace(lines)
            self.hydrated_for = user_id
            logger.info("cart.sync.hydrated", extra={"usuario_id": user_id, "lines": len(self.store)})
            return True
        except httpx.HTTPError as e:
            logger.error("cart.sync.hydrate_error", extra={"usuario_id": user_id, "error": str(e)})
            return False
        finally:
            if generation == self._generation:
                self._hydrating = False

    # -- persist ---------------------------------------------------------------------------

    def _on_store_change(self, store: CartStore):
        if self.user_id is None:
            return
        if self._skip_next_sync:
            self._skip_next_sync = False
            return
        if self._hydrating:
            return
        if not self.auto_persist:
            return
        self._schedule_persist()

    def _schedule_persist(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("cart.sync.no_event_loop", extra={"usuario_id": self.user_id})
            return
        task = loop.create_task(self.persist())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def persist(self) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        if self._saving:
            logger.debug("cart.sync.persist_dropped", extra={"usuario_id": user_id})
            return False

        generation = self._generation
        self._saving = True
        payload = {"usuarioId": user_id, "items": self.store.to_payload()}
        try:
            resp = await self.client.post(f"{self.api_prefix}/cart/create", json=payload)
            if resp.status_code not in (200, 201):
                logger.warning("cart.sync.persist_failed",
                               extra={"usuario_id": user_id, "status_code": resp.status_code, "body": resp.text[:500]})
                return False
            logger.debug("cart.sync.persisted", extra={"usuario_id": user_id, "lines": len(payload["items"])})
            return True
        except httpx.HTTPError as e:
            logger.error("cart.sync.persist_error", extra={"usuario_id": user_id, "error": str(e)})
            return False
        finally:
            if generation == self._generation:
                self._saving = False

    async def drain(self):
        """Wait for every scheduled persist to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
