"""
Store supervisor - picks the durable or the volatile store for every call.

The durable store is tried first while it is healthy. Any exception it raises
(timeout, lost connection, driver error) marks it degraded and the same call
is replayed once against the volatile store. While degraded the durable store
is skipped until a ping probe, at most once per recovery interval, succeeds.

The two stores never exchange data. To keep that from turning into silent
divergence:

- ids that are not MongoDB ObjectIds can only have come from the volatile
  store, so calls addressed to them go straight there;
- listings and lookups read both stores and merge the results;
- every switch between the stores is logged, and `status()` reports how many
  records live only in memory.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from formcraft.database.memory_store import MemoryStore
from formcraft.database.store import Store
from formcraft.utils.errors import FormCraftError, InternalError, StoreError
from formcraft.utils.helpers import is_object_id

logger = logging.getLogger(__name__)

StoreCall = Callable[[Store], Awaitable[Any]]


class StoreSupervisor:
    def __init__(
        self,
        durable: Optional[Store] = None,
        volatile: Optional[MemoryStore] = None,
        timeout: float = 5.0,
        recovery_interval: float = 30.0,
    ):
        self.durable = durable
        self.volatile = volatile or MemoryStore()
        self.timeout = timeout
        self.recovery_interval = recovery_interval
        self.healthy = durable is not None
        self.fallback_count = 0
        self.last_error: Optional[str] = None
        self._last_probe = 0.0

    def attach_durable(self, durable: Store, healthy: bool = True) -> None:
        self.durable = durable
        self.healthy = healthy
        self._last_probe = time.monotonic()
        if not healthy:
            self.last_error = "initial connection failed"
            logger.warning("⚠️ Durable store attached in degraded mode, serving from the volatile store")

    @property
    def mode(self) -> str:
        if self.durable is None:
            return "volatile-only"
        return "durable" if self.healthy else "degraded"

    async def status(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "healthy": self.healthy,
            "fallbackCount": self.fallback_count,
            "lastError": self.last_error,
            "volatileRecords": self.volatile.total(),
        }

    async def _durable_available(self) -> bool:
        if self.durable is None:
            return False
        if self.healthy:
            return True
        now = time.monotonic()
        if now - self._last_probe < self.recovery_interval:
            return False
        self._last_probe = now
        try:
            await asyncio.wait_for(self.durable.ping(), timeout=self.timeout)
        except Exception as exc:
            self.last_error = f"{type(exc).__name__}: {exc}"
            logger.warning("⚠️ Durable store still unavailable: %s", self.last_error)
            return False
        self.healthy = True
        logger.warning(
            "✅ Durable store recovered after %d fallback(s); %d record(s) remain in the volatile store and are not migrated",
            self.fallback_count,
            self.volatile.total(),
        )
        return True

    def _mark_degraded(self, op_name: str, exc: BaseException) -> None:
        self.fallback_count += 1
        self.last_error = f"{type(exc).__name__}: {exc}"
        if self.healthy:
            self.healthy = False
            self._last_probe = time.monotonic()
            logger.error("❌ Durable store failed during %s (%s), switching to the volatile store", op_name, self.last_error)
        else:
            logger.warning("⚠️ Durable store failed during %s (%s), falling back", op_name, self.last_error)

    async def _try_durable(self, op_name: str, call: StoreCall) -> Tuple[bool, Any]:
        if not await self._durable_available():
            return False, None
        try:
            return True, await asyncio.wait_for(call(self.durable), timeout=self.timeout)
        except StoreError as exc:
            self._mark_degraded(op_name, exc)
        except FormCraftError:
            raise
        except Exception as exc:
            self._mark_degraded(op_name, exc)
        return False, None

    async def _on_volatile(self, op_name: str, call: StoreCall) -> Any:
        try:
            return await call(self.volatile)
        except FormCraftError:
            raise
        except Exception as exc:
            logger.exception("❌ Volatile store failed during %s", op_name)
            raise InternalError() from exc

    async def run(self, op_name: str, call: StoreCall, doc_id: Optional[str] = None) -> Any:
        """Run `call` on the durable store, or once on the volatile store if that fails"""
        if doc_id is not None and not is_object_id(doc_id):
            return await self._on_volatile(op_name, call)
        ok, result = await self._try_durable(op_name, call)
        if ok:
            return result
        return await self._on_volatile(op_name, call)

    async def first(self, op_name: str, call: StoreCall) -> Any:
        """First non-None result, durable store before volatile store"""
        ok, result = await self._try_durable(op_name, call)
        if ok and result is not None:
            return result
        return await self._on_volatile(op_name, call)

    async def gather(self, op_name: str, call: StoreCall) -> List[Any]:
        """Concatenate list results from both stores"""
        ok, result = await self._try_durable(op_name, call)
        results = list(result) if ok else []
        results.extend(await self._on_volatile(op_name, call))
        return results
