"""
Poll cycle execution.

One cycle runs the configured get and walk operations against every
registered host and turns each host's successful results into a record.
A failing operation only loses its own contribution for that cycle.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from ..core.models import METADATA_KEY, ClientDefinition, OperationResult


logger = logging.getLogger(__name__)


def merge_results(results: Iterable[OperationResult]) -> Dict[str, Any]:
    """Merge successful results in order; later keys override earlier ones."""
    record: Dict[str, Any] = {}
    for result in results:
        if result.ok:
            record.update(result.data)
    return record


class PollCycleExecutor:
    """
    Executes one poll cycle across all client definitions.

    Hosts are polled one at a time unless `max_concurrency` is above 1.
    Each host is handled by a single task per cycle, so a client never
    serves two requests at once.
    """

    def __init__(
        self,
        definitions: Iterable[ClientDefinition],
        oid_root_skip: int = 0,
        sink=None,
        max_concurrency: int = 1,
    ):
        self.definitions = list(definitions)
        self.oid_root_skip = oid_root_skip
        self.sink = sink
        self.max_concurrency = max(1, max_concurrency)

    async def _get(self, definition: ClientDefinition) -> OperationResult:
        oids = definition.get
        try:
            data = await definition.client.get(list(oids), self.oid_root_skip)
            return OperationResult("get", oids, data=dict(data or {}))
        except Exception as e:
            logger.error(
                f"error invoking get operation on {definition.name} for OIDs: {list(oids)}, ignoring",
                exc_info=e,
            )
            return OperationResult("get", oids, error=e)

    async def _walk(self, definition: ClientDefinition, oid: str) -> OperationResult:
        try:
            data = await definition.client.walk(oid, self.oid_root_skip)
            return OperationResult("walk", (oid,), data=dict(data or {}))
        except Exception as e:
            logger.error(
                f"error invoking walk operation on {definition.name} for OID: {oid}, ignoring",
                exc_info=e,
            )
            return OperationResult("walk", (oid,), error=e)

    async def poll_host(self, definition: ClientDefinition) -> List[OperationResult]:
        """Run the get batch, then each walk OID, against one host."""
        results = []
        if definition.get:
            results.append(await self._get(definition))
        for oid in definition.walk:
            results.append(await self._walk(definition, oid))
        return results

    async def build_record(self, definition: ClientDefinition) -> Optional[Dict[str, Any]]:
        """Poll one host and build its record, or None when nothing succeeded."""
        record = merge_results(await self.poll_host(definition))
        if not record:
            logger.debug(f"No data collected from {definition.name} this cycle")
            return None

        record[METADATA_KEY] = definition.metadata()
        return record

    async def _emit(self, record: Dict[str, Any]):
        if self.sink is None:
            return
        try:
            await self.sink.emit(record)
        except Exception as e:
            logger.error(f"Failed to emit record for {record[METADATA_KEY]['host_address']}: {e}")

    async def _poll_and_emit(self, definition: ClientDefinition) -> Optional[Dict[str, Any]]:
        record = await self.build_record(definition)
        if record is not None:
            await self._emit(record)
        return record

    async def run_cycle(self) -> List[Dict[str, Any]]:
        """
        Poll every host once.

        Each record is emitted as soon as its host has been polled. Returns
        the emitted records in host registration order.
        """
        start_time = time.time()

        if self.max_concurrency == 1:
            records = [await self._poll_and_emit(definition) for definition in self.definitions]
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(definition: ClientDefinition):
                async with semaphore:
                    return await self._poll_and_emit(definition)

            records = await asyncio.gather(*(bounded(d) for d in self.definitions))

        emitted = [record for record in records if record is not None]

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Poll cycle completed in {duration_ms:.0f}ms - "
            f"{len(emitted)}/{len(self.definitions)} hosts returned data"
        )
        return emitted
