"""UpdateRunner: drive scanned dependencies through the updater chain."""

from __future__ import annotations

import asyncio
from collections.abc import Collection, Sequence
from pathlib import Path

import structlog

from depsupdater.scanner.models import Dependency, DependencyType
from depsupdater.updater.ecosystems import EcosystemUpdater, dispatch
from depsupdater.updater.models import BatchResult, UpdateOutcome

log = structlog.get_logger("depsupdater.updater")


class UpdateRunner:
    """Batch orchestration: filter → bounded worker pool → lock files.

    *concurrency* workers pull dependencies from a shared queue (default 1,
    strictly sequential). The first registry failure cancels the remaining
    workers and propagates; updates already written stay written.
    """

    def __init__(self, updaters: Sequence[EcosystemUpdater], *, concurrency: int = 1) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._updaters = list(updaters)
        self._concurrency = concurrency

    @staticmethod
    def eligible(
        dependencies: Sequence[Dependency], types: Collection[DependencyType] = ()
    ) -> list[Dependency]:
        """Updatable dependencies whose type is in *types* (all types when empty)."""
        return [
            dep
            for dep in dependencies
            if dep.location.is_updatable and (not types or dep.type in types)
        ]

    async def run(
        self,
        dependencies: Sequence[Dependency],
        root: Path,
        *,
        types: Collection[DependencyType] = (),
        update_lock_files: bool = False,
        cancel: asyncio.Event | None = None,
    ) -> BatchResult:
        """Update every eligible dependency, then optionally regenerate lock files.

        Setting *cancel* stops dispatching new dependencies and cancels the
        ones in flight, or the lock-file tools if they are already running;
        the result is then flagged ``cancelled``.
        """
        eligible = self.eligible(dependencies, types)
        result = BatchResult(scanned=len(dependencies), eligible=len(eligible))
        log.info("updater.batch_started", scanned=result.scanned, eligible=result.eligible)

        if eligible:
            await self._drain(eligible, result, cancel)

        if cancel is not None and cancel.is_set():
            result.cancelled = True
            log.warning("updater.batch_cancelled", updated=result.updated)
            return result

        log.info("updater.batch_finished", updated=result.updated)

        if update_lock_files:
            lock_phase = asyncio.ensure_future(self._update_lock_files(root, result.outcomes))
            if await _until_cancelled(lock_phase, cancel):
                result.cancelled = True
                log.warning("updater.lock_files_cancelled", updated=result.updated)

        return result

    async def _update_lock_files(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None:
        for updater in self._updaters:
            await updater.update_lock_files(root, outcomes)

    async def _drain(
        self,
        eligible: list[Dependency],
        result: BatchResult,
        cancel: asyncio.Event | None,
    ) -> None:
        queue: asyncio.Queue[Dependency] = asyncio.Queue()
        for dep in eligible:
            queue.put_nowait(dep)

        workers = [
            asyncio.create_task(self._worker(queue, result, cancel), name=f"update-worker-{i}")
            for i in range(min(self._concurrency, len(eligible)))
        ]
        try:
            await _until_cancelled(asyncio.gather(*workers), cancel)
        except BaseException:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

    async def _worker(
        self,
        queue: asyncio.Queue[Dependency],
        result: BatchResult,
        cancel: asyncio.Event | None,
    ) -> None:
        while not queue.empty():
            if cancel is not None and cancel.is_set():
                return
            dependency = queue.get_nowait()

            new_version = await dispatch(self._updaters, dependency)
            if new_version is None:
                log.info("updater.no_update", dependency=str(dependency))
                continue

            log.info(
                "updater.updated",
                dependency=dependency.name,
                type=dependency.type.value,
                file=str(dependency.location.file_path),
                version=new_version,
            )
            result.outcomes.append(UpdateOutcome(dependency=dependency, new_version=new_version))


async def _until_cancelled(work: asyncio.Future, cancel: asyncio.Event | None) -> bool:
    """Await *work*, cancelling it if *cancel* fires first.

    Returns True when *work* was cut short by *cancel*. Failures of *work*
    propagate, and so does a cancellation of the awaiting task itself.
    """
    if cancel is None:
        await work
        return False

    watcher = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if work.done():
            work.result()
            return False
        work.cancel()
        try:
            await work
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
        return True
    except BaseException:
        work.cancel()
        raise
    finally:
        watcher.cancel()
