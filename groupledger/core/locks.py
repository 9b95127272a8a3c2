import asyncio
import weakref
from contextlib import asynccontextmanager

# One lock per group id. Entries disappear once nobody holds or waits on them.
_group_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


@asynccontextmanager
async def group_lock(group_id: int):
    """Serialises balance mutations on one group; other groups are unaffected."""
    lock = _group_locks.get(group_id)
    if lock is None:
        lock = asyncio.Lock()
        _group_locks[group_id] = lock

    async with lock:
        yield
