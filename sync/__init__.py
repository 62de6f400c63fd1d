"""
Sync Layer - 快照同步边界

Modules:
    snapshot: 快照编解码
    store: 房间快照存储与订阅
    room: 读取-执行-写回的房间适配器
"""
from .snapshot import (
    SCHEMA_VERSION,
    round_state_to_dict,
    round_state_from_dict,
    session_to_snapshot,
    session_from_snapshot,
    dumps_snapshot,
    loads_snapshot,
)

from .store import (
    SyncError,
    RoomNotFoundError,
    StaleSnapshotError,
    StoredSnapshot,
    SnapshotStore,
    InMemorySnapshotStore,
    deep_merge,
)

from .room import RoomSync

__all__ = [
    # snapshot
    "SCHEMA_VERSION",
    "round_state_to_dict",
    "round_state_from_dict",
    "session_to_snapshot",
    "session_from_snapshot",
    "dumps_snapshot",
    "loads_snapshot",
    # store
    "SyncError",
    "RoomNotFoundError",
    "StaleSnapshotError",
    "StoredSnapshot",
    "SnapshotStore",
    "InMemorySnapshotStore",
    "deep_merge",
    # room
    "RoomSync",
]
