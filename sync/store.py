"""
房间快照存储

按房间号保存快照，提供:
- 乐观版本检查的写入 (compare-and-set)
- 部分更新的递归合并
- 写入后通知订阅者
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import copy
import logging
import threading

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """同步层异常基类"""


class RoomNotFoundError(SyncError):
    """房间不存在"""


class StaleSnapshotError(SyncError):
    """写入时版本已过期 (有其他客户端先写入)"""


@dataclass(frozen=True)
class StoredSnapshot:
    """存储中的快照，version 每次写入加 1"""
    room_code: str
    version: int
    data: Dict[str, Any]


Subscriber = Callable[[StoredSnapshot], None]


def deep_merge(base: Dict[str, Any], partial: Dict[str, Any]) -> Dict[str, Any]:
    """
    递归合并字典，partial 中的值覆盖 base

    两边都是 dict 的键递归合并，其他类型 (包括 list) 直接替换

    Returns:
        新字典，不修改输入
    """
    merged = copy.deepcopy(base)
    for key, value in partial.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class SnapshotStore:
    """快照存储接口"""

    def read(self, room_code: str) -> StoredSnapshot:
        raise NotImplementedError

    def write(
        self,
        room_code: str,
        data: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> StoredSnapshot:
        raise NotImplementedError

    def merge(self, room_code: str, partial: Dict[str, Any]) -> StoredSnapshot:
        raise NotImplementedError

    def subscribe(self, room_code: str, callback: Subscriber) -> Callable[[], None]:
        raise NotImplementedError


class InMemorySnapshotStore(SnapshotStore):
    """
    进程内快照存储

    所有写入在同一把锁下串行执行，通知在锁外进行
    """

    def __init__(self):
        self._rooms: Dict[str, StoredSnapshot] = {}
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def __contains__(self, room_code: str) -> bool:
        with self._lock:
            return room_code in self._rooms

    def read(self, room_code: str) -> StoredSnapshot:
        """
        读取房间快照 (返回副本)

        Raises:
            RoomNotFoundError: 房间不存在
        """
        with self._lock:
            stored = self._rooms.get(room_code)
        if stored is None:
            raise RoomNotFoundError(f"Room not found: {room_code}")
        return StoredSnapshot(stored.room_code, stored.version, copy.deepcopy(stored.data))

    def write(
        self,
        room_code: str,
        data: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> StoredSnapshot:
        """
        写入整个快照

        Args:
            room_code: 房间号
            data: 快照
            expected_version: 期望的当前版本，None 表示不检查，0 表示房间必须不存在

        Returns:
            写入后的快照

        Raises:
            StaleSnapshotError: 当前版本与期望不符
        """
        with self._lock:
            current = self._rooms.get(room_code)
            current_version = current.version if current else 0
            if expected_version is not None and expected_version != current_version:
                raise StaleSnapshotError(
                    f"Room {room_code} is at version {current_version}, expected {expected_version}"
                )
            stored = StoredSnapshot(room_code, current_version + 1, copy.deepcopy(data))
            self._rooms[room_code] = stored

        logger.info(f"Room {room_code}: wrote version {stored.version}")
        self._notify(stored)
        return stored

    def merge(self, room_code: str, partial: Dict[str, Any]) -> StoredSnapshot:
        """部分更新，房间不存在时以 partial 创建"""
        with self._lock:
            current = self._rooms.get(room_code)
            base = current.data if current else {}
            version = current.version if current else 0
            stored = StoredSnapshot(room_code, version + 1, deep_merge(base, partial))
            self._rooms[room_code] = stored

        logger.info(f"Room {room_code}: merged into version {stored.version}")
        self._notify(stored)
        return stored

    def subscribe(self, room_code: str, callback: Subscriber) -> Callable[[], None]:
        """
        订阅房间快照更新

        Returns:
            取消订阅的函数
        """
        with self._lock:
            self._subscribers.setdefault(room_code, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(room_code, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def _notify(self, stored: StoredSnapshot) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(stored.room_code, []))
        for callback in callbacks:
            try:
                callback(StoredSnapshot(stored.room_code, stored.version, copy.deepcopy(stored.data)))
            except Exception:
                # 订阅者出错不影响已完成的写入
                logger.exception(f"Subscriber failed for room {stored.room_code}")
