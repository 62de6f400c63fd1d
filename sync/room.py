"""
房间同步

读取最新快照 -> 恢复会话 -> 执行动作 -> 按读取时的版本写回
动作失败时不写入，其他客户端先写入时报 StaleSnapshotError，由调用方决定是否重试
"""
from typing import Callable, Tuple, TypeVar
import logging

from core.session import GameSession

from .snapshot import session_from_snapshot, session_to_snapshot
from .store import SnapshotStore, StoredSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RoomSync:
    """
    房间同步适配器

    规则引擎本身不加锁，单个房间的写入由存储的版本检查串行化
    """

    def __init__(self, store: SnapshotStore):
        self.store = store

    def create(self, room_code: str, session: GameSession) -> StoredSnapshot:
        """
        创建房间

        Raises:
            StaleSnapshotError: 房间已存在
        """
        stored = self.store.write(room_code, session_to_snapshot(session), expected_version=0)
        logger.info(f"Room {room_code} created with {len(session.players)} players")
        return stored

    def load(self, room_code: str) -> Tuple[GameSession, int]:
        """
        读取房间当前会话

        Returns:
            (会话, 版本)
        """
        stored = self.store.read(room_code)
        return session_from_snapshot(stored.data), stored.version

    def apply(self, room_code: str, action: Callable[[GameSession], T]) -> T:
        """
        在最新快照上执行动作并写回

        Args:
            room_code: 房间号
            action: 接收会话并执行动作的函数 (会话内部会重新校验行动玩家)

        Returns:
            action 的返回值

        Raises:
            GameError: 动作不合法，不写入
            StaleSnapshotError: 读取后有其他写入
        """
        session, version = self.load(room_code)
        result = action(session)
        self.store.write(room_code, session_to_snapshot(session), expected_version=version)
        return result

    def subscribe(self, room_code: str, callback: Callable[[GameSession], None]) -> Callable[[], None]:
        """订阅房间会话更新，返回取消订阅的函数"""

        def on_snapshot(stored: StoredSnapshot) -> None:
            callback(session_from_snapshot(stored.data))

        return self.store.subscribe(room_code, on_snapshot)
