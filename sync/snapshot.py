"""
快照编解码

快照是纯结构化数据 (dict/list/str/int)，枚举用字符串表示，可直接 JSON 序列化
"""
from typing import Any, Dict
import json

from core.session import GameSession
from core.state import RoundState

# 快照格式版本
SCHEMA_VERSION: int = 1


def round_state_to_dict(state: RoundState) -> Dict[str, Any]:
    return state.to_dict()


def round_state_from_dict(d: Dict[str, Any]) -> RoundState:
    return RoundState.from_dict(d)


def session_to_snapshot(session: GameSession) -> Dict[str, Any]:
    """
    将对局会话转换为快照

    Args:
        session: 对局会话

    Returns:
        {"schema": 版本, "session": 会话数据}
    """
    return {"schema": SCHEMA_VERSION, "session": session.to_dict()}


def session_from_snapshot(snapshot: Dict[str, Any]) -> GameSession:
    """
    从快照恢复对局会话

    Raises:
        ValueError: 快照版本不支持
    """
    schema = snapshot.get("schema")
    if schema != SCHEMA_VERSION:
        raise ValueError(f"Unsupported snapshot schema: {schema}")
    return GameSession.from_dict(snapshot["session"])


def dumps_snapshot(snapshot: Dict[str, Any]) -> str:
    return json.dumps(snapshot, ensure_ascii=False, sort_keys=True)


def loads_snapshot(s: str) -> Dict[str, Any]:
    return json.loads(s)
