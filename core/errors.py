"""
规则引擎异常

- IllegalActionError: 非当前玩家行动、阶段不对、无牌可抽
- InvalidSelectionError: 配对无效、手牌不足以宣告

弃牌堆为空不是异常，由调用方根据返回值处理
"""


class GameError(ValueError):
    """规则引擎异常基类，动作未生效，状态不变"""


class IllegalActionError(GameError):
    """当前不允许执行该动作"""


class InvalidSelectionError(GameError):
    """选择的牌不满足规则"""
