"""
引擎异常体系

用户意图引起的校验问题由应用层通过 CommandResult 返回；
这里的异常用于配置错误和内部约定被破坏的情况。
"""


class TarotEngineError(Exception):
    """所有引擎错误的基类"""
    pass


class ConfigurationError(TarotEngineError):
    """静态配置不可用（例如倍率表为空）"""
    pass


class InsufficientBalanceError(TarotEngineError):
    """下注额超过余额时仍提交了押注"""
    pass


class InvalidStateError(TarotEngineError):
    """在不允许该操作的回合状态下执行了操作"""
    pass


class PhaseTransitionError(InvalidStateError):
    """状态机收到非法的阶段转换请求"""
    pass
