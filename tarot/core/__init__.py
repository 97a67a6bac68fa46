"""
核心模块 - 纯领域逻辑

核心层只依赖其他核心模块，从不依赖应用层或UI层。

Modules:
    multipliers: 倍率表、加权抽取器、赔付表分析
    economy: 下注额/余额管理与交易账本
    state_machine: 回合阶段、阶段处理器与回合状态机
    rules: 结算计算
    events: 领域事件与事件总线
    persistence: {bet, balance} 的尽力存储
"""

__version__ = "1.0.0"
