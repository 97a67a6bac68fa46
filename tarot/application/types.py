"""
应用层类型

返回给调用方的命令与查询结果，普通的拒绝不抛异常。
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Generic, TypeVar
from enum import Enum, auto

T = TypeVar('T')


class ResultStatus(Enum):
    """命令或查询的结果状态"""
    SUCCESS = auto()
    FAILURE = auto()
    VALIDATION_ERROR = auto()
    BUSINESS_RULE_VIOLATION = auto()
    DEFERRED = auto()


@dataclass(frozen=True)
class CommandResult:
    """意图或命令的结果"""
    success: bool
    status: ResultStatus
    message: str = ""
    error_code: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, message: str = "OK", data: Optional[Dict[str, Any]] = None) -> 'CommandResult':
        return cls(
            success=True,
            status=ResultStatus.SUCCESS,
            message=message,
            data=data
        )

    @classmethod
    def deferred_result(cls, message: str = "Queued behind the event in progress") -> 'CommandResult':
        """
        调用到达时另一事件正在处理，已被放入队列

        排队的调用尚未执行，``success`` 只表示已进入队列。
        若执行时被拒绝，拒绝会以 INTENT_REJECTED 事件发布。
        """
        return cls(
            success=True,
            status=ResultStatus.DEFERRED,
            message=message
        )

    @classmethod
    def failure_result(cls, message: str, error_code: Optional[str] = None,
                       status: ResultStatus = ResultStatus.FAILURE) -> 'CommandResult':
        return cls(
            success=False,
            status=status,
            message=message,
            error_code=error_code
        )

    @classmethod
    def validation_error(cls, message: str, error_code: Optional[str] = None) -> 'CommandResult':
        return cls.failure_result(message, error_code, ResultStatus.VALIDATION_ERROR)

    @classmethod
    def business_rule_violation(cls, message: str, error_code: Optional[str] = None) -> 'CommandResult':
        return cls.failure_result(message, error_code, ResultStatus.BUSINESS_RULE_VIOLATION)


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """只读查询的结果"""
    success: bool
    status: ResultStatus
    data: Optional[T] = None
    message: str = ""
    error_code: Optional[str] = None

    @classmethod
    def success_result(cls, data: T, message: str = "OK") -> 'QueryResult[T]':
        return cls(
            success=True,
            status=ResultStatus.SUCCESS,
            data=data,
            message=message
        )

    @classmethod
    def failure_result(cls, message: str, error_code: Optional[str] = None,
                       status: ResultStatus = ResultStatus.FAILURE) -> 'QueryResult[T]':
        return cls(
            success=False,
            status=status,
            message=message,
            error_code=error_code
        )

