"""엔진이 보고하는 에러 코드와 SSL 에러 모델"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import FrozenSet, List


class ErrorCode(IntEnum):
    """네비게이션 에러 코드"""
    UNKNOWN = -1
    HOST_LOOKUP = -2
    UNSUPPORTED_AUTH_SCHEME = -3
    AUTHENTICATION = -4
    PROXY_AUTHENTICATION = -5
    CONNECT = -6
    IO = -7
    TIMEOUT = -8
    REDIRECT_LOOP = -9
    UNSUPPORTED_SCHEME = -10
    FAILED_SSL_HANDSHAKE = -11
    BAD_URL = -12
    FILE = -13
    FILE_NOT_FOUND = -14
    TOO_MANY_REQUESTS = -15


class SslProblem(IntEnum):
    NOT_YET_VALID = 0
    EXPIRED = 1
    ID_MISMATCH = 2
    UNTRUSTED = 3


# 다이얼로그에 표시되는 순서
_WARNING_ORDER = (
    (SslProblem.UNTRUSTED, "ssl_untrusted"),
    (SslProblem.ID_MISMATCH, "ssl_mismatch"),
    (SslProblem.EXPIRED, "ssl_expired"),
    (SslProblem.NOT_YET_VALID, "ssl_not_yet_valid"),
)


@dataclass(frozen=True)
class SslError:
    """인증서 문제 집합"""
    url: str
    problems: FrozenSet[SslProblem] = field(default_factory=frozenset)

    def has_error(self, problem: SslProblem) -> bool:
        return problem in self.problems

    def warnings(self) -> List[str]:
        """경고 문구 키 목록 (표시 순서대로)"""
        return [key for problem, key in _WARNING_ORDER if self.has_error(problem)]


class BookmarksError(Exception):
    """북마크/히스토리 스토어 접근 실패"""
