"""탭 코어 전역 설정 상수"""
from .errors import ErrorCode

# 한 번에 열 수 있는 최대 탭 수
MAX_TABS = 8

# 스크립트로 새 창을 열 때 사용하는 빈 URL
EMPTY_URL = "about:blank"

# 사용자에게 다이얼로그로 보여주지 않는 네트워크 에러 (로그만 남김)
SUPPRESSED_ERROR_CODES = frozenset({
    ErrorCode.HOST_LOOKUP,
    ErrorCode.CONNECT,
    ErrorCode.BAD_URL,
    ErrorCode.UNSUPPORTED_SCHEME,
    ErrorCode.FILE,
})

# 에러 다이얼로그 제목
FILE_ERROR_TITLE = "File error"
NETWORK_ERROR_TITLE = "Network error"

# 스크린샷 파일명: <view hash><suffix>
PICTURE_FILE_SUFFIX = "_pic.save"

# 히스토리 스토어의 LIKE 패턴 최대 길이
SQLITE_MAX_LIKE_PATTERN_LENGTH = 50000

# 백그라운드 I/O 워커 수
IO_MAX_WORKERS = 2

# 스크린샷 파일 워커 수 (1이면 같은 파일의 쓰기/읽기 순서가 보장됨)
PICTURE_IO_MAX_WORKERS = 1

# 트레이서가 보관하는 최대 이벤트 수
TRACE_MAX_EVENTS = 10000
