"""
tail_reader.py - 증분 파일 읽기

커서(curr_pos) 규칙:
  curr_pos < 0  : 파일 끝에서 |curr_pos| 바이트 앞부터 (재접속 시 꼬리만)
  curr_pos == 0 : 첫 요청. 파일 경로 헤더 한 줄을 앞에 붙임
  curr_pos > 0  : 파일 시작 기준 절대 오프셋부터
                  파일 크기보다 크면 (잘림/로테이트) 빈 출력 + 커서를 파일 끝으로

응답의 new_curr_pos 는 항상 절대 오프셋이므로 클라이언트는 그대로 되돌려 보내면 된다.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, asdict
from typing import Optional

from file_registry import TailTarget

logger = logging.getLogger("tail.reader")


@dataclass
class TailResult:
    new_curr_pos: int
    interval: int               # 클라이언트 폴링 주기 (ms)
    output: str
    available: bool = True

    @classmethod
    def unavailable(cls, curr_pos: int, interval: int) -> "TailResult":
        """파일이 없을 때: 빈 출력 + 커서 유지 (클라이언트는 계속 폴링)"""
        return cls(new_curr_pos=curr_pos, interval=interval, output="", available=False)

    def to_dict(self) -> dict:
        return asdict(self)


def parse_curr_pos(value: Optional[str]) -> int:
    """요청 파라미터 → 커서. 없으면 0, 정수가 아니면 ValueError."""
    if value is None or str(value).strip() == "":
        return 0
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"curr_pos 는 정수여야 합니다: {value!r}") from None


def tail_file(target: TailTarget, curr_pos: int, interval: int) -> TailResult:
    """
    curr_pos 이후 추가된 내용을 읽어 TailResult 반환.

    한 번의 호출은 현재 파일 끝까지만 읽고 즉시 반환한다 (스트리밍 아님).
    curr_pos < 1 이면 음수 커서여도 파일 경로 헤더 한 줄이 앞에 붙는다.
    """
    path = target.path
    if not path or not os.path.isfile(path):
        logger.warning("tail 대상 파일 없음: %s (id=%s)", path, target.file_id[:8])
        return TailResult.unavailable(curr_pos, interval)

    header = f"{path}\n" if curr_pos < 1 else ""

    try:
        f = open(path, "rb")
    except OSError as e:
        logger.warning("tail 대상 파일 열기 실패: %s (%s)", path, e)
        return TailResult.unavailable(curr_pos, interval)

    with f:
        size = f.seek(0, os.SEEK_END)

        if curr_pos < 0:
            start = max(size + curr_pos, 0)
        elif curr_pos > size:
            # 파일이 잘리거나 로테이트됨 → 현재 끝으로 맞춤
            logger.info("파일 축소 감지 %s (%d > %d) - 커서를 파일 끝으로 이동",
                        path, curr_pos, size)
            start = size
        else:
            start = curr_pos

        f.seek(start, os.SEEK_SET)
        data = f.read()
        file_end = f.tell()

    logger.debug("%s 읽기 | %d → %d (%d bytes)", path, start, file_end, len(data))
    return TailResult(
        new_curr_pos=file_end,
        interval=interval,
        output=header + data.decode("utf-8", errors="replace"),
    )
