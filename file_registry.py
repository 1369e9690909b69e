"""
file_registry.py - tail 대상 파일 레지스트리

- 정적 파일: 설정(FILES)에 정의된 id -> {heading, file}
- 동적 파일: 사용자가 세션 단위로 등록 (추측 불가능한 랜덤 id 발급)
- 조회 순서: ALLOW_USER_DEFINED 이면 세션 → 정적, 아니면 정적만
"""
from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from config import TailConfig

logger = logging.getLogger("tail.registry")

SESSION_KEY_PREFIX = "tail."
FILE_ID_BYTES = 32          # 256 bit


class TargetNotFound(LookupError):
    """id 에 해당하는 tail 대상이 없음"""


class TargetMisconfigured(TargetNotFound):
    """정적 설정에 id 는 있으나 file 경로가 비어 있음"""


@dataclass(frozen=True)
class TailTarget:
    file_id: str
    path: str
    heading: str = ""

    def to_session(self) -> dict:
        return {"file": self.path, "heading": self.heading}

    @classmethod
    def from_entry(cls, file_id: str, entry: dict) -> "TailTarget":
        return cls(file_id=file_id,
                   path=str(entry.get("file") or ""),
                   heading=str(entry.get("heading") or ""))


@dataclass
class RegisterResult:
    success: bool
    file_id: Optional[str] = None
    error: Optional[str] = None

    def __str__(self) -> str:
        return f"Register OK id={self.file_id}" if self.success else f"Register FAIL({self.error})"


class FileRegistry:
    """
    tail 대상 레지스트리.

    세션은 MutableMapping 이면 무엇이든 가능 (flask.session, 테스트에서는 dict).
    동적 대상은 세션 안에만 저장되므로 세션 간 공유/경합이 없다.
    """

    def __init__(self, config: TailConfig) -> None:
        self._config = config

    # ── 조회 ──────────────────────────────────────────────────────────────────

    def static_targets(self) -> dict[str, TailTarget]:
        if not self._config.INCLUDE_DEFAULTS:
            return {}
        return {fid: TailTarget.from_entry(fid, entry)
                for fid, entry in self._config.FILES.items()}

    def resolve(self, file_id: str,
                session: Optional[MutableMapping] = None) -> TailTarget:
        """
        id → TailTarget.

        Raises:
            TargetNotFound: 어디에도 없는 id
            TargetMisconfigured: 정적 설정의 file 경로가 비어 있음
        """
        if not file_id:
            raise TargetNotFound("id 가 지정되지 않았습니다")

        if self._config.ALLOW_USER_DEFINED and session is not None:
            entry = session.get(SESSION_KEY_PREFIX + file_id)
            if entry:
                return TailTarget.from_entry(file_id, entry)

        if not self._config.INCLUDE_DEFAULTS or file_id not in self._config.FILES:
            raise TargetNotFound(f"알 수 없는 id: {file_id}")

        target = TailTarget.from_entry(file_id, self._config.FILES[file_id])
        if not target.path:
            raise TargetMisconfigured(
                f"The specified id: {file_id} is not properly defined in your configuration."
            )
        return target

    # ── 동적 등록 ─────────────────────────────────────────────────────────────

    def register(self, session: MutableMapping, path: Any,
                 heading: Any = "") -> RegisterResult:
        """
        사용자 정의 파일 등록.

        상대 경로는 TMPDIR 기준. 실패 시 세션은 변경하지 않는다.
        """
        if not isinstance(path, str) or not path:
            return RegisterResult(False, error="No filename passed.")

        full_path = path if os.path.isabs(path) else os.path.join(self._config.TMPDIR, path)
        if not os.path.isfile(full_path):
            logger.info("등록 거부: 파일 없음 %s", full_path)
            return RegisterResult(False, error="File does not exist.")

        file_id = secrets.token_urlsafe(FILE_ID_BYTES)
        target = TailTarget(file_id, os.path.abspath(full_path), str(heading or ""))
        session[SESSION_KEY_PREFIX + file_id] = target.to_session()
        logger.info("사용자 정의 파일 등록: %s -> %s", file_id[:8], target.path)
        return RegisterResult(True, file_id=file_id)
