"""
config.py - 전역 설정 및 로깅
설정값은 .env 파일(환경변수) 또는 호스트 앱의 설정 dict에서 로드
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

ALLOWED_METHODS = frozenset({"get", "post"})


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_files() -> dict:
    """TAIL_FILES='{"id1": {"heading": "Access Log", "file": "/var/log/access_log"}}'"""
    raw = os.getenv("TAIL_FILES", "").strip()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"TAIL_FILES 가 올바른 JSON 이 아닙니다: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("TAIL_FILES 는 JSON 객체여야 합니다")
    return data


@dataclass(frozen=True)
class TailConfig:
    # ── 폴링 ──────────────────────────────────────────────────
    UPDATE_INTERVAL: int = field(
        default_factory=lambda: int(os.getenv("TAIL_UPDATE_INTERVAL", "3000"))
    )                                       # 클라이언트 폴링 주기 (ms)

    # ── 사용자 정의 파일 ───────────────────────────────────────
    TMPDIR: str = field(default_factory=lambda: os.getenv("TAIL_TMPDIR", "/tmp"))
    ALLOW_USER_DEFINED: bool = field(
        default_factory=lambda: _env_bool("TAIL_ALLOW_USER_DEFINED", "false")
    )
    INCLUDE_DEFAULTS: bool = field(
        default_factory=lambda: _env_bool("TAIL_INCLUDE_DEFAULTS", "true")
    )

    # ── 라우트 ────────────────────────────────────────────────
    DISPLAY_METHOD: str = "get"
    DISPLAY_URL: str = "/tail/display"
    DISPLAY_TEMPLATE: str = "tail.html"
    DISPLAY_LAYOUT: str = ""
    DATA_METHOD: str = "get"
    DATA_URL: str = "/tail/read"
    DEFINE_METHOD: str = "post"
    DEFINE_URL: str = "/tail/define"

    # ── 정적 파일 목록 (id -> {heading, file}) ─────────────────
    FILES: Mapping[str, Any] = field(default_factory=_env_files)

    # ── 세션 / 로그 ───────────────────────────────────────────
    SECRET_KEY: str = field(default_factory=lambda: os.getenv("TAIL_SECRET_KEY", ""))
    LOG_DIR: str = field(default_factory=lambda: os.getenv("TAIL_LOG_DIR", ""))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("TAIL_LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        # 기동 후 변경 불가
        object.__setattr__(self, "FILES", MappingProxyType(dict(self.FILES)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TailConfig":
        """
        플러그인 설정 dict → TailConfig.

        예시 (app.config["TAIL"]):
          {
            "update_interval": 3000,
            "tmpdir": "/tmp",
            "no_user_defined": 1,
            "no_defaults": 0,
            "display": {"method": "get", "url": "/tail/display",
                        "template": "tail.html", "layout": ""},
            "data": {"method": "get", "url": "/tail/read"},
            "files": {"id1": {"heading": "Server Access Log",
                              "file": "/var/logs/access_log"}},
          }
        지정하지 않은 키는 환경변수/기본값을 따른다.
        """
        kwargs: dict[str, Any] = {}
        if "update_interval" in data:
            kwargs["UPDATE_INTERVAL"] = int(data["update_interval"])
        if "tmpdir" in data:
            kwargs["TMPDIR"] = str(data["tmpdir"])
        if "no_user_defined" in data:
            kwargs["ALLOW_USER_DEFINED"] = not bool(data["no_user_defined"])
        if "no_defaults" in data:
            kwargs["INCLUDE_DEFAULTS"] = not bool(data["no_defaults"])

        for section, keys in (("display", ("method", "url", "template", "layout")),
                              ("data", ("method", "url")),
                              ("define", ("method", "url"))):
            sub = data.get(section) or {}
            for key in keys:
                if key in sub:
                    kwargs[f"{section.upper()}_{key.upper()}"] = str(sub[key])

        if "files" in data:
            kwargs["FILES"] = data["files"] or {}
        for key in ("secret_key", "log_dir", "log_level"):
            if key in data:
                kwargs[key.upper()] = str(data[key])
        return cls(**kwargs)

    @property
    def log_level(self) -> int:
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO

    def validate(self) -> None:
        if self.UPDATE_INTERVAL <= 0:
            raise ValueError("UPDATE_INTERVAL 은 0보다 커야 합니다")
        for name in ("DISPLAY", "DATA", "DEFINE"):
            method = getattr(self, f"{name}_METHOD").lower()
            url = getattr(self, f"{name}_URL")
            if method not in ALLOWED_METHODS:
                raise ValueError(f"{name}_METHOD 는 get/post 중 하나여야 합니다: {method}")
            if not url.startswith("/"):
                raise ValueError(f"{name}_URL 은 '/' 로 시작해야 합니다: {url}")
        for file_id, entry in self.FILES.items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"FILES[{file_id!r}] 는 {{heading, file}} 형태여야 합니다")


def setup_logging(config: Optional[TailConfig] = None) -> logging.Logger:
    config = config or CONFIG
    logger = logging.getLogger("tail")
    if logger.handlers:
        return logger
    logger.setLevel(config.log_level)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)-8s] %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if config.LOG_DIR:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        fh = logging.handlers.TimedRotatingFileHandler(
            filename=os.path.join(config.LOG_DIR, "tail.log"),
            when="midnight",
            backupCount=30,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


CONFIG = TailConfig()
