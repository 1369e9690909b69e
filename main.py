"""
main.py - 로그 tail 서버 실행

실행:
  python main.py                       # .env 설정 따름
  TAIL_PORT=8080 python main.py
  TAIL_FILES='{"app": {"heading": "App Log", "file": "/var/log/app.log"}}' python main.py
"""
from __future__ import annotations

import os
import sys

from config import CONFIG, setup_logging
from server import create_app

logger = setup_logging(CONFIG)


def main() -> None:
    logger.info("=" * 60)
    logger.info("로그 tail 서버 시작")
    logger.info("폴링 주기: %dms | 사용자 정의 파일: %s | 기본 파일: %s",
                CONFIG.UPDATE_INTERVAL,
                "허용" if CONFIG.ALLOW_USER_DEFINED else "차단",
                "사용" if CONFIG.INCLUDE_DEFAULTS else "무시")
    try:
        CONFIG.validate()
    except ValueError as e:
        logger.critical("설정 오류: %s", e)
        sys.exit(1)

    for file_id, entry in CONFIG.FILES.items():
        logger.info("  %-12s %s", file_id, entry.get("file") or "(경로 없음)")
    logger.info("=" * 60)

    app = create_app(CONFIG)
    host = os.getenv("TAIL_HOST", "127.0.0.1")
    port = int(os.getenv("TAIL_PORT", "5000"))
    logger.info("http://%s:%d%s?id=<id> 로 접속", host, port, CONFIG.DISPLAY_URL)
    app.run(host=host, port=port, threaded=True, debug=False)


if __name__ == "__main__":
    main()
