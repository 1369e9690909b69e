"""
로그 tail 샘플 서버
- Tail 플러그인을 붙인 Flask 앱
- 브라우저 페이지는 /tail/display?id=<id> 로 접속, interval 마다 /tail/read 폴링
"""
import logging
from datetime import datetime
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

from config import CONFIG, TailConfig, setup_logging
from tail_plugin import Tail

load_dotenv()

log = logging.getLogger("tail.server")


def create_app(config: Optional[TailConfig] = None) -> Flask:
    config = config or CONFIG
    setup_logging(config)

    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY or None
    CORS(app)  # 다른 포트의 프론트에서 폴링 허용

    tail = Tail(app, config)

    # ── 상태 확인 ─────────────────────────────────
    @app.route('/api/status')
    def status():
        return jsonify({
            'ok': True,
            'files': len(tail.registry.static_targets()),
            'user_defined': config.ALLOW_USER_DEFINED,
            'interval': config.UPDATE_INTERVAL,
            'time': datetime.now().isoformat(),
        })

    log.info('서버 준비 완료 (정적 파일 %d개)', len(tail.registry.static_targets()))
    return app
