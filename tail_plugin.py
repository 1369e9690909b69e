"""
tail_plugin.py - Flask 에서 파일 tail

설정된 경로로 라우트 생성:
  GET  /tail/display?id=<id>&curr_pos=<n>   tail 화면 (템플릿)
  GET  /tail/read/<id>?curr_pos=<n>         증분 내용 JSON
  POST /tail/define                          사용자 정의 파일 등록 (ALLOW_USER_DEFINED)

사용:
  app = Flask(__name__)
  app.secret_key = "..."      # 사용자 정의 파일은 세션 필요
  tail = Tail(app)
"""
from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, Flask, jsonify, render_template, request, session, url_for

from config import CONFIG, TailConfig
from file_registry import FileRegistry, RegisterResult, TargetMisconfigured, TargetNotFound
from tail_reader import parse_curr_pos, tail_file
from tail_templates import TEMPLATE_DIR

logger = logging.getLogger("tail.plugin")


class Tail:
    def __init__(self, app: Optional[Flask] = None,
                 config: Optional[TailConfig] = None) -> None:
        self.config = config
        self.registry: Optional[FileRegistry] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        if self.config is None:
            if "TAIL" in app.config:
                self.config = TailConfig.from_mapping(app.config["TAIL"])
            else:
                self.config = CONFIG
        self.config.validate()
        self.registry = FileRegistry(self.config)

        if self.config.ALLOW_USER_DEFINED and not app.secret_key:
            logger.warning("사용자 정의 파일 허용 상태지만 SECRET_KEY 가 없어 세션을 쓸 수 없습니다")

        app.register_blueprint(self._make_blueprint())
        app.extensions["tail"] = self
        logger.info("Tail 라우트 등록 | display=%s data=%s define=%s",
                    self.config.DISPLAY_URL, self.config.DATA_URL,
                    self.config.DEFINE_URL if self.config.ALLOW_USER_DEFINED else "-")

    # ── 라우트 ────────────────────────────────────────────────────────────────

    def _make_blueprint(self) -> Blueprint:
        cfg = self.config
        bp = Blueprint("tail", __name__, template_folder=TEMPLATE_DIR)

        bp.add_url_rule(cfg.DISPLAY_URL, "display", self.display_tail,
                        methods=[cfg.DISPLAY_METHOD.upper()])
        bp.add_url_rule(cfg.DATA_URL, "read", self.read_tail,
                        methods=[cfg.DATA_METHOD.upper()])
        bp.add_url_rule(f"{cfg.DATA_URL.rstrip('/')}/<file_id>", "read", self.read_tail,
                        methods=[cfg.DATA_METHOD.upper()])
        if cfg.ALLOW_USER_DEFINED:
            bp.add_url_rule(cfg.DEFINE_URL, "define", self.define_tail,
                            methods=[cfg.DEFINE_METHOD.upper()])

        bp.register_error_handler(TargetMisconfigured, self._on_misconfigured)
        bp.register_error_handler(TargetNotFound, self._on_not_found)
        return bp

    def display_tail(self):
        file_id = request.values.get("id", "")
        try:
            curr_pos = parse_curr_pos(request.values.get("curr_pos"))
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400

        target = self.registry.resolve(file_id, session)
        return render_template(
            self.config.DISPLAY_TEMPLATE,
            id=target.file_id,
            curr_pos=curr_pos,
            title=target.heading,
            layout=self.config.DISPLAY_LAYOUT,
            data_url=url_for("tail.read", file_id=target.file_id),
            interval=self.config.UPDATE_INTERVAL,
        )

    def read_tail(self, file_id: Optional[str] = None):
        file_id = file_id or request.values.get("id", "")
        try:
            curr_pos = parse_curr_pos(request.values.get("curr_pos"))
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400

        target = self.registry.resolve(file_id, session)
        result = tail_file(target, curr_pos, self.config.UPDATE_INTERVAL)
        return jsonify(result.to_dict())

    def define_tail(self):
        """
        body: { file: '/tmp/job_123.log', heading: 'Import Job' }
        """
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = request.form
        result = self.define_file_to_tail(body.get("file"), body.get("heading") or "")
        if not result.success:
            return jsonify({"ok": False, "error": result.error}), 400
        return jsonify({"ok": True, "id": result.file_id})

    # ── 키워드 ────────────────────────────────────────────────────────────────

    def define_file_to_tail(self, file: Optional[str], heading: str = "") -> RegisterResult:
        """현재 사용자 세션에 tail 대상 등록. 뷰 함수 안에서 호출."""
        return self.registry.register(session, file, heading)

    # ── 오류 처리 ─────────────────────────────────────────────────────────────

    def _on_not_found(self, e: TargetNotFound):
        logger.info("tail 대상 없음: %s", e)
        return jsonify({"ok": False, "error": str(e)}), 404

    def _on_misconfigured(self, e: TargetMisconfigured):
        logger.error("설정 오류: %s", e)
        return jsonify({"ok": False, "error": str(e)}), 500
