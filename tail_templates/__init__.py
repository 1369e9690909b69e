"""
tail_templates - tail 화면 샘플 템플릿 (tail.html, tail_base.html)

설치 시 패키지 데이터로 함께 배포된다.
"""
import os

TEMPLATE_DIR = os.path.dirname(os.path.abspath(__file__))
