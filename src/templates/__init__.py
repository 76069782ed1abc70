"""
Templates layer: 리포트 템플릿.

역할:
- 템플릿 로드 + model 타입 바인딩 (report_template.py)
- 필드 검증 → 렌더 → 형식 변환
"""

from .report_template import RENDER_LOCK, DocReportTemplate

__all__ = [
    "DocReportTemplate",
    "RENDER_LOCK",
]
