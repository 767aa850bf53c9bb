from mediecho.services.summarizer import summarize_logs, detect_trends
from mediecho.services.encryption import SummaryCipher
from mediecho.services.pdf_renderer import render_brief_pdf
from mediecho.services.brief_storage import BriefStorage
from mediecho.services.brief_service import BriefService

__all__ = [
    'summarize_logs',
    'detect_trends',
    'SummaryCipher',
    'render_brief_pdf',
    'BriefStorage',
    'BriefService',
]
