"""
Interview Pipeline Package

Architecture:
- interview_pipeline.py: Document ingestion + opening turn
- interview_agent.py: Turn-by-turn interview orchestration against the LLM
- session_store.py: Per-session resume / job-description storage
- report_synthesizer.py: End-of-interview report
- llm_parser.py: Response parsing
"""

from .interview_agent import InterviewAgent
from .interview_pipeline import InterviewPipeline
from .llm_parser import parse_llm_response
from .report_synthesizer import ReportSynthesizer
from .session_store import SessionStore

__all__ = [
    'InterviewAgent',
    'InterviewPipeline',
    'ReportSynthesizer',
    'SessionStore',
    'parse_llm_response',
]
