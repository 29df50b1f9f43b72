"""
InterviewIQ Assessment Platform

Backend for timed interview assessments: question selection by level and
domain, a per-question countdown, answer scoring, session reports, and
per-user progress tracking, plus an interview-prep assistant.

The application factory lives in ``interviewiq.app``; ``interviewiq.main``
holds the ASGI app for uvicorn.
"""

__version__ = "1.0.0"
