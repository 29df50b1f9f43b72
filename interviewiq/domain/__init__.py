"""
Domain models for InterviewIQ.
"""
