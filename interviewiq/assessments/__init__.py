"""
Assessment modules for InterviewIQ.
"""
