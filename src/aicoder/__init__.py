"""
aicoder: a checkpointed, resumable agent loop for autonomous coding runs.
"""

__version__ = "0.1.0"
