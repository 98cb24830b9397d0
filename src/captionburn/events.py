"""
Event names shared by the server's event stream and the client that reads it.
"""

PROGRESS_EVENT = "processing_progress"
COMPLETE_EVENT = "processing_complete"
ERROR_EVENT = "processing_error"
