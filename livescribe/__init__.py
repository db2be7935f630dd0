"""livescribe: live transcription with speaker attribution and an AI assistant backend."""

__version__ = "0.1.0"
