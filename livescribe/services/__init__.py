"""Services: transcription and AI assistant backend."""
