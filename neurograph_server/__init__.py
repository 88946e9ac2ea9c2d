"""NeuroGraph backend - FastAPI service and CLI around one canvas session."""
