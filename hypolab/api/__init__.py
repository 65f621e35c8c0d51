"""FastAPI HTTP surface for the workflow engine."""
