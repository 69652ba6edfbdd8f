"""Application layer: FastAPI app, middleware and routes."""
