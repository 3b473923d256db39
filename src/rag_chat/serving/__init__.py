"""
Serving: chat orchestration and the FastAPI application.

Run locally with ``uvicorn rag_chat.serving.app:app``.
"""
