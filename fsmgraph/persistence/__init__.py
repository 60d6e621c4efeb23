"""
Persistence package: canonical machine JSON and session documents.
"""

from .serializer import SESSION_VERSION, ImportedSession, export_session, graph_to_json, import_session

__all__ = ["SESSION_VERSION", "ImportedSession", "export_session", "graph_to_json", "import_session"]
