"""Capa HTTP (FastAPI): routers, esquemas y wiring de dependencias."""
