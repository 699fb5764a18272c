"""Procesamiento asíncrono de eventos."""
