"""Adaptadores HTTP hacia servicios externos."""
