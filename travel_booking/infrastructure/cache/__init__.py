"""Cache de resultados de búsqueda."""
