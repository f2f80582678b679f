"""Server-rendered pages, form login and the security pipeline."""
