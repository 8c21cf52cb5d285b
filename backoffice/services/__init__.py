"""Backend client, view components and report generation."""
