"""pgschemadoc - document a Postgres schema as PlantUML, JSON and Markdown."""

__version__ = "0.1.0"
