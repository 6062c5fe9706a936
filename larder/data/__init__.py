"""Persistence layer: ORM models, mappers, repositories, unit of work."""
