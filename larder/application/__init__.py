"""Application layer: DTOs, collaborator interfaces, services, handlers."""
