"""Domain layer: job lifecycle, payload wire format and collaborator interfaces."""
