# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - config/: Environment and settings management
# - persistence/: In-memory and MongoDB repositories
#
# This layer can be replaced entirely without affecting domain/application layers.
