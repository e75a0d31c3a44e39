# Business Directory - Businesses and Customer Reviews over REST
# ===============================================================
# A small REST service using Layered Architecture:
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI routes (web/)
# - Application:    Use cases and business rules (domain/operations.py)
# - Domain:         Records, results, review aggregation (domain/)
# - Infrastructure: Configuration and storage backends (infrastructure/)
#
# Storage is hidden behind BusinessRepository, so the in-memory and MongoDB
# backends can be swapped without touching request handling.

__version__ = "1.0.0"
