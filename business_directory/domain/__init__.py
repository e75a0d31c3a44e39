# Domain Layer
# ============
# Pure business logic, no I/O:
# - models.py:      request shapes and stored records
# - results.py:     repository result variants
# - aggregation.py: review count, truncated average, latest-reviews window
# - errors.py:      domain exceptions with their HTTP status
# - operations.py:  use cases run against a BusinessRepository
