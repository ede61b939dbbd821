# This file makes the 'utils' directory a Python sub-package
# within the 'search_intent' service.
#
# It contains helpers that support the search logic, such as:
# - Loading and validating keywords.json
# - Building destination URLs
# - Session state storage (in-memory or Redis)
