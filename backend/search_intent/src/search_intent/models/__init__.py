# This file makes the 'models' directory a Python sub-package
# within the 'search_intent' service.
#
# It contains the Pydantic models for the keyword data file,
# REST request/response envelopes, session state and the
# search box WebSocket messages.
