# This file makes the 'service' directory a Python sub-package
# within the 'search_intent' service.
#
# It contains the search box logic: query classification,
# suggestion generation, debouncing, the selection state machine
# and the WebSocket endpoint that drives it.
