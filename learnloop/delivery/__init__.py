"""
Delivery layer: persistence, timing and the application context.

Import submodules directly (``learnloop.delivery.companion``); the state
store is used by lower layers, so this package re-exports nothing.
"""
