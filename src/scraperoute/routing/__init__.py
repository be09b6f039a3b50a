"""Routing — template compiler, matcher adapter, and the dispatching router.

Routes are declared through a chained builder at setup time and evaluated
in full (not first-match) for every URL routed.
"""
