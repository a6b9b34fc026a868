"""Editors driven by the session loop.

Each manager exposes async handlers that perform one menu operation and
return the next ``SessionEvent``.  Recoverable failures are reported and
turned into a return to the menu; ``SessionExit`` is left to propagate.
"""
