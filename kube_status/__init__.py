"""
kube-status watches kubernetes objects and reports how they change.

The library turns watch streams from a cluster into structural diffs of
successive versions of an object, or into a live judgement of the health of
a Service or Deployment rollout.
"""

__all__ = [
    "changes",
    "config",
    "diff",
    "exceptions",
    "status",
    "trace",
    "watch",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
