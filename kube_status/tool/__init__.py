"""Command line tool for kube-status."""
