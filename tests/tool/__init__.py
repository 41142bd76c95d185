"""Tests for the kube-status command line tool."""
