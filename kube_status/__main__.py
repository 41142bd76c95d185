"""Run the kube-status command line tool with `python -m kube_status`."""

from .tool.kube_status import main

main()
