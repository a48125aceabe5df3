"""kube-medic: watch Kubernetes logs, classify errors, and remediate them."""

__version__ = "0.1.0"
