"""netpolgraph — compile Kubernetes NetworkPolicies into a traffic graph."""

__version__ = "0.1.0"
