"""Human-readable text for ports."""

from __future__ import annotations

from netpolgraph.policy.models import ALL_PORTS, PortSpec



def port_text(port: PortSpec) -> str:
    if port.port is None:
        # Protocol-only entries still restrict traffic
        return f"*/{port.protocol}" if port.protocol else "*"
    text = str(port.port)
    if port.end_port is not None:
        text += f"-{port.end_port}"
    if port.protocol:
        text += f"/{port.protocol}"
    return text


def ports_text(ports) -> str:
    """Describe a rule's ports, e.g. ``"80/TCP, 8000-8080/TCP"``."""
    if not ports or ports == ALL_PORTS:
        return "All ports"
    return ", ".join(port_text(p) for p in ports)
