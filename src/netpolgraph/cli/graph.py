"""CLI command: netpolgraph graph [FILES...] — compile and show the policy graph."""

from __future__ import annotations

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from netpolgraph.config import NetpolGraphConfig
from netpolgraph.graph.compiler import Graph, compile_graph
from netpolgraph.graph.filters import filter_by_direction
from netpolgraph.graph.formatters import ports_text
from netpolgraph.graph.identity import NodeType
from netpolgraph.policy.loader import PolicyParseError, load_policies

console = Console(stderr=True)

_TYPE_COLORS = {
    NodeType.POD: "blue",
    NodeType.NAMESPACE: "green",
    NodeType.IP_BLOCK: "yellow",
    NodeType.COMBINED: "magenta",
    NodeType.ANYWHERE: "white",
}


@click.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--no-dedup",
    is_flag=True,
    help="Keep one node per policy instead of merging identical selectors.",
)
@click.option(
    "--direction",
    "-d",
    type=click.Choice(["all", "ingress", "egress"]),
    default="all",
    help="Only show links flowing in this direction.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the graph as JSON.")
@click.pass_context
def graph(
    ctx: click.Context,
    files: tuple[str, ...],
    no_dedup: bool,
    direction: str,
    as_json: bool,
) -> None:
    """Compile NetworkPolicy documents into a traffic graph."""
    config = NetpolGraphConfig.load()
    paths = list(files) or config.policy_files()
    if not paths:
        console.print("[red]No policy files given.[/red]")
        sys.exit(1)

    policies = []
    for path in paths:
        try:
            policies.extend(load_policies(path))
        except PolicyParseError as e:
            console.print(f"[red]{path}: {e}[/red]")
            sys.exit(1)

    deduplicate = config.deduplicate and not no_dedup
    result = filter_by_direction(compile_graph(policies, deduplicate), direction)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.nodes:
        console.print("No policies to show.")
        return

    _print_graph(result)


def _print_graph(result: Graph) -> None:
    labels = {n.id: n.label for n in result.nodes}

    nodes = Table(title="Nodes", show_lines=False)
    nodes.add_column("Type", style="bold", width=10)
    nodes.add_column("Label", style="cyan")
    nodes.add_column("Policies")
    for node in result.nodes:
        color = _TYPE_COLORS.get(node.type, "white")
        nodes.add_row(
            f"[{color}]{node.type.value}[/{color}]",
            node.label,
            ", ".join(node.policies),
        )

    links = Table(title="Links", show_lines=False)
    links.add_column("Direction", width=9)
    links.add_column("From", style="cyan")
    links.add_column("To", style="cyan")
    links.add_column("Ports")
    links.add_column("Policy")
    for link in result.links:
        ports = link.port_details if link.detailed_ports else ports_text(link.ports)
        policy = f"[magenta]{link.policy}[/magenta]" if link.cross_policy else link.policy
        links.add_row(
            link.direction.value,
            labels.get(link.source, link.source),
            labels.get(link.target, link.target),
            ports or "",
            policy,
        )

    console.print(nodes)
    console.print(links)
    console.print(
        f"\n{len(result.nodes)} nodes, {len(result.links)} links "
        f"({sum(1 for link in result.links if link.cross_policy)} inferred)"
    )
