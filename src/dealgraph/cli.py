"""
Command-line interface for dealgraph.
"""

import json
from pathlib import Path
from typing import Optional

import click

from dealgraph.config import get_settings
from dealgraph.errors import DealGraphError
from dealgraph.logging import configure_logging
from dealgraph.models.graph import KnowledgeGraph

corpus_argument = click.argument("corpus", type=click.Path(exists=True, dir_okay=False))
org_option = click.option("--org", "organization_id", default=None, help="Owning organization id")


def _build_graph(corpus: str, organization_id: Optional[str]) -> KnowledgeGraph:
    from dealgraph.pipeline.orchestrator import build_knowledge_graph
    from dealgraph.services.corpus_loader import load_corpus

    settings = get_settings()
    try:
        deals = load_corpus(Path(corpus))
        return build_knowledge_graph(
            organization_id or settings.default_organization_id, deals, settings=settings
        )
    except DealGraphError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_logs: bool) -> None:
    """dealgraph: Knowledge Graph Builder for Historical Deals."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    configure_logging(
        json_output=json_logs or None,
        log_level="DEBUG" if debug else None,
    )


# =========================================================================
# Build Commands
# =========================================================================


@cli.command()
@corpus_argument
@org_option
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write graph JSON here")
def build(corpus: str, organization_id: Optional[str], output: Optional[str]) -> None:
    """Build a knowledge graph from a deal corpus."""
    graph = _build_graph(corpus, organization_id)

    click.echo(f"Graph: {graph.id}")
    click.echo(f"Nodes: {graph.metadata.node_count}")
    click.echo(f"Edges: {graph.metadata.edge_count}")
    click.echo(f"Clusters: {len(graph.metadata.clusters)}")

    if output:
        Path(output).write_text(graph.model_dump_json(indent=2), encoding="utf-8")
        click.echo(f"\nGraph written to: {output}")


@cli.command()
@corpus_argument
@org_option
def stats(corpus: str, organization_id: Optional[str]) -> None:
    """Show knowledge graph statistics."""
    graph = _build_graph(corpus, organization_id)
    statistics = graph.metadata.statistics

    click.echo("\n=== Knowledge Graph Statistics ===\n")
    click.echo(f"Nodes: {graph.metadata.node_count}")
    click.echo(f"Edges: {graph.metadata.edge_count}")
    click.echo(f"Average Degree: {statistics.avg_degree:.3f}")
    click.echo(f"Density: {statistics.density:.4f}")
    click.echo(f"Clustering Coefficient: {statistics.clustering_coefficient:.3f}")
    click.echo(f"Average Path Length: {statistics.avg_path_length:.3f}")

    if statistics.top_central_nodes:
        click.echo("\nTop Central Nodes:")
        for central in statistics.top_central_nodes:
            click.echo(f"  [{central.score:.3f}] {central.node_id}")

    if graph.metadata.clusters:
        click.echo("\nClusters:")
        for cluster in graph.metadata.clusters:
            click.echo(f"  {cluster.label}: {cluster.size}")


# =========================================================================
# Query Commands
# =========================================================================


@cli.command()
@corpus_argument
@click.argument("deal_id", type=str)
@click.option("--limit", default=None, type=int, help="Maximum results")
@org_option
def similar(corpus: str, deal_id: str, limit: Optional[int], organization_id: Optional[str]) -> None:
    """List deals similar to DEAL_ID."""
    from dealgraph.services.query_service import GraphQueryService

    graph = _build_graph(corpus, organization_id)
    limit = limit if limit is not None else get_settings().default_similar_limit
    results = GraphQueryService(graph).find_similar_deals(deal_id, limit=limit)

    click.echo(f"\n=== Deals similar to '{deal_id}' ===\n")
    if not results:
        click.echo("No similar deals found.")
        return

    for result in results:
        click.echo(f"  [{result.similarity:.3f}] {result.deal_id}")


@cli.command()
@corpus_argument
@click.argument("organization_id_arg", metavar="ORG_ID", type=str)
@org_option
def counterparty(corpus: str, organization_id_arg: str, organization_id: Optional[str]) -> None:
    """Show what the graph knows about a counterparty organization."""
    from dealgraph.services.query_service import GraphQueryService

    graph = _build_graph(corpus, organization_id)
    insights = GraphQueryService(graph).get_counterparty_insights(organization_id_arg)

    if insights is None:
        raise click.ClickException(f"Counterparty not found: {organization_id_arg}")

    props = insights.counterparty.properties
    click.echo(f"\n=== Counterparty: {props.organization_name} ===\n")
    click.echo(f"ID: {insights.counterparty.id}")
    click.echo(f"Total Deals: {props.total_deals}")
    if props.avg_closing_time is not None:
        click.echo(f"Average Closing Time: {props.avg_closing_time:.1f} days")

    if insights.relationships:
        click.echo("\nNegotiated With:")
        for rel in insights.relationships:
            click.echo(
                f"  {rel.organization_id}: {rel.stats.deal_count} deal(s), "
                f"success rate {rel.stats.success_rate:.0%}"
            )


@cli.command()
@corpus_argument
@click.argument("node_id", type=str)
@click.option("--depth", default=None, type=click.IntRange(min=0), help="Traversal depth")
@org_option
def related(corpus: str, node_id: str, depth: Optional[int], organization_id: Optional[str]) -> None:
    """Show the neighbourhood of NODE_ID as JSON."""
    from dealgraph.services.query_service import GraphQueryService

    graph = _build_graph(corpus, organization_id)
    depth = depth if depth is not None else get_settings().default_related_depth
    result = GraphQueryService(graph).get_related_nodes(node_id, depth=depth)

    click.echo(json.dumps(result.to_dict(), indent=2))


# =========================================================================
# Config Commands
# =========================================================================


@cli.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    click.echo("\n=== dealgraph Configuration ===\n")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Log Level: {settings.log_level}")
    click.echo(f"\nSimilarity Workers: {settings.similarity_workers}")
    click.echo(f"Similarity Batch Size: {settings.similarity_batch_size}")
    click.echo(f"Parallel Stages: {settings.parallel_stages}")
    click.echo(f"Path Length Sample Size: {settings.path_length_sample_size}")
    click.echo(f"\nNode Types: {len(settings.node_types)}")
    click.echo(f"Edge Types: {len(settings.edge_types)}")


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
