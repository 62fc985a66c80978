import asyncio
import json
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import typer

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from trafficspec.analyzer import EndpointDiscovery, RoleClassifier, placeholder_encryption
from trafficspec.assembler import SpecAssembler
from trafficspec.config import (
    AnalysisConfig,
    ApiEndpoint,
    EncryptionInfo,
    ExportFormat,
    HttpTransaction,
    SpecValidationResult,
)
from trafficspec.crypto import (
    CANARY_PAYLOAD,
    EncryptionCompatibilityVerifier,
    EncryptionConfig,
    VerificationResult,
    load_private_key,
    validate_encryption_info,
)
from trafficspec.errors import TrafficSpecError
from trafficspec.ingest import TrafficIngestor
from trafficspec.utils import setup_logging

console = Console()
app = typer.Typer(rich_markup_mode="rich")


def print_banner():
    console.print("\n[bold cyan]trafficspec[/bold cyan] - API spec synthesis from captured traffic\n")


def _load_traffic(har: str) -> TrafficIngestor:
    ingestor = TrafficIngestor()
    try:
        result = ingestor.parse_file(har)
    except (TrafficSpecError, OSError) as e:
        console.print(f"[red]Failed to load {har}: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[cyan]Loaded {result.total_requests} requests, {result.total_responses} responses[/cyan]"
    )
    return ingestor


def _infer_base_url(transactions: List[HttpTransaction], endpoint: ApiEndpoint) -> str:
    for transaction in transactions:
        parsed = urlparse(transaction.request.url)
        if (parsed.path or "/") == endpoint.path:
            return f"{parsed.scheme}://{parsed.netloc}"
    return ""


def _print_endpoints(discovery: EndpointDiscovery, endpoints: List[ApiEndpoint]) -> None:
    table = Table(title="Relevant endpoints")
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Seen", justify="right")
    table.add_column("Role")
    table.add_column("Confidence", justify="right")

    for endpoint in endpoints:
        validation = discovery.validate(endpoint)
        color = "green" if validation.is_valid else "yellow"
        table.add_row(
            endpoint.method,
            endpoint.path,
            str(endpoint.frequency),
            discovery.classifier.role_of(endpoint).value,
            f"[{color}]{validation.confidence}[/{color}]",
        )

    console.print(table)


def _print_validation(validation: SpecValidationResult) -> None:
    status = "[green]valid[/green]" if validation.is_valid else "[red]invalid[/red]"
    console.print(f"Spec is {status} (score {validation.score}/100)")
    for error in validation.errors:
        console.print(f"  [red]error:[/red] {error}")
    for warning in validation.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")


def _print_verification(result: VerificationResult) -> None:
    checks = [
        ("Encryption", result.encryption_test),
        ("Round trip", result.round_trip_test),
        ("Key pair", result.key_compatibility_test),
        ("Schemes", result.parameter_test),
    ]
    for name, check in checks:
        mark = "[green]ok[/green]" if check.success else f"[red]failed[/red] {check.error}"
        console.print(f"  {name}: {mark}")

    if result.compatible:
        console.print("[green]Key pair is compatible[/green]")
    else:
        console.print("[red]Key pair is not compatible[/red]")


@app.command()
def analyze(
    har: str = typer.Argument(..., help="HAR transcript to analyze"),
    base_url: str = typer.Option(None, "--base-url", help="Base URL for resolved endpoints"),
    filter_url: str = typer.Option(None, "--filter", help="Only consider URLs containing this text"),
    config: str = typer.Option(None, "-c", "--config", help="YAML analysis config"),
    fmt: str = typer.Option("markdown", "-f", "--format", help="Output format: markdown, json, typescript, yaml"),
    output: str = typer.Option(None, "-o", "--output", help="Write the export to this file"),
    public_key: str = typer.Option(None, "--public-key", help="PEM public key to verify encryption with"),
    private_key: str = typer.Option(None, "--private-key", help="PEM private key to verify encryption with"),
    key_size: int = typer.Option(None, "--key-size", help="Expected key size in bits (default: size of the private key)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose logging"),
):
    """Discover endpoints in a transcript and export an API spec."""
    setup_logging(verbose=verbose)

    if not verbose:
        print_banner()

    try:
        export_format = ExportFormat(fmt.lower())
    except ValueError:
        console.print(f"[red]Invalid format: {fmt}[/red]")
        console.print(f"[dim]Valid formats: {', '.join(f.value for f in ExportFormat)}[/dim]")
        raise typer.Exit(1)

    analysis_config = None
    if config:
        try:
            analysis_config = AnalysisConfig.from_yaml(config)
        except (OSError, ValueError) as e:
            console.print(f"[red]Invalid config {config}: {e}[/red]")
            raise typer.Exit(1)

    ingestor = _load_traffic(har)
    transactions = ingestor.get_transactions()

    discovery = EndpointDiscovery(analysis_config)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Discovering endpoints...", total=None)
        endpoints = discovery.identify_relevant_endpoints(transactions, filter_url)
        progress.update(task, completed=True)

    if not endpoints:
        console.print("[yellow]No relevant endpoints found[/yellow]")
        raise typer.Exit(1)

    _print_endpoints(discovery, endpoints)

    base = base_url if base_url is not None else _infer_base_url(transactions, endpoints[0])
    classifier = RoleClassifier(analysis_config.assembler_rules) if analysis_config else None
    assembler = SpecAssembler(classifier)
    assembler.assemble(endpoints, base, placeholder_encryption())

    verification = None
    if public_key and private_key:
        try:
            encryption_config = EncryptionConfig.from_pem_files(public_key, private_key)
            if key_size is None:
                key_size = load_private_key(encryption_config.private_key).key_size
        except (OSError, ValueError, TypeError) as e:
            console.print(f"[red]Failed to read keys: {e}[/red]")
            raise typer.Exit(1)

        verifier = EncryptionCompatibilityVerifier(encryption_config.model_copy(update={"key_size": key_size}))
        sample = next(
            (e.sample_request for e in endpoints if isinstance(e.sample_request, (dict, list))),
            CANARY_PAYLOAD,
        )
        verification = asyncio.run(verifier.verify(sample))
        _print_verification(verification)
        assembler.reconcile_encryption(verification)

    spec = assembler.get_current_spec()
    _print_validation(assembler.validate(spec))

    document = assembler.export(export_format)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document)
        console.print(f"[green]Spec saved to: {output_path}[/green]")
    else:
        typer.echo(document)

    if verification is not None and not verification.compatible:
        raise typer.Exit(1)


@app.command()
def stats(
    har: str = typer.Argument(..., help="HAR transcript to summarize"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose logging"),
):
    """Print transaction statistics for a transcript."""
    setup_logging(verbose=verbose)

    ingestor = _load_traffic(har)
    statistics = ingestor.get_statistics()

    table = Table(title="Traffic statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Transactions", str(statistics.total_transactions))
    table.add_row("Completed", str(statistics.completed_transactions))
    table.add_row("Unique endpoints", str(statistics.unique_endpoints))
    table.add_row("Completion rate", f"{statistics.completion_rate:.1f}%")
    console.print(table)


@app.command("verify-keys")
def verify_keys(
    public_key: str = typer.Option(..., "--public-key", help="PEM public key file"),
    private_key: str = typer.Option(..., "--private-key", help="PEM private key file"),
    sample: str = typer.Option(None, "--sample", help="JSON payload to test with"),
    scheme: str = typer.Option("pkcs1", "--scheme", help="Encryption scheme: pkcs1, pkcs1_oaep"),
    key_size: int = typer.Option(2048, "--key-size", help="Expected key size in bits"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose logging"),
):
    """Check that a key pair round-trips a sample payload."""
    setup_logging(verbose=verbose)

    payload = CANARY_PAYLOAD
    if sample:
        try:
            payload = json.loads(sample)
        except json.JSONDecodeError as e:
            console.print(f"[red]Sample is not valid JSON: {e}[/red]")
            raise typer.Exit(1)

    try:
        config = EncryptionConfig.from_pem_files(
            public_key, private_key, encryption_scheme=scheme, key_size=key_size
        )
    except OSError as e:
        console.print(f"[red]Failed to read keys: {e}[/red]")
        raise typer.Exit(1)

    verifier = EncryptionCompatibilityVerifier(config)
    result = asyncio.run(verifier.verify(payload))
    _print_verification(result)

    raise typer.Exit(0 if result.compatible else 1)


@app.command("check-encryption")
def check_encryption(
    algorithm: str = typer.Option("RSA", "--algorithm", help="Encryption algorithm"),
    key_size: int = typer.Option(2048, "--key-size", help="Key size in bits"),
    padding: str = typer.Option("PKCS1", "--padding", help="Padding scheme: PKCS1, OAEP"),
):
    """Validate an encryption descriptor without touching any keys."""
    result = validate_encryption_info(
        EncryptionInfo(algorithm=algorithm, key_size=key_size, padding=padding)
    )

    for error in result.errors:
        console.print(f"[red]error:[/red] {error}")
    for warning in result.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")

    if not result.is_valid:
        raise typer.Exit(1)
    console.print("[green]Encryption descriptor is valid[/green]")


if __name__ == "__main__":
    app()
